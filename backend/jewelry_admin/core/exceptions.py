"""Custom exception classes for the admin client."""

from typing import Dict, List, Optional


class JewelryAdminException(Exception):
    """Base exception for all admin client errors."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class ValidationFailed(JewelryAdminException):
    """Raised when client-side validation blocks an action."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        super().__init__("Please fill in all required fields")


class ApiError(JewelryAdminException):
    """Raised when the storefront API answers with a non-2xx status."""

    def __init__(self, status_code: int, message: str, details: Optional[str] = None):
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class UnauthorizedError(ApiError):
    """Raised on 401/403 responses."""


class NotFoundError(ApiError):
    """Raised on 404 responses."""


class NetworkError(JewelryAdminException):
    """Raised when the request never produced a response."""

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(f"Network error for {url}: {message}")


class ResponseParseError(JewelryAdminException):
    """Raised when a response body is not valid JSON or fails schema validation."""

    def __init__(self, endpoint: str, message: str):
        self.endpoint = endpoint
        super().__init__(f"Malformed response from {endpoint}: {message}")


class CategoryCycleError(JewelryAdminException):
    """Raised when category parent pointers form one or more cycles."""

    def __init__(self, cycles: List[List[str]]):
        self.cycles = cycles
        chains = "; ".join(" -> ".join(cycle + cycle[:1]) for cycle in cycles)
        super().__init__(f"Category hierarchy contains a cycle: {chains}")
