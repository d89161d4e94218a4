"""Common Pydantic schemas used across the admin API."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class ApiErrorBody(BaseModel):
    """Error body returned by the storefront API on non-2xx responses."""

    model_config = ConfigDict(extra="ignore")

    error: Optional[str] = None
    details: Optional[str] = None
    message: Optional[str] = None

    def best_message(self, fallback: str) -> str:
        """Most specific message available, else the fallback."""
        return self.details or self.error or self.message or fallback


class UploadResponse(BaseModel):
    """POST /api/upload response."""

    model_config = ConfigDict(extra="ignore")

    url: str
