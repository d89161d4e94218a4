"""HTTP client for the storefront admin API.

Wraps httpx.AsyncClient so every request carries the session token and
every response passes through the configured interceptors before the
caller sees it. Non-2xx responses and undecodable bodies are turned into
the exceptions in jewelry_admin.core.exceptions.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
import structlog

from jewelry_admin.client.session import AdminSession
from jewelry_admin.config import settings
from jewelry_admin.core.exceptions import (
    ApiError,
    NetworkError,
    NotFoundError,
    ResponseParseError,
    UnauthorizedError,
)
from jewelry_admin.schemas.common import ApiErrorBody

logger = structlog.get_logger(__name__)

ResponseInterceptor = Callable[[httpx.Response], Awaitable[None]]


class UnauthorizedInterceptor:
    """Clears the session and triggers a logout when admin calls are rejected.

    Only admin and (non-customer) auth endpoints count; a 401 from a public
    or customer endpoint leaves the admin session alone.
    """

    def __init__(
        self,
        session: AdminSession,
        on_logout: Optional[Callable[[str], None]] = None,
        login_url: Optional[str] = None,
    ):
        self.session = session
        self.on_logout = on_logout
        self.login_url = login_url or settings.LOGIN_URL

    @staticmethod
    def applies_to(path: str) -> bool:
        if "/api/admin/" in path:
            return True
        return "/api/auth/" in path and "/api/auth/customer/" not in path

    async def __call__(self, response: httpx.Response) -> None:
        if response.status_code not in (401, 403):
            return

        path = response.request.url.path
        if not self.applies_to(path):
            return

        logger.warning(
            "admin_session_expired",
            path=path,
            status_code=response.status_code,
        )
        self.session.clear()
        if self.on_logout:
            self.on_logout(self.login_url)


class AdminHttpClient:
    """Async JSON client bound to one API base URL and one session."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[AdminSession] = None,
        timeout: Optional[float] = None,
        interceptors: Optional[List[ResponseInterceptor]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            base_url: API origin, defaults to API_BASE_URL
            session: Token store; a fresh empty session if omitted
            timeout: Request timeout in seconds, defaults to API_TIMEOUT_SECONDS
            interceptors: Async callables run on every response
            transport: Optional httpx transport (tests inject MockTransport)
        """
        self.session = session or AdminSession()
        self.interceptors: List[ResponseInterceptor] = list(interceptors or [])
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout if timeout is not None else settings.API_TIMEOUT_SECONDS,
            transport=transport,
            event_hooks={
                "request": [self._attach_token],
                "response": [self._run_interceptors],
            },
        )
        self.logger = logger.bind(base_url=str(self._client.base_url))

    def add_interceptor(self, interceptor: ResponseInterceptor) -> None:
        self.interceptors.append(interceptor)

    async def _attach_token(self, request: httpx.Request) -> None:
        token = self.session.token
        if token and "Authorization" not in request.headers:
            request.headers["Authorization"] = f"Bearer {token}"

    async def _run_interceptors(self, response: httpx.Response) -> None:
        for interceptor in self.interceptors:
            await interceptor(response)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send a request, translating any httpx request failure into NetworkError.

        This covers transport errors as well as undecodable bodies and
        redirect loops, so callers only ever handle JewelryAdminException.
        """
        try:
            return await self._client.request(method, path, params=params, json=json, files=files)
        except httpx.RequestError as e:
            self.logger.error(
                "http_request_failed_without_response",
                method=method,
                path=path,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise NetworkError(path, str(e)) from e

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        files: Optional[Dict[str, Any]] = None,
        fallback_error: str = "Request failed",
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Returns:
            Decoded body, or None for an empty 2xx response

        Raises:
            ApiError: Non-2xx status (UnauthorizedError / NotFoundError when specific)
            NetworkError: The request never got a usable response
            ResponseParseError: A 2xx body that is not JSON
        """
        response = await self.request(method, path, params=params, json=json, files=files)

        if not response.is_success:
            raise self._error_for(response, fallback_error)

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise ResponseParseError(path, str(e)) from e

    async def upload(
        self,
        path: str,
        filename: str,
        content: bytes,
        content_type: str = "application/octet-stream",
        fallback_error: str = "Upload failed",
    ) -> Any:
        """POST a single file as multipart form field 'file'."""
        return await self.request_json(
            "POST",
            path,
            files={"file": (filename, content, content_type)},
            fallback_error=fallback_error,
        )

    def stream(self, method: str, path: str, **kwargs: Any):
        """Open a streaming response; use as an async context manager."""
        return self._client.stream(method, path, **kwargs)

    def _error_for(self, response: httpx.Response, fallback: str) -> ApiError:
        try:
            body = ApiErrorBody.model_validate(response.json())
        except ValueError:
            body = ApiErrorBody()

        message = body.best_message(fallback)
        status_code = response.status_code
        self.logger.warning(
            "http_request_failed",
            path=response.request.url.path,
            status_code=status_code,
            error=message,
        )

        if status_code in (401, 403):
            return UnauthorizedError(status_code, message, body.details)
        if status_code == 404:
            return NotFoundError(status_code, message, body.details)
        return ApiError(status_code, message, body.details)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AdminHttpClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
