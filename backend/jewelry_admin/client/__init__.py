"""HTTP client and session used by every service."""

from jewelry_admin.client.http import AdminHttpClient, UnauthorizedInterceptor
from jewelry_admin.client.session import AdminSession

__all__ = ["AdminHttpClient", "AdminSession", "UnauthorizedInterceptor"]
