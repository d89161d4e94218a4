"""Pytest configuration and shared fixtures."""

from typing import Any, Callable, List
from unittest.mock import AsyncMock

import httpx
import pytest

from jewelry_admin.client.http import AdminHttpClient
from jewelry_admin.client.session import AdminSession
from jewelry_admin.core.notifications import Notifier
from jewelry_admin.services.category_api import CategoryApi


@pytest.fixture
def anyio_backend():
    """Use asyncio as the async backend for tests."""
    return "asyncio"


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def session() -> AdminSession:
    return AdminSession({"adminToken": "admin-token", "adminUser": "root"})


@pytest.fixture
def category_api() -> AsyncMock:
    """CategoryApi double whose methods are AsyncMocks."""
    return AsyncMock(spec=CategoryApi)


@pytest.fixture
def make_client(session: AdminSession):
    """Build an AdminHttpClient served by an in-process handler.

    The handler receives the httpx.Request and returns an httpx.Response.
    Every request seen is recorded on `client.requests`.
    """
    def _make(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> AdminHttpClient:
        seen: List[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        client = AdminHttpClient(
            base_url="http://shop.test",
            session=kwargs.pop("session", session),
            transport=httpx.MockTransport(_record),
            **kwargs,
        )
        client.requests = seen
        return client

    return _make

