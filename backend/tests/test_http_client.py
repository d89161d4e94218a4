"""Tests for the admin HTTP client, its interceptors and the typed category endpoints."""

import json

import httpx
import pytest

from jewelry_admin.client.http import UnauthorizedInterceptor
from jewelry_admin.client.session import AdminSession
from jewelry_admin.core.exceptions import (
    ApiError,
    NetworkError,
    NotFoundError,
    ResponseParseError,
    UnauthorizedError,
)
from jewelry_admin.services.category_api import CategoryApi, unwrap_list


# ============================================================================
# TESTS: REQUESTS AND ERROR MAPPING
# ============================================================================

class TestAdminHttpClient:
    """Tests for AdminHttpClient.request_json."""

    async def test_bearer_token_attached(self, make_client):
        client = make_client(lambda request: httpx.Response(200, json={"ok": True}))

        body = await client.request_json("GET", "/api/admin/categories")

        assert body == {"ok": True}
        assert client.requests[0].headers["Authorization"] == "Bearer admin-token"

    async def test_no_token_no_header(self, make_client):
        client = make_client(lambda request: httpx.Response(200, json=[]), session=AdminSession())

        await client.request_json("GET", "/api/admin/categories")

        assert "Authorization" not in client.requests[0].headers

    async def test_empty_body_returns_none(self, make_client):
        client = make_client(lambda request: httpx.Response(204))

        assert await client.request_json("DELETE", "/api/admin/categories/1") is None

    async def test_non_json_success_body(self, make_client):
        client = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(ResponseParseError):
            await client.request_json("GET", "/api/admin/categories")

    @pytest.mark.parametrize("body,expected", [
        ({"error": "Failed", "details": "Duplicate slug"}, "Duplicate slug"),
        ({"error": "Failed to create category"}, "Failed to create category"),
        ({"message": "Nope"}, "Nope"),
        ({}, "Fallback"),
    ])
    async def test_error_message_resolution(self, make_client, body, expected):
        client = make_client(lambda request: httpx.Response(500, json=body))

        with pytest.raises(ApiError) as exc_info:
            await client.request_json("POST", "/api/admin/categories", json={}, fallback_error="Fallback")

        assert exc_info.value.message == expected
        assert exc_info.value.status_code == 500

    async def test_non_json_error_body_uses_fallback(self, make_client):
        client = make_client(lambda request: httpx.Response(502, text="Bad Gateway"))

        with pytest.raises(ApiError) as exc_info:
            await client.request_json("GET", "/api/admin/products", fallback_error="Failed to fetch products")

        assert exc_info.value.message == "Failed to fetch products"

    async def test_specific_error_types(self, make_client):
        statuses = iter([404, 401])
        client = make_client(lambda request: httpx.Response(next(statuses), json={"error": "x"}))

        with pytest.raises(NotFoundError):
            await client.request_json("GET", "/api/admin/categories/missing")
        with pytest.raises(UnauthorizedError):
            await client.request_json("GET", "/api/admin/categories")

    async def test_transport_failure_becomes_network_error(self, make_client):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        with pytest.raises(NetworkError):
            await client.request_json("GET", "/api/admin/categories")

    async def test_undecodable_body_becomes_network_error(self, make_client):
        async def corrupt_body():
            yield b"definitely not gzip"

        client = make_client(lambda request: httpx.Response(
            500, headers={"Content-Encoding": "gzip"}, content=corrupt_body()
        ))

        with pytest.raises(NetworkError) as exc_info:
            await client.request_json("POST", "/api/admin/categories", json={})

        assert isinstance(exc_info.value.__cause__, httpx.DecodingError)

    async def test_redirect_loop_becomes_network_error(self, make_client):
        client = make_client(lambda request: httpx.Response(
            302, headers={"Location": "/api/admin/categories"}
        ))
        client._client.follow_redirects = True
        client._client.max_redirects = 2

        with pytest.raises(NetworkError) as exc_info:
            await client.request_json("GET", "/api/admin/categories")

        assert isinstance(exc_info.value.__cause__, httpx.TooManyRedirects)

    async def test_context_manager_closes(self, make_client):
        client = make_client(lambda request: httpx.Response(200, json={}))

        async with client as entered:
            assert entered is client

        assert client._client.is_closed


# ============================================================================
# TESTS: UNAUTHORIZED INTERCEPTOR
# ============================================================================

class TestUnauthorizedInterceptor:
    """Tests for the forced-logout response interceptor."""

    @pytest.mark.parametrize("path,applies", [
        ("/api/admin/categories", True),
        ("/api/auth/me", True),
        ("/api/auth/customer/me", False),
        ("/api/public/categories", False),
    ])
    def test_applies_to(self, path, applies):
        assert UnauthorizedInterceptor.applies_to(path) is applies

    @pytest.mark.parametrize("status", [401, 403])
    async def test_admin_rejection_clears_session_and_logs_out(self, make_client, session, status):
        redirects = []
        session.set("customerToken", "customer-token")
        client = make_client(lambda request: httpx.Response(status, json={"error": "Unauthorized"}))
        client.add_interceptor(UnauthorizedInterceptor(session, redirects.append, login_url="/login"))

        with pytest.raises(UnauthorizedError):
            await client.request_json("GET", "/api/admin/categories")

        assert session.token is None
        assert session.get("customerToken") is None
        assert redirects == ["/login"]

    async def test_customer_endpoint_rejection_leaves_session(self, make_client, session):
        redirects = []
        client = make_client(lambda request: httpx.Response(401, json={}))
        client.add_interceptor(UnauthorizedInterceptor(session, redirects.append))

        with pytest.raises(UnauthorizedError):
            await client.request_json("GET", "/api/auth/customer/profile")

        assert session.token == "admin-token"
        assert redirects == []

    async def test_success_passes_through(self, make_client, session):
        redirects = []
        client = make_client(lambda request: httpx.Response(200, json=[]))
        client.add_interceptor(UnauthorizedInterceptor(session, redirects.append))

        await client.request_json("GET", "/api/admin/categories")

        assert session.is_authenticated
        assert redirects == []


# ============================================================================
# TESTS: CATEGORY API
# ============================================================================

class TestCategoryApi:
    """Tests for typed category, product and upload endpoints."""

    async def test_list_categories_wrapped(self, make_client):
        client = make_client(lambda request: httpx.Response(200, json={
            "categories": [
                {"_id": "a", "name": "Rings", "parentId": None, "productCount": 4},
                {"_id": "b", "name": "Bands", "parentId": "a", "createdAt": "2024-01-01"},
            ],
            "total": 2,
        }))

        categories = await CategoryApi(client).list_categories()

        assert [c.id for c in categories] == ["a", "b"]
        assert categories[0].product_count == 4
        assert categories[1].parent_id == "a"

    async def test_list_categories_raw_array(self, make_client):
        client = make_client(lambda request: httpx.Response(200, json=[{"_id": "a", "name": "Rings"}]))

        categories = await CategoryApi(client).list_categories()

        assert categories[0].name == "Rings"

    async def test_null_fields_use_defaults(self, make_client):
        client = make_client(lambda request: httpx.Response(200, json=[{
            "_id": "a", "name": "Rings", "slug": None, "status": None,
            "featured": None, "displayOrder": None, "productCount": None,
        }]))

        category = (await CategoryApi(client).list_categories())[0]

        assert category.slug == ""
        assert category.status == "active"
        assert category.featured is False
        assert category.display_order == 0
        assert category.product_count == 0

    async def test_unexpected_shape_is_empty(self, make_client):
        client = make_client(lambda request: httpx.Response(200, json={"data": "nothing"}))

        assert await CategoryApi(client).list_categories() == []

    async def test_invalid_item_fails_fast(self, make_client):
        client = make_client(lambda request: httpx.Response(200, json={"categories": [{"_id": "a"}]}))

        with pytest.raises(ResponseParseError):
            await CategoryApi(client).list_categories()

    async def test_filters_become_query_params(self, make_client):
        client = make_client(lambda request: httpx.Response(200, json={"categories": []}))

        await CategoryApi(client).list_categories(search="gold", status="active", featured="all")

        params = client.requests[0].url.params
        assert params["search"] == "gold"
        assert params["status"] == "active"
        assert "featured" not in params

    async def test_update_category_puts_json(self, make_client):
        client = make_client(lambda request: httpx.Response(200, json={"_id": "a", "name": "Rings"}))

        await CategoryApi(client).update_category("a", {"name": "Rings", "slug": "rings"})

        request = client.requests[0]
        assert request.method == "PUT"
        assert request.url.path == "/api/admin/categories/a"
        assert json.loads(request.content) == {"name": "Rings", "slug": "rings"}

    async def test_get_category_requires_object(self, make_client):
        client = make_client(lambda request: httpx.Response(200, json=["not", "an", "object"]))

        with pytest.raises(ResponseParseError):
            await CategoryApi(client).get_category("a")

    async def test_list_products(self, make_client):
        client = make_client(lambda request: httpx.Response(200, json={
            "products": [{"_id": "p1", "name": "Ring", "mainImage": "https://cdn.test/p1.jpg"}],
        }))

        products = await CategoryApi(client).list_products()

        assert products[0].main_image == "https://cdn.test/p1.jpg"

    async def test_upload_asset(self, make_client):
        client = make_client(lambda request: httpx.Response(200, json={"url": "https://cdn.test/a.png"}))

        url = await CategoryApi(client).upload_asset("a.png", b"\x89PNG", "image/png")

        request = client.requests[0]
        assert url == "https://cdn.test/a.png"
        assert request.url.path == "/api/upload"
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        assert b'name="file"' in request.content

    async def test_upload_without_url(self, make_client):
        client = make_client(lambda request: httpx.Response(200, json={"ok": True}))

        with pytest.raises(ResponseParseError):
            await CategoryApi(client).upload_asset("a.png", b"x")

    def test_unwrap_list(self):
        assert unwrap_list([1], "categories") == [1]
        assert unwrap_list({"categories": [2]}, "categories") == [2]
        assert unwrap_list({"categories": "x"}, "categories") == []
        assert unwrap_list(None, "categories") == []
