"""Typed wrappers for the category, product and upload endpoints.

Each method validates the response at the network edge so callers only ever
see CategoryRecord / ProductSummary instances or a ResponseParseError.
"""

from typing import Any, Dict, List, Optional

import structlog
from pydantic import TypeAdapter, ValidationError

from jewelry_admin.client.http import AdminHttpClient
from jewelry_admin.core.exceptions import ResponseParseError
from jewelry_admin.schemas import CategoryRecord, ProductSummary, UploadResponse

logger = structlog.get_logger(__name__)

CATEGORIES_PATH = "/api/admin/categories"
PRODUCTS_PATH = "/api/admin/products"
UPLOAD_PATH = "/api/upload"

_category_list = TypeAdapter(List[CategoryRecord])
_product_list = TypeAdapter(List[ProductSummary])


def unwrap_list(payload: Any, key: str) -> List[Any]:
    """Accept either a raw array or {key: [...]}; anything else is an empty list."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get(key), list):
        return payload[key]
    logger.warning("unexpected_list_payload", key=key, payload_type=type(payload).__name__)
    return []


class CategoryApi:
    """Category admin endpoints plus the product list and asset upload they depend on."""

    def __init__(self, client: AdminHttpClient):
        self.client = client

    async def list_categories(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        featured: Optional[str] = None,
    ) -> List[CategoryRecord]:
        """Fetch categories, optionally filtered server-side.

        Args:
            search: Case-insensitive match on name or slug
            status: 'active' / 'inactive'; 'all' or None disables the filter
            featured: 'true' / 'false'; 'all' or None disables the filter

        Returns:
            Categories in server order
        """
        params: Dict[str, str] = {}
        if search:
            params["search"] = search
        if status and status != "all":
            params["status"] = status
        if featured and featured != "all":
            params["featured"] = featured

        payload = await self.client.request_json(
            "GET",
            CATEGORIES_PATH,
            params=params or None,
            fallback_error="Failed to fetch categories",
        )
        items = unwrap_list(payload, "categories")
        try:
            categories = _category_list.validate_python(items)
        except ValidationError as e:
            raise ResponseParseError(CATEGORIES_PATH, str(e)) from e

        logger.debug("categories_fetched", count=len(categories), filters=params)
        return categories

    async def get_category(self, category_id: str) -> Dict[str, Any]:
        path = f"{CATEGORIES_PATH}/{category_id}"
        payload = await self.client.request_json(
            "GET", path, fallback_error="Failed to load category details"
        )
        if not isinstance(payload, dict):
            raise ResponseParseError(path, "expected a JSON object")
        return payload

    async def create_category(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.request_json(
            "POST", CATEGORIES_PATH, json=payload, fallback_error="Failed to save category"
        ) or {}

    async def update_category(self, category_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.request_json(
            "PUT",
            f"{CATEGORIES_PATH}/{category_id}",
            json=payload,
            fallback_error="Failed to update category",
        ) or {}

    async def delete_category(self, category_id: str) -> None:
        await self.client.request_json(
            "DELETE",
            f"{CATEGORIES_PATH}/{category_id}",
            fallback_error="Failed to delete category",
        )

    async def list_products(self) -> List[ProductSummary]:
        payload = await self.client.request_json(
            "GET", PRODUCTS_PATH, fallback_error="Failed to fetch products"
        )
        items = unwrap_list(payload, "products")
        try:
            return _product_list.validate_python(items)
        except ValidationError as e:
            raise ResponseParseError(PRODUCTS_PATH, str(e)) from e

    async def upload_asset(
        self,
        filename: str,
        content: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        """Upload an image and return its public URL."""
        payload = await self.client.upload(UPLOAD_PATH, filename, content, content_type)
        try:
            return UploadResponse.model_validate(payload).url
        except ValidationError as e:
            raise ResponseParseError(UPLOAD_PATH, str(e)) from e
