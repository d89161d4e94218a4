"""Create/edit form state for a single category."""

from typing import Any, Callable, Dict, List, Optional

import structlog
from pydantic import ValidationError

from jewelry_admin.categories.slug import slugify
from jewelry_admin.core.callbacks import invoke
from jewelry_admin.core.exceptions import JewelryAdminException, ResponseParseError, ValidationFailed
from jewelry_admin.core.notifications import Notifier
from jewelry_admin.schemas import CategoryFormData, CategoryRecord, OccasionEntry, ProductSummary
from jewelry_admin.services.category_api import CATEGORIES_PATH, CategoryApi

logger = structlog.get_logger(__name__)

LISTING_PATH = "/admin/categories"

ASSET_FIELDS = frozenset({"image", "icon", "banner", "og_image"})
SERVER_MANAGED_FIELDS = ("_id", "createdAt", "updatedAt")


class CategoryForm:
    """Form bound to one category record, or to defaults when creating.

    Field errors live in `errors` keyed by field name and are cleared as soon
    as that field is edited. Submission never discards entered values; on
    failure the form can simply be submitted again.
    """

    def __init__(
        self,
        api: CategoryApi,
        category_id: Optional[str] = None,
        notifier: Optional[Notifier] = None,
        on_saved: Optional[Callable[[str], Any]] = None,
    ):
        self.api = api
        self.category_id = category_id
        self.notifier = notifier or Notifier()
        self.on_saved = on_saved

        self.data = CategoryFormData()
        self.errors: Dict[str, str] = {}
        self.loading = False
        self.parent_options: List[CategoryRecord] = []
        self.products: List[ProductSummary] = []

    @property
    def is_edit(self) -> bool:
        return bool(self.category_id)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> None:
        await self.load_parent_options()
        await self.load_products()
        if self.is_edit:
            await self.load_category()

    async def load_parent_options(self) -> None:
        try:
            categories = await self.api.list_categories()
        except JewelryAdminException as e:
            logger.error("parent_categories_fetch_failed", error=e.message)
            return
        # a category cannot be its own parent
        self.parent_options = [c for c in categories if c.id != self.category_id]

    async def load_products(self) -> None:
        try:
            self.products = await self.api.list_products()
        except JewelryAdminException as e:
            logger.error("products_fetch_failed", error=e.message)

    async def load_category(self) -> None:
        """Fetch the category being edited and flatten it over the defaults."""
        self.loading = True
        try:
            raw = await self.api.get_category(self.category_id)
            merged = {**self.data.model_dump(by_alias=True), **raw}
            merged["icon"] = raw.get("icon") or raw.get("image") or ""
            try:
                self.data = CategoryFormData.model_validate(merged)
            except ValidationError as e:
                raise ResponseParseError(f"{CATEGORIES_PATH}/{self.category_id}", str(e)) from e
            logger.debug("category_loaded", category_id=self.category_id)
        except JewelryAdminException as e:
            logger.error("category_fetch_failed", category_id=self.category_id, error=e.message)
            self.notifier.error(e.message or "Failed to load category details")
        finally:
            self.loading = False

    # ------------------------------------------------------------------
    # Field mutation
    # ------------------------------------------------------------------

    def update_field(self, field: str, value: Any) -> None:
        if field not in CategoryFormData.model_fields:
            raise ValueError(f"Unknown category field: {field}")

        setattr(self.data, field, value)
        self.clear_error(field)

        # only new categories follow their name; an existing slug is left alone
        if field == "name" and not self.is_edit:
            self.data.slug = slugify(value)
            self.clear_error("slug")

    def clear_error(self, field: str) -> None:
        self.errors.pop(field, None)

    def add_focus_keyword(self, keyword: str) -> bool:
        keyword = keyword.strip()
        if not keyword:
            return False
        self.data.focus_keywords.append(keyword)
        return True

    def remove_focus_keyword(self, index: int) -> None:
        del self.data.focus_keywords[index]

    # ------------------------------------------------------------------
    # Occasions and product references
    # ------------------------------------------------------------------

    def find_product(self, product_id: str) -> Optional[ProductSummary]:
        return next((p for p in self.products if p.id == product_id), None)

    def search_products(self, term: str) -> List[ProductSummary]:
        if not term:
            return list(self.products)
        needle = term.lower()
        return [p for p in self.products if needle in p.name.lower()]

    def add_occasion(self, name: str) -> Optional[OccasionEntry]:
        name = name.strip()
        if not name:
            return None
        occasion = OccasionEntry(name=name)
        self.data.occasions.append(occasion)
        return occasion

    def remove_occasion(self, index: int) -> None:
        del self.data.occasions[index]

    def bind_occasion_product(self, index: int, product_id: Optional[str]) -> OccasionEntry:
        """Attach a product to an occasion, copying its main image onto the entry.

        The image is a snapshot; later changes to the product are not synced.
        Passing None detaches the product.
        """
        occasion = self.data.occasions[index]
        if not product_id:
            occasion.product_id = None
            occasion.image = None
            return occasion

        product = self.find_product(product_id)
        if product is None:
            raise ValueError(f"Unknown product: {product_id}")
        occasion.product_id = product.id
        occasion.image = product.main_image
        return occasion

    def set_mega_menu_product(self, product_id: Optional[str]) -> None:
        if product_id and self.find_product(product_id) is None:
            raise ValueError(f"Unknown product: {product_id}")
        self.data.mega_menu_product_id = product_id or None

    async def upload_asset(
        self,
        field: str,
        filename: str,
        content: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        """Upload an image and store its URL on one of the image fields."""
        if field not in ASSET_FIELDS:
            raise ValueError(f"Not an image field: {field}")
        try:
            url = await self.api.upload_asset(filename, content, content_type)
        except JewelryAdminException as e:
            logger.error("category_asset_upload_failed", field=field, error=e.message)
            self.notifier.error(e.message or "Failed to upload image")
            raise
        self.update_field(field, url)
        self.notifier.success("Image uploaded successfully")
        return url

    # ------------------------------------------------------------------
    # Validation and submission
    # ------------------------------------------------------------------

    def validate(self) -> bool:
        errors: Dict[str, str] = {}
        if not self.data.name.strip():
            errors["name"] = "Category name is required"
        self.errors = errors
        return not errors

    def ensure_valid(self) -> None:
        if not self.validate():
            raise ValidationFailed(dict(self.errors))

    def to_payload(self) -> Dict[str, Any]:
        """Request body for POST/PUT, without server-managed fields."""
        payload = self.data.model_dump(by_alias=True)
        payload["occasions"] = [
            occasion.model_dump(by_alias=True, exclude_none=True)
            for occasion in self.data.occasions
        ]
        for key in SERVER_MANAGED_FIELDS:
            payload.pop(key, None)
        return payload

    async def submit(self) -> bool:
        """Validate and save.

        Returns:
            True when saved (and on_saved was called with the listing path)
        """
        if self.loading:
            logger.debug("category_submit_ignored", reason="request_in_flight")
            return False

        try:
            self.ensure_valid()
        except ValidationFailed as e:
            self.notifier.error(e.message, title="Validation Error")
            return False

        self.loading = True
        try:
            payload = self.to_payload()
            if self.is_edit:
                await self.api.update_category(self.category_id, payload)
            else:
                await self.api.create_category(payload)
        except JewelryAdminException as e:
            logger.error("category_save_failed", category_id=self.category_id, error=e.message)
            self.notifier.error(e.message or "Failed to save category")
            return False
        finally:
            self.loading = False

        action = "updated" if self.is_edit else "created"
        logger.info("category_saved", category_id=self.category_id, action=action)
        self.notifier.success(f"Category {action} successfully")
        await invoke(self.on_saved, LISTING_PATH)
        return True
