"""Category Pydantic schemas for wire parsing and in-memory trees."""

from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


def to_int(value: Any) -> int:
    """Lenient integer parse for numeric inputs: blank and junk become 0."""
    if isinstance(value, (bool, int)):
        return int(value)
    try:
        return int(float(str(value).strip()))
    except (ValueError, OverflowError):
        return 0


class CategoryRecord(BaseModel):
    """One category as returned by GET /api/admin/categories."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str
    slug: str = ""
    parent_id: Optional[str] = None
    status: str = "active"
    featured: bool = False
    display_order: int = 0
    product_count: int = 0

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        # Mongo ObjectIds sometimes arrive as {"$oid": "..."}
        if isinstance(value, dict) and "$oid" in value:
            return value["$oid"]
        return str(value) if value is not None else value

    @field_validator("parent_id", mode="before")
    @classmethod
    def falsy_parent_is_root(cls, value: Any) -> Optional[str]:
        """'', 'none' and null all mean "no parent"."""
        if not value or value == "none":
            return None
        return str(value)

    @field_validator("slug", "status", "featured", "display_order", "product_count", mode="before")
    @classmethod
    def null_is_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


class CategoryNode(CategoryRecord):
    """Category with nested children for tree structure."""

    children: List["CategoryNode"] = []
    orphaned: bool = False  # parent_id points at a category that was not fetched


class OccasionEntry(BaseModel):
    """An occasion listed under a category's mega-menu. Stored inside the category."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    product_id: Optional[str] = None
    image: Optional[str] = None  # snapshot of the product's main image at bind time


class CategoryFormData(BaseModel):
    """Editable category document, sent as the POST/PUT body."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        validate_assignment=True,
    )

    name: str = ""
    slug: str = ""
    parent_id: Optional[str] = None
    description: str = ""
    short_description: str = ""
    image: str = ""
    icon: str = ""
    banner: str = ""
    display_on_homepage: bool = True
    display_order: int = 0
    position: int = 0
    status: str = "active"
    meta_title: str = ""
    meta_description: str = ""
    focus_keywords: List[str] = []
    canonical_url: str = ""
    og_image: str = ""
    commission_rate: int = 0
    featured: bool = False
    show_product_count: bool = True
    occasions: List[OccasionEntry] = []
    mega_menu_product_id: Optional[str] = None

    @field_validator("parent_id", "mega_menu_product_id", mode="before")
    @classmethod
    def blank_reference_is_none(cls, value: Any) -> Optional[str]:
        if not value or value == "none":
            return None
        return str(value)

    @field_validator("focus_keywords", mode="before")
    @classmethod
    def keywords_must_be_list(cls, value: Any) -> List[str]:
        return value if isinstance(value, list) else []

    @field_validator("occasions", mode="before")
    @classmethod
    def null_occasions_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("display_on_homepage", "featured", "show_product_count", mode="before")
    @classmethod
    def null_flag_is_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("display_order", "position", "commission_rate", mode="before")
    @classmethod
    def lenient_int(cls, value: Any) -> int:
        return to_int(value)

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, value: Any) -> str:
        return value or "active"

    @field_validator(
        "description", "short_description", "image", "icon", "banner",
        "meta_title", "meta_description", "canonical_url", "og_image", "slug",
        mode="before",
    )
    @classmethod
    def null_text_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class CategoryListEnvelope(BaseModel):
    """GET /api/admin/categories body when wrapped."""

    categories: List[CategoryRecord] = []
    total: Optional[int] = None
