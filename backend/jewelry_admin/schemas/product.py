"""Product Pydantic schemas used by the category pickers."""

from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ProductSummary(BaseModel):
    """Minimal product view for occasion and mega-menu pickers."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str = ""
    main_image: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        if isinstance(value, dict) and "$oid" in value:
            return value["$oid"]
        return str(value) if value is not None else value


class ProductListEnvelope(BaseModel):
    """GET /api/admin/products body when wrapped."""

    products: List[ProductSummary] = []
