"""Metal price schemas for the rate list and the server-push feed."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class MetalRate(BaseModel):
    """Current per-gram rate for one metal type."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    metal_type: str
    rate: float
    product_count: int = 0


class MetalRateListResponse(BaseModel):
    """GET /api/admin/metal-prices response."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    metal_rates: List[MetalRate] = []


class MetalPriceEvent(BaseModel):
    """One message from the metal-price event stream."""

    model_config = ConfigDict(extra="ignore")

    type: str
    data: Dict[str, Any] = {}

    @property
    def metal_type(self) -> Optional[str]:
        return self.data.get("metalType")

    @property
    def new_rate(self) -> Optional[float]:
        rate = self.data.get("newRate")
        return float(rate) if rate is not None else None

    @property
    def updated_count(self) -> int:
        return int(self.data.get("updatedCount") or 0)
