"""Pydantic schemas for the admin client.

All wire and in-memory models are defined here for easy import.
"""

from jewelry_admin.schemas.common import ApiErrorBody, UploadResponse
from jewelry_admin.schemas.category import (
    CategoryFormData,
    CategoryListEnvelope,
    CategoryNode,
    CategoryRecord,
    OccasionEntry,
)
from jewelry_admin.schemas.product import ProductListEnvelope, ProductSummary
from jewelry_admin.schemas.metal_price import MetalPriceEvent, MetalRate, MetalRateListResponse

__all__ = [
    # Common
    "ApiErrorBody",
    "UploadResponse",
    # Category
    "CategoryRecord",
    "CategoryNode",
    "CategoryFormData",
    "CategoryListEnvelope",
    "OccasionEntry",
    # Product
    "ProductSummary",
    "ProductListEnvelope",
    # Metal price
    "MetalRate",
    "MetalRateListResponse",
    "MetalPriceEvent",
]
