"""Services module wrapping the storefront admin API.

Each service owns one group of endpoints and validates responses at the
network edge before handing typed objects to the views.
"""

from jewelry_admin.services.category_api import CategoryApi
from jewelry_admin.services.metal_price import MetalPriceApi, MetalPriceFeed, MetalPricePanel

__all__ = [
    "CategoryApi",
    "MetalPriceApi",
    "MetalPriceFeed",
    "MetalPricePanel",
]
