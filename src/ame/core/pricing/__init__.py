"""Model pricing lookup and caching."""

from ame.core.pricing.cache import DEFAULT_TTL_SECONDS, PricingCache, fetch_pricing
from ame.core.pricing.models import DEFAULT_PRICING, CatalogModel, ModelPricing, PricingSource
from ame.core.pricing.source import HttpPricingSource

__all__ = [
    "DEFAULT_PRICING",
    "DEFAULT_TTL_SECONDS",
    "CatalogModel",
    "HttpPricingSource",
    "ModelPricing",
    "PricingCache",
    "PricingSource",
    "fetch_pricing",
]
