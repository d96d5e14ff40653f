"""Time-bounded pricing cache and the catalog lookup that fills it.

The cache is an ordinary object owned by the caller; share one instance
across executions to reuse fetched prices. Concurrent refills of the same
key are harmless (last write wins).
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from pydantic import ValidationError

from ame.core.pricing.models import CatalogModel, ModelPricing

if TYPE_CHECKING:
    from collections.abc import Callable

    from ame.core.pricing.models import PricingSource

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60


class PricingCache:
    """Key → (pricing, expiry) store keyed by ``provider:model``."""

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, tuple[ModelPricing, float]] = {}

    @staticmethod
    def key(provider: str, model: str) -> str:
        return f"{provider.lower()}:{model}"

    def get(self, provider: str, model: str) -> ModelPricing | None:
        """Return a fresh entry, dropping it if expired."""
        key = self.key(provider, model)
        entry = self._entries.get(key)
        if entry is None:
            return None
        pricing, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return pricing

    def put(self, pricing: ModelPricing) -> None:
        self._entries[self.key(pricing.provider, pricing.model)] = (
            pricing,
            self._clock() + self.ttl,
        )

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


async def fetch_pricing(
    provider: str,
    model: str,
    source: PricingSource,
    cache: PricingCache,
) -> ModelPricing | None:
    """Return pricing for *provider*/*model*, consulting *cache* first.

    On a miss the full catalog is fetched from *source*. Failures are
    logged and return ``None`` so callers fall back to default pricing.
    """
    cached = cache.get(provider, model)
    if cached is not None:
        logger.debug("Using cached pricing for %s/%s", provider, model)
        return cached

    try:
        catalog = await source.list_models()
    except Exception:
        logger.exception("Failed to fetch model pricing for %s/%s", provider, model)
        return None

    for raw in catalog:
        try:
            entry = CatalogModel.model_validate(raw)
        except ValidationError:
            logger.debug("Skipping malformed catalog entry: %r", raw)
            continue
        if not entry.matches(provider, model) or entry.pricing is None:
            continue
        pricing = ModelPricing(
            provider=provider,
            model=model,
            input_per_million=entry.pricing.input_tokens_per_1m,
            output_per_million=entry.pricing.output_tokens_per_1m,
            currency=entry.pricing.currency,
        )
        cache.put(pricing)
        logger.info(
            "Loaded pricing for %s/%s: $%s/$%s per 1M tokens",
            provider,
            model,
            pricing.input_per_million,
            pricing.output_per_million,
        )
        return pricing

    logger.warning("No pricing found for %s/%s, using default rates", provider, model)
    return None
