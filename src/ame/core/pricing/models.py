"""Per-model token pricing."""

from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field


class ModelPricing(BaseModel):
    """USD rates per million input/output tokens for one provider+model."""

    model_config = ConfigDict(frozen=True)

    provider: str
    model: str
    input_per_million: float
    output_per_million: float
    currency: str = "USD"

    def cost(self, input_tokens: int, output_tokens: int) -> float:
        """Cost of the given token counts."""
        return (input_tokens / 1_000_000) * self.input_per_million + (
            output_tokens / 1_000_000
        ) * self.output_per_million


# Claude Sonnet list price, used whenever no catalog entry is available
DEFAULT_PRICING = ModelPricing(
    provider="default",
    model="default",
    input_per_million=3.0,
    output_per_million=15.0,
)


class CatalogPricing(BaseModel):
    """``pricing`` object of a catalog entry."""

    model_config = ConfigDict(populate_by_name=True)

    input_tokens_per_1m: float = Field(alias="inputTokensPer1M")
    output_tokens_per_1m: float = Field(alias="outputTokensPer1M")
    currency: str = "USD"


class CatalogModel(BaseModel):
    """One model entry as returned by the pricing source."""

    model_config = ConfigDict(populate_by_name=True)

    provider: str
    name: str | None = None
    model_id: str | None = Field(default=None, alias="modelId")
    pricing: CatalogPricing | None = None

    def matches(self, provider: str, model: str) -> bool:
        if self.provider.lower() != provider.lower():
            return False
        return model in (self.name, self.model_id)


class PricingSource(Protocol):
    """Anything that can list the model catalog with pricing."""

    async def list_models(self) -> list[dict[str, Any]]:
        """Return raw catalog entries."""
        ...
