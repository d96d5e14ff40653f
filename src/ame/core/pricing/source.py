"""HTTP pricing source backed by the manifest service's tenant model catalog."""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class HttpPricingSource:
    """Lists ``GET {api_url}/tenants/{tenant_id}/models`` with a Bearer service key.

    Non-2xx responses raise :class:`httpx.HTTPStatusError`; callers such as
    :func:`~ame.core.pricing.cache.fetch_pricing` treat that as "no pricing".
    """

    def __init__(
        self,
        api_url: str,
        tenant_id: str,
        service_key: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.tenant_id = tenant_id
        self._service_key = service_key
        self._client = client
        self._timeout = timeout

    @property
    def url(self) -> str:
        return f"{self.api_url}/tenants/{self.tenant_id}/models"

    async def list_models(self) -> list[dict[str, Any]]:
        headers = {"Authorization": f"Bearer {self._service_key}"}
        if self._client is not None:
            response = await self._client.get(self.url, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(self.url, headers=headers)
        response.raise_for_status()

        body = response.json()
        models = body.get("models", []) if isinstance(body, dict) else body
        logger.debug("Fetched %d catalog model(s) from %s", len(models), self.url)
        return list(models)
