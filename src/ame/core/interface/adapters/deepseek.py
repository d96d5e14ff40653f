"""DeepSeek adapter — DeepSeek serves an OpenAI-compatible API."""

import logging
from typing import Any

from ame.core.errors import CredentialsError
from ame.core.interface.adapters.openai import ChatCompletionsAdapter
from ame.core.interface.config import ModelConfig, ProviderCredentials

logger = logging.getLogger(__name__)

DEEPSEEK_API_BASE = "https://api.deepseek.com/v1"


class DeepSeekAdapter(ChatCompletionsAdapter):
    """Adapter for DeepSeek chat models."""

    provider = "deepseek"
    litellm_prefix = "deepseek"

    def __init__(self, model: ModelConfig, credentials: ProviderCredentials) -> None:
        super().__init__(model)
        creds = credentials.deepseek
        if creds is None:
            raise CredentialsError("deepseek")
        if not creds.api_key:
            raise CredentialsError("deepseek", "api_key")
        self._api_key = creds.api_key
        self._api_base = creds.api_base or DEEPSEEK_API_BASE
        logger.info("[deepseek] Initialized with model: %s", model.name)

    def credential_kwargs(self) -> dict[str, Any]:
        return {"api_key": self._api_key, "api_base": self._api_base}
