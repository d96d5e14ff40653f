"""Bedrock adapter — AWS Bedrock models via LiteLLM's Converse route.

LiteLLM takes the chat-completions request, maps it onto the Converse API
(``toolResult`` blocks, ``toolChoice.any``) and signs it with SigV4. When no
access keys are configured the default AWS credential chain applies.
"""

import logging
from typing import Any

from ame.core.errors import CredentialsError
from ame.core.interface.adapters.openai import ChatCompletionsAdapter
from ame.core.interface.config import ModelConfig, ProviderCredentials

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 4096


class BedrockAdapter(ChatCompletionsAdapter):
    """Adapter for models hosted on AWS Bedrock."""

    provider = "bedrock"
    litellm_prefix = "bedrock"

    def __init__(self, model: ModelConfig, credentials: ProviderCredentials) -> None:
        super().__init__(model)
        creds = credentials.bedrock
        if creds is None:
            raise CredentialsError("bedrock")
        if not creds.region:
            raise CredentialsError("bedrock", "region")
        self.region = creds.region
        self._access_key_id = creds.access_key_id
        self._secret_access_key = creds.secret_access_key
        logger.info("[bedrock] Initialized with model: %s, region: %s", model.name, self.region)

    def provider_params(self) -> dict[str, Any]:
        params = super().provider_params()
        max_tokens = params.pop("maxTokens", None)
        params.setdefault("max_tokens", max_tokens or DEFAULT_MAX_TOKENS)
        return params

    def credential_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"aws_region_name": self.region}
        if self._access_key_id and self._secret_access_key:
            kwargs["aws_access_key_id"] = self._access_key_id
            kwargs["aws_secret_access_key"] = self._secret_access_key
        return kwargs
