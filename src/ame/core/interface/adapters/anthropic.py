"""Anthropic adapter — Claude models through LiteLLM's ``anthropic/`` route.

LiteLLM lifts system messages into the top-level ``system`` field, merges
consecutive same-role turns and turns tool messages into ``tool_result``
blocks. What stays here is what the Messages API needs on top of that:
- ``max_tokens`` is mandatory, so a default is always sent.
- A "required" tool choice also disables parallel tool use, so the model
  commits to one call per turn.
- There is no native audio input; audio parts become a text placeholder.
"""

import logging
from typing import Any

from ame.core.errors import CredentialsError
from ame.core.interface.adapters.openai import ChatCompletionsAdapter
from ame.core.interface.config import ModelConfig, ProviderCredentials
from ame.core.interface.models import AudioContent, ContentPart, ToolChoice

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 4096


class AnthropicAdapter(ChatCompletionsAdapter):
    """Adapter for Anthropic Claude models."""

    provider = "anthropic"
    litellm_prefix = "anthropic"

    def __init__(self, model: ModelConfig, credentials: ProviderCredentials) -> None:
        super().__init__(model)
        creds = credentials.anthropic
        if creds is None:
            raise CredentialsError("anthropic")
        if not creds.api_key:
            raise CredentialsError("anthropic", "api_key")
        self._api_key = creds.api_key
        self._api_base = creds.api_base
        logger.info("[anthropic] Initialized with model: %s", model.name)

    def provider_params(self) -> dict[str, Any]:
        params = super().provider_params()
        legacy_max_tokens = params.pop("maxTokens", None)
        params["max_tokens"] = params.get("max_tokens") or legacy_max_tokens or DEFAULT_MAX_TOKENS
        return params

    def credential_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"api_key": self._api_key}
        if self._api_base:
            kwargs["api_base"] = self._api_base
        return kwargs

    def tool_choice_kwargs(self, choice: ToolChoice) -> dict[str, Any]:
        kwargs = super().tool_choice_kwargs(choice)
        if choice.mode == "required":
            # LiteLLM sends this as disable_parallel_tool_use
            kwargs["parallel_tool_calls"] = False
        return kwargs

    def _content_part_to_openai(self, part: ContentPart) -> dict[str, Any]:
        if isinstance(part, AudioContent):
            return {"type": "text", "text": f"[Audio: {part.url or 'inline'}]"}
        return super()._content_part_to_openai(part)
