"""Google adapter — Gemini models through LiteLLM's ``gemini/`` route.

LiteLLM builds the ``generateContent`` body: system messages become
``systemInstruction``, "assistant" becomes "model", tool calls become
``functionCall`` parts and tool results ``functionResponse`` parts, and the
OpenAI-style sampling arguments are folded into ``generationConfig``.

Manifests written against the Gemini API use its camelCase names
(``topP``, ``maxOutputTokens``, a nested ``generationConfig``...), which the
REST API rejects at the top level of a request. Those are translated to the
names LiteLLM understands before the call.
"""

import logging
from typing import Any

from ame.core.errors import CredentialsError
from ame.core.interface.adapters.openai import ChatCompletionsAdapter
from ame.core.interface.config import ModelConfig, ProviderCredentials
from ame.core.interface.models import Message

logger = logging.getLogger(__name__)

# Gemini generationConfig / request names -> LiteLLM arguments
GEMINI_PARAMS: dict[str, str] = {
    "topP": "top_p",
    "topK": "top_k",
    "maxOutputTokens": "max_tokens",
    "maxTokens": "max_tokens",
    "stopSequences": "stop",
    "candidateCount": "n",
    "presencePenalty": "presence_penalty",
    "frequencyPenalty": "frequency_penalty",
    "responseLogprobs": "logprobs",
    "safetySettings": "safety_settings",
    "cachedContent": "cached_content",
}


class GoogleAdapter(ChatCompletionsAdapter):
    """Adapter for Google Gemini models."""

    provider = "google"
    litellm_prefix = "gemini"

    def __init__(self, model: ModelConfig, credentials: ProviderCredentials) -> None:
        super().__init__(model)
        creds = credentials.google
        if creds is None:
            raise CredentialsError("google")
        if not creds.api_key:
            raise CredentialsError("google", "api_key")
        self._api_key = creds.api_key
        self._api_base = creds.api_base
        logger.info("[google] Initialized with model: %s", model.name)

    def provider_params(self) -> dict[str, Any]:
        raw = super().provider_params()
        nested = raw.pop("generationConfig", None) or {}
        params: dict[str, Any] = {}
        for key, value in [*nested.items(), *raw.items()]:
            if key == "thinkingConfig":
                params["thinking"] = _thinking(value)
            elif key == "responseSchema":
                params["response_format"] = {"type": "json_schema", "json_schema": {"schema": value}}
            elif key == "responseMimeType":
                if value == "application/json":
                    params.setdefault("response_format", {"type": "json_object"})
            else:
                params[GEMINI_PARAMS.get(key, key)] = value
        return params

    def credential_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"api_key": self._api_key}
        if self._api_base:
            kwargs["api_base"] = self._api_base
        return kwargs

    def format_messages(self, messages: list[Message]) -> list[dict[str, Any]]:
        """Name every tool result after its call; Gemini keys responses by function name."""
        call_names: dict[str, str] = {}
        formatted: list[dict[str, Any]] = []
        for msg in messages:
            for tc in msg.tool_calls or []:
                call_names[tc.id] = tc.name
            entry = self._message_to_openai(msg)
            if msg.role == "tool" and msg.tool_call_id in call_names:
                entry["name"] = call_names[msg.tool_call_id]
            formatted.append(entry)
        return formatted


def _thinking(config: dict[str, Any]) -> dict[str, Any]:
    budget = config.get("thinkingBudget")
    if budget == 0:
        return {"type": "disabled"}
    thinking: dict[str, Any] = {"type": "enabled"}
    if budget is not None and budget > 0:
        thinking["budget_tokens"] = budget
    return thinking
