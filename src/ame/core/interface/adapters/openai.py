"""OpenAI adapter — the canonical schema is closest to ChatML, so this is the
simplest mapping. Requests go through LiteLLM's ``acompletion``.

:class:`ChatCompletionsAdapter` is shared by every vendor: LiteLLM takes the
chat-completions shape and performs the vendor-specific translation, so the
subclasses only adjust parameters, credentials and the odd content part.
"""

import json
import logging
from typing import Any

import litellm

from ame.core.errors import AdapterResponseError, CredentialsError
from ame.core.interface.adapter import BaseAdapter
from ame.core.interface.config import ModelConfig, ProviderCredentials
from ame.core.interface.models import (
    AudioContent,
    ContentPart,
    ImageContent,
    InvokeResult,
    Message,
    TextContent,
    TokenUsage,
    ToolCall,
    ToolChoice,
)

logger = logging.getLogger(__name__)


class ChatCompletionsAdapter(BaseAdapter):
    """Adapter base for chat-completions vendors reached through LiteLLM."""

    #: LiteLLM routing prefix (``openai/gpt-4o``, ``deepseek/deepseek-chat``).
    litellm_prefix: str = ""

    def litellm_model(self) -> str:
        return f"{self.litellm_prefix}/{self.model.name}"

    def credential_kwargs(self) -> dict[str, Any]:
        """Credential keyword arguments for ``litellm.acompletion``."""
        return {}

    async def invoke(
        self,
        messages: list[Message],
        *,
        tools: list[dict[str, Any]] | None = None,
        tool_choice: ToolChoice | None = None,
    ) -> InvokeResult:
        call_kwargs: dict[str, Any] = {
            "model": self.litellm_model(),
            "messages": self.format_messages(messages),
        }
        call_kwargs.update(self.provider_params())
        call_kwargs.update(self.credential_kwargs())

        if tools:
            call_kwargs["tools"] = self.format_tools(tools)
            if tool_choice is not None and tool_choice.mode != "auto":
                call_kwargs.update(self.tool_choice_kwargs(tool_choice))

        logger.debug(
            "[%s] Invoking %s with %d tools",
            self.provider,
            call_kwargs["model"],
            len(call_kwargs.get("tools", [])),
        )

        # Type stubs for litellm are incomplete
        response = await litellm.acompletion(**call_kwargs)  # pyright: ignore[reportUnknownMemberType]
        return self.parse_response(response)

    # -- request translation ------------------------------------------------

    def format_messages(self, messages: list[Message]) -> list[dict[str, Any]]:
        return [self._message_to_openai(m) for m in messages]

    def format_tools(self, tools: list[dict[str, Any]]) -> list[dict[str, Any]]:
        formatted: list[dict[str, Any]] = []
        for tool in tools:
            if tool.get("type") == "function" and isinstance(tool.get("function"), dict):
                formatted.append(tool)
                continue
            spec = self.normalize_tools([tool])[0]
            formatted.append(
                {
                    "type": "function",
                    "function": {
                        "name": spec.name,
                        "description": spec.description,
                        "parameters": spec.parameters,
                    },
                }
            )
        return formatted

    def format_tool_choice(self, choice: ToolChoice) -> Any:
        if choice.mode == "tool":
            return {"type": "function", "function": {"name": choice.name}}
        return choice.mode

    def tool_choice_kwargs(self, choice: ToolChoice) -> dict[str, Any]:
        """Keyword arguments expressing *choice* in the ``acompletion`` call."""
        return {"tool_choice": self.format_tool_choice(choice)}

    def _message_to_openai(self, msg: Message) -> dict[str, Any]:
        result: dict[str, Any] = {"role": msg.role}

        if msg.role == "tool":
            result["tool_call_id"] = msg.tool_call_id
            result["content"] = msg.text
            return result

        if len(msg.content) == 1 and isinstance(msg.content[0], TextContent):
            result["content"] = msg.content[0].text
        elif msg.content:
            result["content"] = [self._content_part_to_openai(p) for p in msg.content]
        else:
            result["content"] = None

        if msg.tool_calls:
            result["tool_calls"] = [
                {
                    "id": tc.id,
                    "type": "function",
                    "function": {"name": tc.name, "arguments": json.dumps(tc.arguments)},
                }
                for tc in msg.tool_calls
            ]

        return result

    def _content_part_to_openai(self, part: ContentPart) -> dict[str, Any]:
        if isinstance(part, TextContent):
            return {"type": "text", "text": part.text}
        if isinstance(part, ImageContent):
            url = part.url
            if part.data:
                url = f"data:{part.media_type or 'image/png'};base64,{part.data}"
            return {"type": "image_url", "image_url": {"url": url}}
        audio: AudioContent = part
        return {
            "type": "input_audio",
            "input_audio": {"data": audio.data or "", "format": _audio_format(audio.media_type)},
        }

    # -- response normalization ---------------------------------------------

    def parse_response(self, response: Any) -> InvokeResult:
        """Convert a LiteLLM response object into an :class:`InvokeResult`.

        LiteLLM returns OpenAI-compatible objects regardless of the vendor.
        """
        if not response.choices:
            raise AdapterResponseError(self.provider, "No choices in response")
        message = response.choices[0].message

        images = getattr(message, "images", None)
        if isinstance(images, list) and images:
            logger.warning("[%s] Image output in responses is not implemented", self.provider)

        tool_calls: list[ToolCall] | None = None
        if message.tool_calls:
            tool_calls = [
                ToolCall(
                    id=tc.id,
                    name=tc.function.name,
                    arguments=_parse_arguments(tc.function.arguments),
                )
                for tc in message.tool_calls
            ]

        usage = TokenUsage()
        if getattr(response, "usage", None):
            usage = TokenUsage(
                input_tokens=int(response.usage.prompt_tokens or 0),
                output_tokens=int(response.usage.completion_tokens or 0),
            )

        return InvokeResult(
            message=Message.assistant(message.content or "", tool_calls=tool_calls),
            usage=usage,
        )


class OpenAIAdapter(ChatCompletionsAdapter):
    """Adapter for OpenAI chat-completions models."""

    provider = "openai"
    litellm_prefix = "openai"

    def __init__(self, model: ModelConfig, credentials: ProviderCredentials) -> None:
        super().__init__(model)
        creds = credentials.openai
        if creds is None:
            raise CredentialsError("openai")
        if not creds.api_key:
            raise CredentialsError("openai", "api_key")
        self._api_key = creds.api_key
        self._api_base = creds.api_base
        logger.info("[openai] Initialized with model: %s", model.name)

    def credential_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"api_key": self._api_key}
        if self._api_base:
            kwargs["api_base"] = self._api_base
        return kwargs


def _parse_arguments(raw: Any) -> dict[str, Any]:
    """Parse JSON string arguments from a tool call."""
    if isinstance(raw, dict):
        return raw
    try:
        result = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return {"raw": raw}
    if not isinstance(result, dict):
        return {"raw": raw}
    return result


def _audio_format(media_type: str | None) -> str:
    """Extract audio format from media type."""
    if media_type and "/" in media_type:
        return media_type.split("/")[1]
    return "wav"
