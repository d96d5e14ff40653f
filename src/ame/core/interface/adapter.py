"""Provider adapter protocol and the helpers every adapter shares.

Each vendor has a concrete adapter that turns the canonical message list and
tool declarations into a vendor request, sends it, and normalizes the
response back into a canonical assistant :class:`Message` plus token usage.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal, Protocol

if TYPE_CHECKING:
    from ame.core.interface.config import ModelConfig
    from ame.core.interface.models import InvokeResult, Message, ToolChoice

logger = logging.getLogger(__name__)

ToolShape = Literal["function", "parameters", "input_schema", "unknown"]

EMPTY_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}}


class ProviderAdapter(Protocol):
    """Protocol every provider adapter satisfies."""

    provider: str
    model: ModelConfig

    async def invoke(
        self,
        messages: list[Message],
        *,
        tools: list[dict[str, Any]] | None = None,
        tool_choice: ToolChoice | None = None,
    ) -> InvokeResult:
        """Send the conversation to the vendor and return the normalized reply."""
        ...

    def has_tool_calls(self, message: Message) -> bool:
        """Return ``True`` if *message* carries at least one tool call."""
        ...


# ---------------------------------------------------------------------------
# Tool declaration shapes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ToolSpec:
    """A tool declaration reduced to the fields every vendor needs."""

    shape: ToolShape
    name: str
    description: str
    parameters: dict[str, Any]


def classify_tool(tool: dict[str, Any]) -> ToolShape:
    """Discriminate the shape of a raw tool declaration.

    - ``function``: ``{"type": "function", "function": {...}}`` (OpenAI)
    - ``input_schema``: ``{"name", "description", "input_schema"}`` (Anthropic)
    - ``parameters``: ``{"name", "description", "parameters"}`` (manifest)
    - ``unknown``: anything else
    """
    if isinstance(tool.get("function"), dict):
        return "function"
    if tool.get("name") and isinstance(tool.get("input_schema"), dict):
        return "input_schema"
    if tool.get("name") and isinstance(tool.get("parameters"), dict):
        return "parameters"
    return "unknown"


def normalize_tool(tool: dict[str, Any], *, provider: str = "") -> ToolSpec:
    """Reduce *tool* to a :class:`ToolSpec`, wrapping unknown shapes best-effort."""
    shape = classify_tool(tool)
    if shape == "function":
        fn = tool["function"]
        return ToolSpec(
            shape=shape,
            name=fn.get("name", "unknown"),
            description=fn.get("description") or "",
            parameters=fn.get("parameters") or dict(EMPTY_SCHEMA),
        )
    if shape == "input_schema":
        return ToolSpec(shape, tool["name"], tool.get("description") or "", tool["input_schema"])
    if shape == "parameters":
        return ToolSpec(shape, tool["name"], tool.get("description") or "", tool["parameters"])

    logger.warning("[%s] Unrecognized tool format, wrapping as-is: %r", provider or "adapter", tool)
    schema = tool.get("parameters") or tool.get("input_schema") or dict(EMPTY_SCHEMA)
    return ToolSpec(
        shape=shape,
        name=tool.get("name") or "unknown",
        description=tool.get("description") or "",
        parameters=schema if isinstance(schema, dict) else dict(EMPTY_SCHEMA),
    )


# ---------------------------------------------------------------------------
# Shared adapter base
# ---------------------------------------------------------------------------


class BaseAdapter:
    """Behaviour shared by all concrete adapters."""

    provider: str = ""

    def __init__(self, model: ModelConfig) -> None:
        self.model = model

    def has_tool_calls(self, message: Message) -> bool:
        return bool(message.tool_calls)

    def provider_params(self) -> dict[str, Any]:
        """Provider parameters from the model config, display label removed."""
        return self.model.provider_params()

    def normalize_tools(self, tools: list[dict[str, Any]]) -> list[ToolSpec]:
        return [normalize_tool(t, provider=self.provider) for t in tools]
