"""Canonical message schema — the provider-agnostic message format.

Orchestration logic only ever works with these types. Provider adapters
translate them to and from each vendor's wire format.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal
from uuid import uuid4

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Content Parts — multimodal content building blocks
# ---------------------------------------------------------------------------


class TextContent(BaseModel):
    """Plain text content part."""

    type: Literal["text"] = "text"
    text: str


class ImageContent(BaseModel):
    """Image content part (URL, data URL or inline base64)."""

    type: Literal["image"] = "image"
    url: str | None = None
    data: str | None = None
    media_type: str | None = None

    def as_base64(self) -> tuple[str, str] | None:
        """Return ``(media_type, data)`` if the image is available inline."""
        if self.data:
            return self.media_type or "image/png", self.data
        if self.url and self.url.startswith("data:") and ";base64," in self.url:
            header, data = self.url.split(";base64,", 1)
            return header[len("data:"):], data
        return None


class AudioContent(BaseModel):
    """Audio content part (URL or inline base64)."""

    type: Literal["audio"] = "audio"
    url: str | None = None
    data: str | None = None
    media_type: str | None = None


ContentPart = Annotated[
    TextContent | ImageContent | AudioContent, Field(discriminator="type")
]


# ---------------------------------------------------------------------------
# Tool Calling — structured tool invocations and results
# ---------------------------------------------------------------------------


class ToolCall(BaseModel):
    """A tool invocation emitted by an assistant message."""

    id: str = Field(default_factory=lambda: uuid4().hex[:12])
    name: str
    arguments: dict[str, Any] = {}


class ToolResult(BaseModel):
    """The outcome of executing one tool call.

    ``content`` is opaque to the engine except for three keys when it is a
    mapping: ``completed`` and ``error`` mark a rejection, ``forceNextTool``
    pins the tool choice of the following turn.
    """

    tool_call_id: str
    name: str
    content: Any = None

    @property
    def rejected(self) -> bool:
        if not isinstance(self.content, dict):
            return False
        return self.content.get("completed") is False or bool(self.content.get("error"))

    @property
    def force_next_tool(self) -> str | None:
        if isinstance(self.content, dict):
            forced = self.content.get("forceNextTool")
            if isinstance(forced, str) and forced:
                return forced
        return None

    def serialized(self) -> str:
        """JSON text sent back to the model."""
        return json.dumps(self.content, default=str)


# ---------------------------------------------------------------------------
# Tool choice — tagged union over the supported directives
# ---------------------------------------------------------------------------


class ToolChoice(BaseModel):
    """Canonical tool-choice directive.

    ``mode`` is one of ``auto``, ``required``, ``none`` or ``tool``; the
    last one pins a specific tool by ``name``.
    """

    mode: Literal["auto", "required", "none", "tool"] = "auto"
    name: str | None = None

    @classmethod
    def auto(cls) -> ToolChoice:
        return cls(mode="auto")

    @classmethod
    def required(cls) -> ToolChoice:
        return cls(mode="required")

    @classmethod
    def none(cls) -> ToolChoice:
        return cls(mode="none")

    @classmethod
    def tool(cls, name: str) -> ToolChoice:
        return cls(mode="tool", name=name)

    @classmethod
    def parse(cls, value: str | ToolChoice) -> ToolChoice:
        """Accept ``auto``/``required``/``none``/``any`` or a tool name."""
        if isinstance(value, ToolChoice):
            return value
        if value in ("auto", "required", "none"):
            return cls(mode=value)  # type: ignore[arg-type]
        if value == "any":
            return cls.required()
        return cls.tool(value)


# ---------------------------------------------------------------------------
# Canonical Message — the core message type
# ---------------------------------------------------------------------------


class Message(BaseModel):
    """A single message in the canonical format.

    Roles:
    - system: rendered manifest instructions
    - user: rendered user content, optionally with attachments
    - assistant: model output (may include tool_calls)
    - tool: tool execution results (must include tool_call_id)
    """

    role: Literal["system", "user", "assistant", "tool"]
    content: list[ContentPart] = []
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None

    @property
    def text(self) -> str:
        """Concatenated text from all TextContent parts."""
        return "".join(part.text for part in self.content if isinstance(part, TextContent))

    @classmethod
    def system(cls, text: str) -> Message:
        return cls(role="system", content=[TextContent(text=text)])

    @classmethod
    def user(cls, text: str, attachments: list[ContentPart] | None = None) -> Message:
        """Create a user message; attachments follow the text part."""
        parts: list[ContentPart] = [TextContent(text=text)]
        parts.extend(attachments or [])
        return cls(role="user", content=parts)

    @classmethod
    def assistant(
        cls,
        text: str = "",
        tool_calls: list[ToolCall] | None = None,
    ) -> Message:
        content: list[ContentPart] = [TextContent(text=text)] if text else []
        return cls(role="assistant", content=content, tool_calls=tool_calls or None)

    @classmethod
    def tool(cls, result: ToolResult) -> Message:
        """Create a tool-result message carrying the JSON-serialized payload."""
        return cls(
            role="tool",
            content=[TextContent(text=result.serialized())],
            tool_call_id=result.tool_call_id,
        )


# ---------------------------------------------------------------------------
# Invocation result
# ---------------------------------------------------------------------------


class TokenUsage(BaseModel):
    """Token counts reported by a provider for one turn."""

    input_tokens: int = 0
    output_tokens: int = 0


class InvokeResult(BaseModel):
    """Normalized output of one adapter invocation."""

    message: Message
    usage: TokenUsage = Field(default_factory=TokenUsage)
