"""Data models for one manifest execution."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Protocol

from pydantic import BaseModel, Field, field_validator

from ame.core.execution import builtins
from ame.core.interface.models import Message, TokenUsage, ToolCall, ToolChoice


class ExecutorSettings(BaseModel):
    """Tunable limits and tool-choice policy for the tool loop."""

    max_messages: int = Field(default=50, ge=3)
    max_render_depth: int = Field(default=50, ge=1)
    initial_tool_choice: ToolChoice = Field(default_factory=ToolChoice.required)
    loop_tool_choice: ToolChoice = Field(default_factory=ToolChoice.required)
    max_tool_errors: int = Field(default=3, ge=1)
    terminating_tools: list[str] = Field(default_factory=lambda: [builtins.FINISH_TOOL, builtins.OUTPUT_TOOL])

    @field_validator("initial_tool_choice", "loop_tool_choice", mode="before")
    @classmethod
    def _parse_choice(cls, value: Any) -> Any:
        if isinstance(value, str):
            return ToolChoice.parse(value)
        return value


class Usage(BaseModel):
    """Token usage and cost accumulated across every turn of a run."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_cost_usd: float = 0.0

    def add(self, turn: TokenUsage) -> None:
        self.input_tokens += turn.input_tokens
        self.output_tokens += turn.output_tokens


class ExecutionResult(BaseModel):
    """Outcome of :meth:`AgentExecutor.execute`. Always returned, never raised."""

    ok: bool
    usage: Usage = Field(default_factory=Usage)
    result: Any = None
    messages: list[Message] = []
    error: str | None = None

    @property
    def cancelled(self) -> bool:
        return isinstance(self.result, dict) and self.result.get("status") == "cancelled"


class ToolHandler(Protocol):
    """A caller-supplied tool implementation."""

    async def execute(self, arguments: dict[str, Any]) -> Any: ...


ToolRouter = Mapping[str, ToolHandler]

ToolCallCallback = Callable[[ToolCall, Any], Awaitable[Any]]


class FunctionTool:
    """Adapt a plain function (sync or async) to the :class:`ToolHandler` protocol.

    The function receives the tool arguments as keyword arguments.
    """

    def __init__(self, fn: Callable[..., Any]) -> None:
        self.fn = fn

    async def execute(self, arguments: dict[str, Any]) -> Any:
        result = self.fn(**arguments)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __repr__(self) -> str:
        return f"FunctionTool({getattr(self.fn, '__name__', self.fn)!r})"


def signals_abort(value: Any) -> bool:
    """Return ``True`` if a tool-call callback asked to stop the run."""
    if value is None:
        return False
    if isinstance(value, Mapping):
        return value.get("abort") is True
    return getattr(value, "abort", False) is True
