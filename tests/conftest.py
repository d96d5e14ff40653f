"""Shared fixtures: a sample manifest and a scripted provider adapter."""

from __future__ import annotations

from typing import Any

import pytest

from ame.core.interface.config import ModelConfig
from ame.core.interface.models import InvokeResult, Message, TokenUsage, ToolCall, ToolChoice
from ame.core.manifest.models import Manifest


class ScriptedAdapter:
    """Provider adapter double that replays canned assistant messages.

    Every invocation is recorded in ``calls`` with a snapshot of the
    message stack, the tools and the tool choice it received.
    """

    provider = "anthropic"

    def __init__(self, responses: list[Message | InvokeResult], *, usage: TokenUsage | None = None) -> None:
        self.model = ModelConfig(provider="anthropic", name="claude-sonnet-4-5")
        self.responses = list(responses)
        self.usage = usage or TokenUsage(input_tokens=100, output_tokens=20)
        self.calls: list[dict[str, Any]] = []

    async def invoke(
        self,
        messages: list[Message],
        *,
        tools: list[dict[str, Any]] | None = None,
        tool_choice: ToolChoice | None = None,
    ) -> InvokeResult:
        self.calls.append({"messages": list(messages), "tools": tools, "tool_choice": tool_choice})
        if not self.responses:
            raise AssertionError("ScriptedAdapter ran out of responses")
        item = self.responses.pop(0)
        if isinstance(item, InvokeResult):
            return item
        return InvokeResult(message=item, usage=self.usage)

    def has_tool_calls(self, message: Message) -> bool:
        return bool(message.tool_calls)


def tool_turn(*calls: tuple[str, dict[str, Any]]) -> Message:
    """Assistant message calling each ``(name, arguments)`` pair in order."""
    return Message.assistant(
        tool_calls=[ToolCall(id=f"call_{i}", name=name, arguments=args) for i, (name, args) in enumerate(calls)]
    )


@pytest.fixture
def manifest_data() -> dict[str, Any]:
    return {
        "name": "collector",
        "category": "support",
        "description": "Collects details from a customer",
        "system": [
            {"name": "intro", "content": "{component.persona}"},
            {"name": "date", "content": "Today is {now}."},
        ],
        "user": [{"name": "message", "content": "{latestMessages}"}],
        "blocks": [
            {"name": "persona", "content": "You are {assistantName}. {component.rules}"},
            {"name": "rules", "content": "Be brief."},
        ],
        "variables": [
            {"name": "now", "type": "string", "required": True},
            {"name": "assistantName", "type": "string", "required": False, "default": "Bot"},
            {"name": "latestMessages", "type": "string", "required": False, "default": "Hello"},
        ],
        "tools": [
            {
                "name": "search",
                "description": "Search the knowledge base",
                "parameters": {"type": "object", "properties": {"q": {"type": "string"}}},
            },
            {
                "type": "function",
                "function": {
                    "name": "finish_agent_run",
                    "description": "Finish the run",
                    "parameters": {"type": "object", "properties": {"result": {"type": "string"}}},
                },
            },
        ],
        "models": [
            {
                "provider": "anthropic",
                "name": "claude-sonnet-4-5",
                "metadata": {"temperature": 0.2, "displayName": "Sonnet"},
            }
        ],
        "scenarios": [
            {"name": "refund", "description": "Refund requests", "instructions": "Ask for the order id."},
            {"name": "billing", "description": "Billing questions", "instructions": "Check the invoice."},
        ],
    }


@pytest.fixture
def manifest(manifest_data: dict[str, Any]) -> Manifest:
    return Manifest.model_validate(manifest_data)


@pytest.fixture
def scripted_adapter() -> type[ScriptedAdapter]:
    return ScriptedAdapter


@pytest.fixture
def make_tool_turn() -> Any:
    return tool_turn
