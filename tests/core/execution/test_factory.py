"""Tests for adapter selection and executor construction."""

from __future__ import annotations

import asyncio
import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from ame.core.errors import CredentialsError, ManifestValidationError, UnsupportedProviderError
from ame.core.execution.factory import create_adapter, create_executor, execute_manifest, supported_providers
from ame.core.execution.models import FunctionTool
from ame.core.interface.adapters import (
    AnthropicAdapter,
    BedrockAdapter,
    DeepSeekAdapter,
    GoogleAdapter,
    OpenAIAdapter,
)
from ame.core.interface.config import ModelConfig, ProviderCredentials
from ame.core.tracing.config import TracingConfig
from ame.core.tracing.emitter import TraceEmitter

CREDS = ProviderCredentials.model_validate(
    {
        "anthropic": {"api_key": "a"},
        "openai": {"api_key": "o"},
        "deepseek": {"api_key": "d"},
        "google": {"api_key": "g"},
        "bedrock": {"region": "us-east-1"},
    }
)


@pytest.mark.parametrize(
    ("provider", "cls"),
    [
        ("anthropic", AnthropicAdapter),
        ("OpenAI", OpenAIAdapter),
        ("deepseek", DeepSeekAdapter),
        ("google", GoogleAdapter),
        ("bedrock", BedrockAdapter),
    ],
)
def test_create_adapter(provider: str, cls: type) -> None:
    adapter = create_adapter(ModelConfig(provider=provider, name="m"), CREDS)
    assert isinstance(adapter, cls)


def test_supported_providers() -> None:
    assert supported_providers() == ["anthropic", "bedrock", "deepseek", "google", "openai"]


def test_unsupported_provider() -> None:
    with pytest.raises(UnsupportedProviderError, match="Unsupported provider: mistral"):
        create_adapter(ModelConfig(provider="mistral", name="m"), CREDS)


class TestCreateExecutor:
    def test_from_dict(self, manifest_data: dict[str, Any]) -> None:
        executor = create_executor(manifest_data, {"anthropic": {"api_key": "k"}}, variables={"now": "x"})
        assert isinstance(executor.adapter, AnthropicAdapter)
        assert executor.variables["now"] == "x"

    def test_missing_credentials(self, manifest_data: dict[str, Any]) -> None:
        with pytest.raises(CredentialsError, match=r"credentials\.anthropic is required"):
            create_executor(manifest_data, ProviderCredentials())

    def test_credentials_from_env(self, manifest_data: dict[str, Any], monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANTHROPIC_API_KEY", "env-key")
        executor = create_executor(manifest_data)
        assert isinstance(executor.adapter, AnthropicAdapter)

    def test_invalid_manifest(self) -> None:
        with pytest.raises(ManifestValidationError):
            create_executor({"name": "broken"}, CREDS)


async def test_execute_manifest(manifest_data: dict[str, Any]) -> None:
    manifest_data["models"] = [{"provider": "openai", "name": "gpt-4o"}]
    message = MagicMock()
    message.content = None
    message.tool_calls = [MagicMock(id="c1", function=MagicMock(arguments='{"result": "done"}'))]
    message.tool_calls[0].function.name = "finish_agent_run"
    response = MagicMock()
    response.choices = [MagicMock(message=message)]
    response.usage = MagicMock(prompt_tokens=10, completion_tokens=3)

    with patch("ame.core.interface.adapters.openai.litellm") as mock_litellm:
        mock_litellm.acompletion = AsyncMock(return_value=response)
        result = await execute_manifest(manifest_data, {"now": "today"}, CREDS)

    assert result.ok
    assert result.result == {"result": "done"}
    assert result.usage.input_tokens == 10


def _litellm_tool_response(name: str, arguments: str) -> MagicMock:
    message = MagicMock()
    message.content = None
    message.tool_calls = [MagicMock(id=f"c_{name}", function=MagicMock(arguments=arguments))]
    message.tool_calls[0].function.name = name
    response = MagicMock()
    response.choices = [MagicMock(message=message)]
    response.usage = MagicMock(prompt_tokens=10, completion_tokens=3)
    return response


async def test_execute_manifest_delivers_every_turn_trace(manifest_data: dict[str, Any]) -> None:
    manifest_data["models"] = [{"provider": "openai", "name": "gpt-4o"}]
    delivered: list[dict[str, Any]] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(0.01)
        delivered.append(json.loads(request.content))
        return httpx.Response(202)

    tracing = TracingConfig(enabled=True, api_url="https://traces.test", tenant_id="t1", service_key="sk")
    responses = [
        _litellm_tool_response("search", '{"q": "refund"}'),
        _litellm_tool_response("finish_agent_run", '{"result": "done"}'),
    ]

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with patch("ame.core.interface.adapters.openai.litellm") as mock_litellm:
            mock_litellm.acompletion = AsyncMock(side_effect=responses)
            result = await execute_manifest(
                manifest_data,
                {"now": "today"},
                CREDS,
                tool_router={"search": FunctionTool(lambda q: [q])},
                emitter=TraceEmitter(tracing, client=client),
            )

    assert result.ok
    assert [d["type"] for d in delivered] == ["turn", "turn"]
    assert sorted(d["metadata"]["turnNumber"] for d in delivered) == [1, 2]
