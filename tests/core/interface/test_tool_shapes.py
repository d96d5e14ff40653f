"""Tests for tool-shape discrimination and model/credential configuration."""

from __future__ import annotations

import logging

import pytest

from ame.core.interface.adapter import EMPTY_SCHEMA, classify_tool, normalize_tool
from ame.core.interface.config import ModelConfig, ProviderCredentials

SCHEMA = {"type": "object", "properties": {"q": {"type": "string"}}}


class TestClassifyTool:
    def test_function_shape(self) -> None:
        tool = {"type": "function", "function": {"name": "f", "parameters": SCHEMA}}
        assert classify_tool(tool) == "function"

    def test_parameters_shape(self) -> None:
        assert classify_tool({"name": "f", "description": "d", "parameters": SCHEMA}) == "parameters"

    def test_input_schema_shape(self) -> None:
        assert classify_tool({"name": "f", "input_schema": SCHEMA}) == "input_schema"

    @pytest.mark.parametrize(
        "tool",
        [
            {},
            {"name": "f"},
            {"parameters": SCHEMA},
            {"name": "f", "parameters": "not-a-dict"},
        ],
    )
    def test_unknown(self, tool: dict) -> None:
        assert classify_tool(tool) == "unknown"


class TestNormalizeTool:
    def test_function(self) -> None:
        spec = normalize_tool(
            {"type": "function", "function": {"name": "f", "description": "d", "parameters": SCHEMA}}
        )
        assert (spec.shape, spec.name, spec.description, spec.parameters) == ("function", "f", "d", SCHEMA)

    def test_function_without_parameters(self) -> None:
        spec = normalize_tool({"type": "function", "function": {"name": "f"}})
        assert spec.parameters == EMPTY_SCHEMA
        assert spec.description == ""

    def test_input_schema(self) -> None:
        spec = normalize_tool({"name": "f", "description": "d", "input_schema": SCHEMA})
        assert spec.parameters == SCHEMA

    def test_unknown_wrapped_with_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            spec = normalize_tool({"name": "odd"}, provider="openai")
        assert spec.shape == "unknown"
        assert spec.name == "odd"
        assert spec.parameters == EMPTY_SCHEMA
        assert "[openai] Unrecognized tool format" in caplog.text


class TestModelConfig:
    def test_metadata_alias(self) -> None:
        model = ModelConfig.model_validate(
            {"provider": "openai", "name": "gpt-4o", "modelDefKey": "k", "metadata": {"temperature": 1}}
        )
        assert model.model_def_key == "k"
        assert model.parameters == {"temperature": 1}

    def test_display_label_stripped(self) -> None:
        model = ModelConfig(provider="openai", name="gpt-4o", parameters={"displayName": "GPT", "top_p": 0.9})
        assert model.provider_params() == {"top_p": 0.9}


class TestProviderCredentialsFromEnv:
    def test_reads_vendor_keys(self) -> None:
        creds = ProviderCredentials.from_env(
            {
                "ANTHROPIC_API_KEY": "a",
                "OPENAI_API_KEY": "o",
                "DEEPSEEK_API_KEY": "d",
                "GEMINI_API_KEY": "g",
            }
        )
        assert creds.anthropic is not None and creds.anthropic.api_key == "a"
        assert creds.openai is not None and creds.openai.api_key == "o"
        assert creds.deepseek is not None and creds.deepseek.api_key == "d"
        assert creds.google is not None and creds.google.api_key == "g"
        assert creds.bedrock is None

    def test_google_key_preferred_over_gemini(self) -> None:
        creds = ProviderCredentials.from_env({"GOOGLE_API_KEY": "g1", "GEMINI_API_KEY": "g2"})
        assert creds.google is not None and creds.google.api_key == "g1"

    def test_bedrock_from_aws_vars(self) -> None:
        creds = ProviderCredentials.from_env(
            {"AWS_DEFAULT_REGION": "eu-west-1", "AWS_ACCESS_KEY_ID": "id", "AWS_SECRET_ACCESS_KEY": "secret"}
        )
        assert creds.bedrock is not None
        assert creds.bedrock.region == "eu-west-1"
        assert creds.bedrock.access_key_id == "id"

    def test_empty_env(self) -> None:
        creds = ProviderCredentials.from_env({})
        assert creds.model_dump(exclude_none=True) == {}
