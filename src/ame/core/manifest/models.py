"""Agent manifest models.

A manifest declares everything needed to run an agent: prompt chunks,
reusable blocks, variables, tools, model choice and optional scenarios.
Manifests are immutable once validated.

Example YAML::

    name: collector
    system:
      - name: intro
        content: "{component.intro}\\n\\n{component.now}"
    user:
      - name: user_message
        content: "{latestMessages}"
    blocks:
      - name: intro
        content: "You are a test assistant."
      - name: now
        content: "Current date: {now}"
    variables:
      - {name: now, type: string, required: true}
      - {name: latestMessages, type: string, required: false, default: ""}
    tools:
      - type: function
        function:
          name: finish_agent_run
          description: Signal completion
          parameters: {type: object, properties: {summary: {type: string}}}
    models:
      - provider: anthropic
        name: claude-sonnet-4-5
        metadata: {temperature: 0.7, max_tokens: 4096}
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ame.core.interface.adapter import normalize_tool
from ame.core.interface.config import ModelConfig


class Chunk(BaseModel):
    """A named piece of prompt text with unresolved placeholders."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    content: str


class Block(BaseModel):
    """A named reusable fragment referenced as ``{component.<name>}``."""

    model_config = ConfigDict(frozen=True)

    name: str
    content: str


class VariableDefinition(BaseModel):
    """A runtime variable the manifest expects."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: str = "string"
    required: bool = False
    default: Any = None


class Scenario(BaseModel):
    """Named instructions the agent can discover and fetch on demand."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    instructions: str = ""


class Manifest(BaseModel):
    """Validated, immutable agent definition."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    category: str = ""
    description: str = ""
    system: list[Chunk] = Field(min_length=1)
    user: list[Chunk] = Field(min_length=1)
    blocks: list[Block] = []
    variables: list[VariableDefinition]
    tools: list[dict[str, Any]]
    models: list[ModelConfig] = Field(min_length=1)
    scenarios: list[Scenario] = []

    @field_validator("blocks", mode="before")
    @classmethod
    def _blocks_from_mapping(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return [{"name": k, "content": v} for k, v in value.items()]
        return value

    @field_validator("blocks")
    @classmethod
    def _unique_block_names(cls, value: list[Block]) -> list[Block]:
        seen: set[str] = set()
        for block in value:
            if block.name in seen:
                raise ValueError(f"duplicate block name '{block.name}'")
            seen.add(block.name)
        return value

    @field_validator("system", "user")
    @classmethod
    def _non_empty_chunks(cls, value: list[Chunk]) -> list[Chunk]:
        if not any(chunk.content.strip() for chunk in value):
            raise ValueError("chunks cannot all be empty")
        return value

    @field_validator("models")
    @classmethod
    def _provider_required(cls, value: list[ModelConfig]) -> list[ModelConfig]:
        for model in value:
            if not model.provider.strip() or not model.name.strip():
                raise ValueError("every model needs a provider and a name")
        return value

    @property
    def primary_model(self) -> ModelConfig:
        return self.models[0]

    @property
    def block_map(self) -> dict[str, str]:
        return {b.name: b.content for b in self.blocks}

    @property
    def required_variables(self) -> list[str]:
        return [v.name for v in self.variables if v.required]

    def variable_defaults(self) -> dict[str, Any]:
        """Declared defaults for variables that have one."""
        return {v.name: v.default for v in self.variables if v.default is not None}

    def tool_names(self) -> list[str]:
        return [normalize_tool(t).name for t in self.tools]

    def scenario(self, name: str) -> Scenario | None:
        return next((s for s in self.scenarios if s.name == name), None)
