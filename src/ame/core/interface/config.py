"""Model and credential configuration for provider adapters."""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Display-only label the manifest service stores alongside real parameters.
DISPLAY_LABEL_KEY = "displayName"


class ModelConfig(BaseModel):
    """One entry of a manifest's ``models`` list.

    Only ``provider``, ``name`` and ``model_def_key`` are meta fields; the
    ``parameters`` map (``metadata`` in exported manifests) is passed through
    to the vendor call untouched, minus the display label.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, protected_namespaces=())

    provider: str
    name: str
    model_def_key: str | None = Field(default=None, alias="modelDefKey")
    parameters: dict[str, Any] = Field(default_factory=dict, alias="metadata")

    def provider_params(self) -> dict[str, Any]:
        """Return the parameter map without the display-only label."""
        return {k: v for k, v in self.parameters.items() if k != DISPLAY_LABEL_KEY}


class ApiKeyCredentials(BaseModel):
    """Credentials for API-key based vendors."""

    api_key: str | None = None
    api_base: str | None = None


class BedrockCredentials(BaseModel):
    """AWS credentials for Bedrock. Keys are optional (default AWS chain)."""

    region: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = None


class ProviderCredentials(BaseModel):
    """Credential set handed to the executor; one optional block per vendor."""

    anthropic: ApiKeyCredentials | None = None
    openai: ApiKeyCredentials | None = None
    deepseek: ApiKeyCredentials | None = None
    google: ApiKeyCredentials | None = None
    bedrock: BedrockCredentials | None = None

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> ProviderCredentials:
        """Build credentials from the conventional vendor environment variables.

        Only vendors with a key (or, for Bedrock, a region) present get a block.
        """
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {}

        for vendor, names in (
            ("anthropic", ("ANTHROPIC_API_KEY",)),
            ("openai", ("OPENAI_API_KEY",)),
            ("deepseek", ("DEEPSEEK_API_KEY",)),
            ("google", ("GOOGLE_API_KEY", "GEMINI_API_KEY")),
        ):
            key = next((env[n] for n in names if env.get(n)), None)
            if key:
                data[vendor] = {"api_key": key}

        region = env.get("AWS_REGION") or env.get("AWS_DEFAULT_REGION")
        if region:
            data["bedrock"] = {
                "region": region,
                "access_key_id": env.get("AWS_ACCESS_KEY_ID"),
                "secret_access_key": env.get("AWS_SECRET_ACCESS_KEY"),
            }

        return cls.model_validate(data)
