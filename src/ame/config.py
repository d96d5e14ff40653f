"""Runner configuration consumed by ``ame run``.

Example ``ame.yaml``::

    executor:
      max_messages: 30
    credentials:
      anthropic:
        api_key: ${ANTHROPIC_API_KEY}
    tracing:
      enabled: true
      api_url: https://studio.example.com/api
      tenant_id: acme
      service_key: ${STUDIO_SERVICE_KEY}
    pricing:
      enabled: true
    telemetry:
      enabled: false
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from ame.core.errors import ConfigError
from ame.core.execution.models import ExecutorSettings
from ame.core.interface.config import ProviderCredentials
from ame.core.pricing.cache import DEFAULT_TTL_SECONDS
from ame.core.pricing.source import HttpPricingSource
from ame.core.tracing.config import TracingConfig


class TelemetrySettings(BaseModel):
    """OpenTelemetry span export."""

    enabled: bool = False
    otlp_endpoint: str | None = None


class PricingSettings(BaseModel):
    """Model catalog used for cost accounting.

    Connection fields left unset fall back to the tracing block's values.
    """

    enabled: bool = False
    api_url: str | None = None
    tenant_id: str | None = None
    service_key: str | None = None
    ttl_seconds: float = DEFAULT_TTL_SECONDS


class RunnerConfig(BaseModel):
    """Top-level runner configuration."""

    executor: ExecutorSettings = Field(default_factory=ExecutorSettings)
    credentials: ProviderCredentials | None = None
    tracing: TracingConfig = Field(default_factory=TracingConfig)
    pricing: PricingSettings = Field(default_factory=PricingSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    def resolved_credentials(self) -> ProviderCredentials:
        """Configured credentials, or the environment when none are set."""
        return self.credentials if self.credentials is not None else ProviderCredentials.from_env()

    def pricing_source(self) -> HttpPricingSource | None:
        if not self.pricing.enabled:
            return None
        api_url = self.pricing.api_url or self.tracing.api_url
        tenant_id = self.pricing.tenant_id or self.tracing.tenant_id
        service_key = self.pricing.service_key or self.tracing.service_key
        if not (api_url and tenant_id and service_key):
            return None
        return HttpPricingSource(api_url, tenant_id, service_key)


def load_config(path: str | Path) -> RunnerConfig:
    """Read YAML, interpolate env vars, and validate.

    Environment variables in the form ``${VAR}`` or ``$VAR`` are expanded
    with :func:`os.path.expandvars` before parsing. An empty file yields the
    defaults.

    Raises:
        ConfigError: On read errors, YAML errors or validation failures.
    """
    p = Path(path)
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read {p}: {exc}") from exc

    try:
        data: Any = yaml.safe_load(os.path.expandvars(raw))
    except yaml.YAMLError as exc:
        raise ConfigError(f"YAML parse error: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Config YAML must be a mapping")

    try:
        return RunnerConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
