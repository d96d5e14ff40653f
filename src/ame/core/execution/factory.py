"""Build an :class:`AgentExecutor` with the adapter for the manifest's primary model."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ame.core.errors import UnsupportedProviderError
from ame.core.execution.executor import AgentExecutor
from ame.core.interface.adapters import (
    AnthropicAdapter,
    BedrockAdapter,
    DeepSeekAdapter,
    GoogleAdapter,
    OpenAIAdapter,
)
from ame.core.interface.config import ProviderCredentials
from ame.core.manifest.loader import validate_manifest

if TYPE_CHECKING:
    from ame.core.execution.models import ExecutionResult
    from ame.core.interface.adapter import ProviderAdapter
    from ame.core.interface.config import ModelConfig
    from ame.core.manifest.models import Manifest

logger = logging.getLogger(__name__)

AdapterBuilder = Callable[["ModelConfig", ProviderCredentials], "ProviderAdapter"]

ADAPTERS: dict[str, AdapterBuilder] = {
    "anthropic": AnthropicAdapter,
    "openai": OpenAIAdapter,
    "bedrock": BedrockAdapter,
    "deepseek": DeepSeekAdapter,
    "google": GoogleAdapter,
}


def supported_providers() -> list[str]:
    return sorted(ADAPTERS)


def create_adapter(model: ModelConfig, credentials: ProviderCredentials) -> ProviderAdapter:
    """Instantiate the adapter registered for ``model.provider`` (case-insensitive)."""
    builder = ADAPTERS.get(model.provider.lower())
    if builder is None:
        raise UnsupportedProviderError(model.provider)
    logger.debug("Creating %s adapter for %s", model.provider.lower(), model.name)
    return builder(model, credentials)


def create_executor(
    manifest: Manifest | dict[str, Any],
    credentials: ProviderCredentials | dict[str, Any] | None = None,
    **options: Any,
) -> AgentExecutor:
    """Validate *manifest*, pick its adapter and wrap both in an executor.

    *credentials* defaults to :meth:`ProviderCredentials.from_env`. Remaining
    keyword arguments are passed to :class:`AgentExecutor`.

    Raises:
        ManifestValidationError: The manifest is malformed.
        UnsupportedProviderError: No adapter exists for the primary provider.
        CredentialsError: The provider's credentials are missing.
    """
    validated = validate_manifest(manifest)
    if credentials is None:
        creds = ProviderCredentials.from_env()
    elif isinstance(credentials, ProviderCredentials):
        creds = credentials
    else:
        creds = ProviderCredentials.model_validate(credentials)

    adapter = create_adapter(validated.primary_model, creds)
    logger.info(
        "Created executor for '%s' on %s/%s",
        validated.name or "<unnamed>",
        adapter.provider,
        validated.primary_model.name,
    )
    return AgentExecutor(validated, adapter, **options)


async def execute_manifest(
    manifest: Manifest | dict[str, Any],
    variables: dict[str, Any] | None = None,
    credentials: ProviderCredentials | dict[str, Any] | None = None,
    **options: Any,
) -> ExecutionResult:
    """Create an executor for *manifest* and run it once.

    Pending traces are delivered and the emitter closed before returning, so
    nothing is lost when the caller's event loop shuts down right after.
    """
    executor = create_executor(manifest, credentials, variables=variables, **options)
    try:
        return await executor.execute()
    finally:
        await executor.emitter.aclose()
