"""Shared error types for the manifest execution engine."""


class AMEError(Exception):
    """Base error for all manifest-execution failures."""


class ManifestValidationError(AMEError):
    """A manifest failed parsing or schema validation."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("Invalid manifest" + (f": {detail}" if detail else ""))


class ConfigError(AMEError):
    """A runner configuration file could not be read or validated."""


class CredentialsError(AMEError):
    """Credentials required by a provider adapter are missing."""

    def __init__(self, provider: str, field: str | None = None) -> None:
        self.provider = provider
        self.field = field
        path = f"credentials.{provider}" + (f".{field}" if field else "")
        super().__init__(f"{path} is required")


class UnsupportedProviderError(AMEError):
    """The manifest's primary model names a provider with no adapter."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(f"Unsupported provider: {provider}")


class AdapterResponseError(AMEError):
    """A provider returned a response the adapter cannot normalize."""

    def __init__(self, provider: str, detail: str) -> None:
        self.provider = provider
        self.detail = detail
        super().__init__(f"[{provider}] {detail}")


class RequiredVariableError(AMEError):
    """A variable the manifest declares as required has no bound value."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Required variable missing: {name}")


class InfiniteLoopError(AMEError):
    """The message stack reached its ceiling while the agent kept calling tools."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(
            f"Message limit of {limit} reached, possible infinite loop"
        )


class NoTerminatingToolError(AMEError):
    """The model stopped calling tools without ever finishing the run."""

    def __init__(self) -> None:
        super().__init__("Agent ended without calling terminating tool")
