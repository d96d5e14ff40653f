"""OpenTelemetry span helpers for the executor.

Spans go through the OpenTelemetry API only. Without a configured SDK every
tracer is a no-op, so instrumentation costs nothing unless a process opts in
with :func:`configure_telemetry` (needs the ``otel`` extra).

These spans are process-local diagnostics. The observability API traces
live in :mod:`ame.core.tracing`.
"""

from typing import Any

from opentelemetry import trace

ATTR_MANIFEST = "ame.manifest"
ATTR_PROVIDER = "ame.provider"
ATTR_MODEL = "ame.model"
ATTR_TURN = "ame.turn"
ATTR_MESSAGE_COUNT = "ame.messages"
ATTR_TOKENS_INPUT = "ame.tokens.input"
ATTR_TOKENS_OUTPUT = "ame.tokens.output"
ATTR_COST_USD = "ame.cost_usd"
ATTR_TOOL_NAME = "ame.tool.name"
ATTR_TOOL_BUILTIN = "ame.tool.builtin"
ATTR_STATUS = "ame.status"

_INSTRUMENTATION_NAME = "ame"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a tracer for *name* (no-op until the SDK is configured)."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    *,
    service_name: str = "ame",
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Install an SDK tracer provider (requires ``ame[otel]``).

    Parameters
    ----------
    service_name:
        The ``service.name`` resource attribute.
    export_to_console:
        If ``True``, export spans as JSON to stdout.
    otlp_endpoint:
        If set, export spans via OTLP/gRPC to this endpoint.

    Raises
    ------
    ImportError
        If the ``opentelemetry-sdk`` package is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required for configure_telemetry(). "
            "Install it with: pip install agent-manifest-executor[otel]"
        )
        raise ImportError(msg) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))

    if export_to_console:
        _add_console_exporter(provider, SimpleSpanProcessor)
    if otlp_endpoint:
        _add_otlp_exporter(provider, BatchSpanProcessor, otlp_endpoint)

    trace.set_tracer_provider(provider)


def _add_console_exporter(provider: Any, processor_cls: Any) -> None:
    from opentelemetry.sdk.trace.export import ConsoleSpanExporter  # pyright: ignore[reportMissingImports]

    provider.add_span_processor(processor_cls(ConsoleSpanExporter()))


def _add_otlp_exporter(provider: Any, processor_cls: Any, endpoint: str) -> None:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = (
            "opentelemetry-exporter-otlp is required for OTLP export. "
            "Install it with: pip install agent-manifest-executor[otel]"
        )
        raise ImportError(msg) from exc

    provider.add_span_processor(processor_cls(OTLPSpanExporter(endpoint=endpoint)))
