"""Observability traces for turns and built-in tool executions."""

from ame.core.tracing.config import TraceFilters, TracingConfig
from ame.core.tracing.emitter import ToolTrace, TraceEmitter, TraceModel, TurnTrace

__all__ = [
    "ToolTrace",
    "TraceEmitter",
    "TraceFilters",
    "TraceModel",
    "TracingConfig",
    "TurnTrace",
]
