"""Manifest execution — the tool-loop executor and its factory."""

from ame.core.execution.executor import AgentExecutor
from ame.core.execution.factory import create_adapter, create_executor, execute_manifest
from ame.core.execution.models import (
    ExecutionResult,
    ExecutorSettings,
    FunctionTool,
    ToolCallCallback,
    ToolHandler,
    ToolRouter,
    Usage,
)

__all__ = [
    "AgentExecutor",
    "ExecutionResult",
    "ExecutorSettings",
    "FunctionTool",
    "ToolCallCallback",
    "ToolHandler",
    "ToolRouter",
    "Usage",
    "create_adapter",
    "create_executor",
    "execute_manifest",
]
