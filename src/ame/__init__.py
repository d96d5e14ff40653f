"""Agent Manifest Executor — run declarative agent manifests against LLM providers."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from ame.core.execution.executor import AgentExecutor as AgentExecutor
    from ame.core.execution.factory import create_executor as create_executor
    from ame.core.execution.factory import execute_manifest as execute_manifest
    from ame.core.manifest.loader import load_manifest as load_manifest

_LAZY_EXPORTS = {
    "AgentExecutor": "ame.core.execution.executor",
    "create_executor": "ame.core.execution.factory",
    "execute_manifest": "ame.core.execution.factory",
    "load_manifest": "ame.core.manifest.loader",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'ame' has no attribute {name!r}")
