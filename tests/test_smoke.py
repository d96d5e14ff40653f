"""Smoke test to verify the project scaffolding works."""

from __future__ import annotations

import pytest


def test_import() -> None:
    import ame

    assert ame.__version__ == "0.1.0"


def test_cli_entrypoint() -> None:
    from ame.cli import main

    assert callable(main)


def test_lazy_exports() -> None:
    import ame
    from ame.core.execution.executor import AgentExecutor

    assert ame.AgentExecutor is AgentExecutor
    assert callable(ame.execute_manifest)
    assert callable(ame.load_manifest)


def test_unknown_attribute() -> None:
    import ame

    with pytest.raises(AttributeError, match="has no attribute"):
        ame.WorkflowRunner  # noqa: B018
