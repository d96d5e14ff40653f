"""Built-in tools resolved by the executor before the caller's router."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ame.core.manifest.models import Scenario

FINISH_TOOL = "finish_agent_run"
OUTPUT_TOOL = "output"
LIST_SCENARIOS_TOOL = "fetch_available_scenarios"
SCENARIO_INSTRUCTIONS_TOOL = "fetch_scenario_specific_instructions"

SCENARIO_TOOLS = frozenset({LIST_SCENARIOS_TOOL, SCENARIO_INSTRUCTIONS_TOOL})

TOOL_ERROR_MESSAGE = "An error occurred while executing this tool. Please try a different approach."


def rejection(message: str) -> dict[str, Any]:
    """Payload fed back to the model for a recoverable tool failure."""
    return {"completed": False, "error": True, "message": message}


def tool_not_found(name: str) -> dict[str, Any]:
    return rejection(f"Tool '{name}' not found")


def list_scenarios(scenarios: Sequence[Scenario]) -> dict[str, Any]:
    """Name and description of every scenario."""
    return {
        "completed": True,
        "scenarios": [{"name": s.name, "description": s.description} for s in scenarios],
    }


def scenario_instructions(scenarios: Sequence[Scenario], arguments: dict[str, Any]) -> dict[str, Any]:
    """Full instructions for the scenarios named in ``scenarioNames``.

    Fails as a whole if the argument is not a list or any name is unknown.
    """
    names = arguments.get("scenarioNames")
    if not isinstance(names, list):
        return rejection("scenarioNames must be an array")

    by_name = {s.name: s for s in scenarios}
    missing = [str(n) for n in names if not isinstance(n, str) or n not in by_name]
    if missing:
        return rejection(f"Scenarios not found: {', '.join(missing)}")

    return {
        "completed": True,
        "scenarios": [
            {"name": by_name[n].name, "instructions": by_name[n].instructions} for n in names
        ],
    }
