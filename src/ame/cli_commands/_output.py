"""Shared CLI output formatters."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from ame.core.execution.models import ExecutionResult
    from ame.core.manifest.models import Manifest

console = Console()
err_console = Console(stderr=True)


def print_manifest_summary(manifest: Manifest) -> None:
    """Pretty-print what a manifest declares."""
    model = manifest.primary_model
    console.print(f"  Name: {manifest.name or '(unnamed)'}")
    console.print(f"  Model: {model.provider}/{model.name}")
    console.print(f"  Blocks: {len(manifest.blocks)}")
    console.print(f"  Tools: {', '.join(manifest.tool_names()) or '-'}")
    if manifest.scenarios:
        console.print(f"  Scenarios: {', '.join(s.name for s in manifest.scenarios)}")

    if manifest.variables:
        table = Table(title="Variables")
        table.add_column("Name", style="cyan")
        table.add_column("Type")
        table.add_column("Required")
        table.add_column("Default")
        for var in manifest.variables:
            default = "-" if var.default is None else _truncate(json.dumps(var.default, default=str))
            table.add_row(var.name, var.type, "yes" if var.required else "no", default)
        console.print(table)


def print_prompts(system: str, user: str, *, as_json: bool = False) -> None:
    """Print rendered system and user prompts."""
    if as_json:
        console.print_json(json.dumps({"system": system, "user": user}))
        return
    console.print(Panel(Text(system), title="system", title_align="left"))
    console.print(Panel(Text(user), title="user", title_align="left"))


def print_result(result: ExecutionResult, *, as_json: bool = False) -> None:
    """Print an execution result summary (or the full result as JSON)."""
    if as_json:
        console.print_json(result.model_dump_json())
        return

    if result.ok:
        console.print("[green]Execution completed.[/green]")
    elif result.cancelled:
        console.print("[yellow]Execution cancelled.[/yellow]")
    else:
        console.print(f"[red]Execution failed:[/red] {escape(result.error or '')}")

    usage = result.usage
    console.print(
        f"  Tokens: {usage.input_tokens} in / {usage.output_tokens} out"
        f"  Cost: ${usage.total_cost_usd:.6f}"
    )
    console.print(f"  Messages: {len(result.messages)}")

    if result.ok:
        console.print("\n[bold]Result:[/bold]")
        console.print(_format_value(result.result), markup=False, highlight=False)


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, indent=2, default=str)


def _truncate(text: str, max_len: int = 40) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
