"""``ame run`` — execute a manifest file once."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import TYPE_CHECKING

import click
from rich.logging import RichHandler
from rich.markup import escape

from ame.cli_commands._inputs import collect_variables, variable_options
from ame.cli_commands._output import console, err_console, print_manifest_summary, print_result

if TYPE_CHECKING:
    from ame.core.execution.executor import AgentExecutor
    from ame.core.execution.models import ExecutionResult


@click.command()
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False))
@variable_options
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, dir_okay=False), default=None, help="Runner config YAML.")
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--telemetry", is_flag=True, help="Enable telemetry.")
@click.option("--dry-run", is_flag=True, help="Validate manifest and config only, do not execute.")
def run(
    manifest: str,
    var_pairs: tuple[str, ...],
    vars_file: str | None,
    config_path: str | None,
    as_json: bool,
    verbose: bool,
    telemetry: bool,
    dry_run: bool,
) -> None:
    """Execute the agent defined in MANIFEST."""
    from ame.config import RunnerConfig, load_config
    from ame.core.errors import AMEError
    from ame.core.execution.factory import create_executor
    from ame.core.manifest.loader import load_manifest
    from ame.core.pricing.cache import PricingCache

    try:
        spec = load_manifest(manifest)
        config = load_config(config_path) if config_path else RunnerConfig()
    except AMEError as exc:
        console.print(f"[red]Validation error:[/red] {escape(str(exc))}")
        sys.exit(1)

    variables = collect_variables(var_pairs, vars_file)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )

    if telemetry or config.telemetry.enabled:
        _enable_telemetry(config.telemetry.otlp_endpoint)

    if dry_run:
        console.print("[green]Manifest validated successfully.[/green]")
        print_manifest_summary(spec)
        return

    try:
        executor = create_executor(
            spec,
            config.resolved_credentials(),
            variables=variables,
            settings=config.executor,
            tracing=config.tracing,
            pricing_source=config.pricing_source(),
            pricing_cache=PricingCache(ttl=config.pricing.ttl_seconds),
        )
    except AMEError as exc:
        console.print(f"[red]Configuration error:[/red] {escape(str(exc))}")
        sys.exit(1)

    if verbose:
        console.print(f"Running manifest: {spec.name or manifest}")

    result = asyncio.run(_execute(executor))
    print_result(result, as_json=as_json)
    if not result.ok:
        sys.exit(1)


async def _execute(executor: AgentExecutor) -> ExecutionResult:
    try:
        return await executor.execute()
    finally:
        await executor.emitter.aclose()


def _enable_telemetry(otlp_endpoint: str | None) -> None:
    from ame.utils.telemetry import configure_telemetry

    try:
        configure_telemetry(export_to_console=otlp_endpoint is None, otlp_endpoint=otlp_endpoint)
    except ImportError as exc:
        err_console.print(f"[yellow]Telemetry disabled:[/yellow] {escape(str(exc))}")
