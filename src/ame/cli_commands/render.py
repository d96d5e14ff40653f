"""``ame render`` — print the rendered prompts of a manifest without calling a model."""

import sys

import click
from rich.markup import escape

from ame.cli_commands._inputs import collect_variables, variable_options
from ame.cli_commands._output import console, err_console, print_prompts


@click.command()
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False))
@variable_options
@click.option("--json", "as_json", is_flag=True, help="Print prompts as JSON.")
@click.option("--max-depth", type=int, default=50, show_default=True, help="Block nesting limit.")
def render(
    manifest: str,
    var_pairs: tuple[str, ...],
    vars_file: str | None,
    as_json: bool,
    max_depth: int,
) -> None:
    """Render the system and user prompts of MANIFEST."""
    from ame.core.errors import AMEError
    from ame.core.execution.executor import bind_variables
    from ame.core.manifest.loader import load_manifest
    from ame.core.manifest.renderer import TemplateRenderer

    try:
        spec = load_manifest(manifest)
    except AMEError as exc:
        console.print(f"[red]Validation error:[/red] {escape(str(exc))}")
        sys.exit(1)

    variables = bind_variables(spec, collect_variables(var_pairs, vars_file))
    missing = [name for name in spec.required_variables if name not in variables]
    if missing:
        err_console.print(f"[yellow]Unbound required variables:[/yellow] {', '.join(missing)}")

    renderer = TemplateRenderer(spec.block_map, max_depth=max_depth)
    print_prompts(
        renderer.render(spec.system, variables),
        renderer.render(spec.user, variables),
        as_json=as_json,
    )
