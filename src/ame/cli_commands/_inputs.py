"""Variable binding options shared by ``ame run`` and ``ame render``."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
import yaml

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable


def variable_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Attach ``--var`` and ``--vars-file`` to a command."""
    fn = click.option(
        "--vars-file",
        type=click.Path(exists=True, dir_okay=False),
        default=None,
        help="YAML or JSON mapping of variable bindings.",
    )(fn)
    return click.option(
        "--var",
        "var_pairs",
        multiple=True,
        metavar="KEY=VALUE",
        help="Bind a variable (repeatable, overrides --vars-file).",
    )(fn)


def collect_variables(var_pairs: Iterable[str], vars_file: str | None) -> dict[str, Any]:
    """Merge ``--vars-file`` contents with ``--var`` pairs.

    Raises:
        click.BadParameter: On malformed pairs or a non-mapping file.
    """
    variables: dict[str, Any] = {}
    if vars_file:
        try:
            data = yaml.safe_load(Path(vars_file).read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise click.BadParameter(f"cannot parse {vars_file}: {exc}", param_hint="--vars-file") from exc
        if data is not None and not isinstance(data, dict):
            raise click.BadParameter("must contain a mapping", param_hint="--vars-file")
        variables.update(data or {})

    for pair in var_pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--var")
        variables[key.strip()] = value
    return variables
