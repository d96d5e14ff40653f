"""AME CLI entrypoint."""

import click

from ame import __version__


@click.group()
@click.version_option(version=__version__, prog_name="ame")
def main() -> None:
    """AME — Agent Manifest Executor."""


from ame.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
