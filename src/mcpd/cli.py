"""mcpd CLI entrypoint."""

from __future__ import annotations

import click

from mcpd import __version__


@click.group()
@click.version_option(version=__version__, prog_name="mcpd")
def main() -> None:
    """mcpd: JSON-RPC 2.0 / Model Context Protocol server."""


# Register subcommands
from mcpd.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
