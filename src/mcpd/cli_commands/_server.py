"""Settings loading and server construction shared by CLI commands."""

from __future__ import annotations

import sys

from mcpd.cli_commands._output import err_console
from mcpd.config import ConfigError, ServerSettings, load_settings
from mcpd.providers import register_builtins
from mcpd.server.server import MCPServer


def load_cli_settings(
    config: str | None,
    *,
    log_level: str | None = None,
    debug: bool = False,
) -> ServerSettings:
    """Load *config* and apply command-line overrides; exit 1 on bad config."""
    try:
        settings = load_settings(config)
    except ConfigError as exc:
        err_console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)

    if log_level is not None:
        settings.log_level = log_level  # type: ignore[assignment]
    if debug:
        settings.debug = True
    return settings


def build_server(settings: ServerSettings) -> MCPServer:
    """Create a server with the built-in providers installed."""
    server = MCPServer(settings)
    register_builtins(server, settings)
    return server
