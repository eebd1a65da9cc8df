"""``mcpd serve``: run the server on stdio or HTTP."""

from __future__ import annotations

import sys

import click

from mcpd.cli_commands._output import err_console
from mcpd.cli_commands._server import build_server, load_cli_settings
from mcpd.utils.logging import MCP_LEVELS, configure_logging

_config_option = click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML settings file.",
)
_log_level_option = click.option(
    "--log-level",
    type=click.Choice(MCP_LEVELS),
    default=None,
    help="Override the configured log level.",
)
_debug_option = click.option(
    "--debug",
    is_flag=True,
    help="Include exception details in internal errors.",
)
_telemetry_option = click.option(
    "--telemetry",
    is_flag=True,
    help="Export OpenTelemetry spans to stderr (requires mcpd[otel]).",
)


@click.group()
def serve() -> None:
    """Run the MCP server."""


@serve.command("stdio")
@_config_option
@_log_level_option
@_debug_option
@_telemetry_option
def serve_stdio(config: str | None, log_level: str | None, debug: bool, telemetry: bool) -> None:
    """Serve newline-delimited JSON-RPC on stdin/stdout."""
    from mcpd.transport.stdio import run_stdio

    settings = load_cli_settings(config, log_level=log_level, debug=debug)
    configure_logging(settings.log_level)
    if telemetry:
        _enable_telemetry(settings.name)

    run_stdio(build_server(settings))


@serve.command("http")
@_config_option
@click.option("--host", default=None, help="Bind address (default from settings).")
@click.option("--port", "-p", type=int, default=None, help="Bind port (default from settings).")
@_log_level_option
@_debug_option
@_telemetry_option
def serve_http(
    config: str | None,
    host: str | None,
    port: int | None,
    log_level: str | None,
    debug: bool,
    telemetry: bool,
) -> None:
    """Serve JSON-RPC on POST /mcp."""
    from mcpd.transport.http import run_http

    settings = load_cli_settings(config, log_level=log_level, debug=debug)
    if host is not None:
        settings.http.host = host
    if port is not None:
        settings.http.port = port
    configure_logging(settings.log_level)
    if telemetry:
        _enable_telemetry(settings.name)

    run_http(build_server(settings), settings)


def _enable_telemetry(service_name: str) -> None:
    from mcpd.utils.telemetry import configure_telemetry

    try:
        configure_telemetry(service_name=service_name)
    except ImportError as exc:
        err_console.print(f"[red]Telemetry unavailable:[/red] {exc}")
        sys.exit(1)
