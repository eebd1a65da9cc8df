"""``mcpd probe``: connect to a running server and list what it offers."""

from __future__ import annotations

import asyncio
import sys

import click

from mcpd.cli_commands._output import (
    console,
    print_capabilities,
    print_prompts_table,
    print_resources_table,
    print_tools_table,
)
from mcpd.protocol.models import InitializeResult, Prompt, Resource, Tool


@click.command()
@click.argument("target")
@click.option(
    "--transport",
    type=click.Choice(["stdio", "http"]),
    default=None,
    help="Transport type (default: http for URLs, stdio otherwise).",
)
def probe(target: str, transport: str | None) -> None:
    """Initialize a session with an MCP server and list its primitives.

    TARGET is the server command (for stdio) or the /mcp URL (for http).
    """
    from mcpd.client import MCPClient, create_transport

    async def _probe() -> tuple[InitializeResult, list[Tool], list[Resource], list[Prompt]]:
        async with MCPClient(create_transport(target, transport)) as client:  # type: ignore[arg-type]
            info = client.server
            if info is None:
                msg = "Server did not complete initialization"
                raise RuntimeError(msg)
            await client.ping()
            caps = info.capabilities
            tools = await client.list_tools() if caps.tools is not None else []
            resources = await client.list_resources() if caps.resources is not None else []
            prompts = await client.list_prompts() if caps.prompts is not None else []
            return info, tools, resources, prompts

    try:
        info, tools, resources, prompts = asyncio.run(_probe())
    except Exception as exc:
        console.print(f"[red]Probe error:[/red] {exc}")
        sys.exit(1)

    console.print(
        f"[green]Connected[/green] to [bold]{info.server_info.name}[/bold] "
        f"{info.server_info.version} (protocol {info.protocol_version})"
    )
    print_capabilities(info.capabilities)
    if tools:
        print_tools_table(tools)
    if resources:
        print_resources_table(resources)
    if prompts:
        print_prompts_table(prompts)
