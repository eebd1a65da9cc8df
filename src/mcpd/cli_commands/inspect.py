"""``mcpd inspect``: show what a configured server would expose."""

from __future__ import annotations

import click

from mcpd.cli_commands._output import (
    console,
    print_capabilities,
    print_json,
    print_prompts_table,
    print_resources_table,
    print_tools_table,
)
from mcpd.cli_commands._server import build_server, load_cli_settings


@click.command("inspect")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML settings file.",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def inspect_cmd(config: str | None, as_json: bool) -> None:
    """List the tools, resources and prompts a server would register."""
    settings = load_cli_settings(config)
    server = build_server(settings)
    registry = server.registry

    if as_json:
        print_json(
            {
                **server.describe(),
                "protocolVersions": settings.protocol_versions,
                "methods": server.dispatcher.methods(),
                "tools": [tool.dump() for tool in registry.tools.list()],
                "resources": [resource.dump() for resource in registry.resources.list()],
                "prompts": [prompt.dump() for prompt in registry.prompts.list()],
            }
        )
        return

    console.print(f"[bold]{settings.name}[/bold] {settings.version}")
    console.print(f"  Protocol versions: {', '.join(settings.protocol_versions)}")
    print_capabilities(server.capabilities)

    if registry.tools.list():
        print_tools_table(registry.tools.list())
    if registry.resources.list():
        print_resources_table(registry.resources.list())
    if registry.prompts.list():
        print_prompts_table(registry.prompts.list())
