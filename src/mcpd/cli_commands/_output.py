"""Shared CLI output formatters."""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.table import Table

from mcpd.protocol.models import Prompt, Resource, ServerCapabilities, Tool  # noqa: TC001

console = Console()
# Used wherever stdout may carry protocol traffic.
err_console = Console(stderr=True)


def print_tools_table(tools: list[Tool]) -> None:
    """Pretty-print tool descriptors as a table."""
    table = Table(title="Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Arguments")

    for tool in tools:
        properties: dict[str, Any] = tool.input_schema.get("properties", {})
        required = set(tool.input_schema.get("required", []))
        args = ", ".join(f"{name}*" if name in required else name for name in properties) or "-"
        table.add_row(tool.name, _truncate(tool.description or ""), args)

    console.print(table)


def print_resources_table(resources: list[Resource]) -> None:
    """Pretty-print resource descriptors as a table."""
    table = Table(title="Resources")
    table.add_column("URI", style="cyan")
    table.add_column("Name")
    table.add_column("MIME type")

    for resource in resources:
        table.add_row(resource.uri, resource.name, resource.mime_type or "-")

    console.print(table)


def print_prompts_table(prompts: list[Prompt]) -> None:
    """Pretty-print prompt descriptors as a table."""
    table = Table(title="Prompts")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Arguments")

    for prompt in prompts:
        args = ", ".join(
            f"{arg.name}*" if arg.required else arg.name for arg in prompt.arguments
        ) or "-"
        table.add_row(prompt.name, _truncate(prompt.description or ""), args)

    console.print(table)


def print_capabilities(capabilities: ServerCapabilities) -> None:
    """Print the advertised capability flags, one family per line."""
    console.print("\n[bold]Capabilities[/bold]")
    data = capabilities.dump()
    if not data:
        console.print("  (none)")
    for family, flags in data.items():
        detail = ", ".join(f"{key}={value}" for key, value in flags.items()) if flags else "enabled"
        console.print(f"  {family}: {detail}")


def print_json(data: Any) -> None:
    console.print_json(json.dumps(data, default=str))


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
