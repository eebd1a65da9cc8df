"""BuiltinResourceProvider: status, docs and sample data, plus files on disk."""

from __future__ import annotations

import asyncio
import base64
import json
import logging
import mimetypes
import os
import platform
import time
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from mcpd import __version__
from mcpd.config import FileResourceSettings
from mcpd.protocol.errors import ResourceNotFoundError
from mcpd.protocol.models import ReadResourceResult, Resource, ResourceContents, ServerCapabilities

logger = logging.getLogger(__name__)

RESOURCES: list[Resource] = [
    Resource(
        uri="system://status",
        name="System Status",
        description="Current server status and health information",
        mime_type="application/json",
    ),
    Resource(
        uri="docs://api",
        name="API Documentation",
        description="Methods served by this MCP server",
        mime_type="text/markdown",
    ),
    Resource(
        uri="config://capabilities",
        name="Server Capabilities",
        description="Capabilities advertised during initialize",
        mime_type="application/json",
    ),
    Resource(
        uri="data://sample.json",
        name="Sample Data",
        description="Sample JSON data for testing",
        mime_type="application/json",
    ),
]

API_DOCS = """\
# mcpd API

JSON-RPC 2.0 over stdio (one message per line) or HTTP (`POST /mcp`).

## Lifecycle
- `initialize`: negotiate protocol version and capabilities
- `notifications/initialized`: client acknowledgement
- `ping`: liveness check

## Resources
- `resources/list`: list available resources
- `resources/read`: read a resource by `uri`

## Tools
- `tools/list`: list available tools
- `tools/call`: run a tool by `name` with `arguments`

## Prompts
- `prompts/list`: list available prompts
- `prompts/get`: render a prompt by `name` with `arguments`

## Logging
- `logging/setLevel`: change the server log level

## Example

```json
{"jsonrpc": "2.0", "id": 1, "method": "tools/call",
 "params": {"name": "echo", "arguments": {"text": "Hello, MCP!"}}}
```
"""

SAMPLE_DATA: dict[str, Any] = {
    "users": [
        {"id": 1, "name": "Alice", "email": "alice@example.com"},
        {"id": 2, "name": "Bob", "email": "bob@example.com"},
        {"id": 3, "name": "Charlie", "email": "charlie@example.com"},
    ],
    "products": [
        {"id": 1, "name": "Widget A", "price": 19.99},
        {"id": 2, "name": "Widget B", "price": 29.99},
        {"id": 3, "name": "Widget C", "price": 39.99},
    ],
    "settings": {"theme": "dark", "language": "en", "notifications": True},
}


def file_resource(entry: FileResourceSettings) -> Resource:
    """Build the descriptor for a configured file resource."""
    path = Path(entry.path)
    mime_type = entry.mime_type or mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return Resource(
        uri=entry.resolved_uri,
        name=entry.name or path.name,
        description=entry.description,
        mime_type=mime_type,
    )


def _read_file(path: Path) -> bytes:
    return path.read_bytes()


class BuiltinResourceProvider:
    """Serves :data:`RESOURCES` and the configured file resources.

    Satisfies the :class:`~mcpd.server.provider.ResourceProvider` protocol.
    """

    def __init__(
        self,
        capabilities: ServerCapabilities,
        file_resources: list[FileResourceSettings] | None = None,
    ) -> None:
        self._capabilities = capabilities
        self._started = time.monotonic()
        self._files: dict[str, FileResourceSettings] = {
            entry.resolved_uri: entry for entry in file_resources or []
        }
        self._static: dict[str, Callable[[], str]] = {
            "system://status": self._status,
            "docs://api": lambda: API_DOCS,
            "config://capabilities": lambda: json.dumps(self._capabilities.dump(), indent=2),
            "data://sample.json": lambda: json.dumps(SAMPLE_DATA, indent=2),
        }
        self._mime_types = {resource.uri: resource.mime_type for resource in RESOURCES}

    def descriptors(self) -> list[Resource]:
        return [*RESOURCES, *(file_resource(entry) for entry in self._files.values())]

    async def read(self, uri: str) -> ReadResourceResult:
        render = self._static.get(uri)
        if render is not None:
            contents = ResourceContents(uri=uri, mime_type=self._mime_types[uri], text=render())
            return ReadResourceResult(contents=[contents])

        entry = self._files.get(uri)
        if entry is None:
            raise ResourceNotFoundError(uri)
        return ReadResourceResult(contents=[await self._read_entry(uri, entry)])

    async def _read_entry(self, uri: str, entry: FileResourceSettings) -> ResourceContents:
        descriptor = file_resource(entry)
        try:
            data = await asyncio.to_thread(_read_file, Path(entry.path))
        except FileNotFoundError as exc:
            logger.warning("File resource %s is missing: %s", uri, entry.path)
            raise ResourceNotFoundError(uri) from exc
        except OSError as exc:
            logger.warning("File resource %s is unreadable: %s", uri, exc)
            raise ResourceNotFoundError(uri) from exc

        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            blob = base64.b64encode(data).decode("ascii")
            return ResourceContents(uri=uri, mime_type=descriptor.mime_type, blob=blob)
        return ResourceContents(uri=uri, mime_type=descriptor.mime_type, text=text)

    def _status(self) -> str:
        status = {
            "status": "healthy",
            "uptime": round(time.monotonic() - self._started, 3),
            "version": __version__,
            "python": platform.python_version(),
            "pid": os.getpid(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        return json.dumps(status, indent=2)
