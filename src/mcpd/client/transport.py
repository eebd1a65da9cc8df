"""Client transports: subprocess stdio and HTTP.

Each transport satisfies the :class:`MCPTransport` protocol, providing
``connect``, ``send``, ``receive``, and ``close`` methods.
"""

from __future__ import annotations

import asyncio
import json
import shlex
from collections import deque
from typing import Any, Literal, Protocol, runtime_checkable

import httpx


class TransportError(Exception):
    """The connection to the server failed or was closed."""


@runtime_checkable
class MCPTransport(Protocol):
    """Abstract transport for MCP JSON-RPC communication."""

    async def connect(self) -> None: ...
    async def send(self, data: dict[str, Any]) -> None: ...
    async def receive(self) -> dict[str, Any]: ...
    async def close(self) -> None: ...


class StdioTransport:
    """Runs an MCP server as a subprocess and talks to it over stdin/stdout.

    Sends and receives newline-delimited JSON.  The server's stderr is
    discarded unless ``stderr`` is given.
    """

    def __init__(
        self,
        command: str,
        env: dict[str, str] | None = None,
        *,
        stderr: int | None = asyncio.subprocess.DEVNULL,
    ) -> None:
        self._command = command
        self._env = env
        self._stderr = stderr
        self._process: asyncio.subprocess.Process | None = None

    async def connect(self) -> None:
        """Launch the subprocess."""
        parts = shlex.split(self._command)
        if not parts:
            msg = "Empty server command"
            raise TransportError(msg)
        try:
            self._process = await asyncio.create_subprocess_exec(
                *parts,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=self._stderr,
                env=self._env,
            )
        except OSError as exc:
            raise TransportError(f"Cannot start {parts[0]}: {exc}") from exc

    async def send(self, data: dict[str, Any]) -> None:
        """Write a JSON line to stdin."""
        if self._process is None or self._process.stdin is None:
            msg = "Transport not connected"
            raise TransportError(msg)
        line = json.dumps(data) + "\n"
        self._process.stdin.write(line.encode())
        await self._process.stdin.drain()

    async def receive(self) -> dict[str, Any]:
        """Read a JSON line from stdout."""
        if self._process is None or self._process.stdout is None:
            msg = "Transport not connected"
            raise TransportError(msg)
        line = await self._process.stdout.readline()
        if not line:
            msg = "Transport closed"
            raise TransportError(msg)
        return json.loads(line)  # type: ignore[no-any-return]

    async def close(self) -> None:
        """Close stdin and wait for the subprocess, terminating it if needed."""
        if self._process is None:
            return
        if self._process.stdin:
            self._process.stdin.close()
        try:
            await asyncio.wait_for(self._process.wait(), timeout=5)
        except asyncio.TimeoutError:
            self._process.terminate()
            await self._process.wait()
        self._process = None


class HttpTransport:
    """Posts JSON-RPC messages to an MCP server's ``/mcp`` endpoint.

    Responses are queued on ``send`` and handed out by ``receive``; a
    ``204`` (notification) queues nothing.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._pending: deque[dict[str, Any]] = deque()

    async def connect(self) -> None:
        """Open the HTTP client."""
        self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def send(self, data: dict[str, Any]) -> None:
        """POST one message and queue the response body, if any."""
        if self._client is None:
            msg = "Transport not connected"
            raise TransportError(msg)
        try:
            response = await self._client.post(self._url, json=data)
        except httpx.HTTPError as exc:
            raise TransportError(str(exc)) from exc

        if response.status_code == 204:
            return
        try:
            body = response.json()
        except ValueError as exc:
            raise TransportError(f"Non-JSON response (HTTP {response.status_code})") from exc
        if isinstance(body, list):
            self._pending.extend(body)
        else:
            self._pending.append(body)

    async def receive(self) -> dict[str, Any]:
        """Return the next queued response."""
        if not self._pending:
            msg = "No response pending"
            raise TransportError(msg)
        return self._pending.popleft()

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def create_transport(target: str, kind: Literal["stdio", "http"] | None = None) -> MCPTransport:
    """Build a transport for *target*: a URL (http) or a command line (stdio).

    When *kind* is ``None`` it is inferred from the target's scheme.
    """
    if kind is None:
        kind = "http" if target.startswith(("http://", "https://")) else "stdio"
    if kind == "http":
        return HttpTransport(target)
    return StdioTransport(target)
