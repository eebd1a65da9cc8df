"""MCPClient: connects to an MCP server and calls its methods.

Used by ``mcpd probe`` to exercise a server end to end over either
transport.
"""

from __future__ import annotations

import logging
from typing import Any

from mcpd import __version__
from mcpd.client.transport import MCPTransport, TransportError
from mcpd.protocol.errors import MCPError
from mcpd.protocol.models import (
    CallToolResult,
    GetPromptResult,
    Implementation,
    InitializeResult,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    ListPromptsResult,
    ListResourcesResult,
    ListToolsResult,
    Prompt,
    ReadResourceResult,
    Resource,
    Tool,
)

logger = logging.getLogger(__name__)

DEFAULT_PROTOCOL_VERSION = "2025-03-26"


class MCPClient:
    """Async context manager around one server connection.

    Usage::

        async with MCPClient(StdioTransport("mcpd serve stdio")) as client:
            tools = await client.list_tools()
            result = await client.call_tool("echo", {"text": "hi"})

    JSON-RPC error responses are raised as :class:`MCPError` carrying the
    server's code, message and data.
    """

    def __init__(
        self,
        transport: MCPTransport,
        *,
        client_info: Implementation | None = None,
        protocol_version: str = DEFAULT_PROTOCOL_VERSION,
    ) -> None:
        self._transport = transport
        self._client_info = client_info or Implementation(name="mcpd-client", version=__version__)
        self._protocol_version = protocol_version
        self._connected = False
        self._next_id = 1
        self.server: InitializeResult | None = None

    async def __aenter__(self) -> MCPClient:
        await self.connect()
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    async def connect(self) -> None:
        """Connect the transport and perform the initialize handshake."""
        try:
            await self._transport.connect()
        except TransportError:
            raise
        except Exception as exc:
            raise TransportError(str(exc)) from exc
        self._connected = True
        await self.initialize()

    async def close(self) -> None:
        """Close the underlying transport."""
        if self._connected:
            await self._transport.close()
            self._connected = False

    async def initialize(self) -> InitializeResult:
        """Send ``initialize`` followed by ``notifications/initialized``."""
        result = await self.request(
            "initialize",
            {
                "protocolVersion": self._protocol_version,
                "capabilities": {},
                "clientInfo": self._client_info.dump(),
            },
        )
        self.server = InitializeResult.model_validate(result)
        await self.notify("notifications/initialized")
        logger.debug(
            "Connected to %s %s",
            self.server.server_info.name,
            self.server.server_info.version,
        )
        return self.server

    async def ping(self) -> None:
        await self.request("ping")

    async def request(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """Send a request and return its ``result``.

        Server notifications arriving before the response are skipped.

        Raises:
            MCPError: If the server answers with an error object.
            TransportError: If the connection fails.
        """
        if not self._connected:
            msg = "Client not connected"
            raise TransportError(msg)

        request_id = self._next_id
        self._next_id += 1
        message = JsonRpcRequest(id=request_id, method=method, params=params)
        await self._transport.send(message.dump())

        while True:
            raw = await self._transport.receive()
            if raw.get("id") == request_id and ("result" in raw or "error" in raw):
                break
            logger.debug("Skipping unrelated message: %s", raw.get("method", raw.get("id")))

        response = JsonRpcResponse.model_validate(raw)
        if response.error is not None:
            raise MCPError(response.error.message, response.error.data, code=response.error.code)
        return response.result

    async def notify(self, method: str, params: dict[str, Any] | None = None) -> None:
        """Send a notification; nothing is awaited back."""
        if not self._connected:
            msg = "Client not connected"
            raise TransportError(msg)
        await self._transport.send(JsonRpcNotification(method=method, params=params).dump())

    async def list_tools(self) -> list[Tool]:
        return ListToolsResult.model_validate(await self.request("tools/list")).tools

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> CallToolResult:
        result = await self.request("tools/call", {"name": name, "arguments": arguments or {}})
        return CallToolResult.model_validate(result)

    async def list_resources(self) -> list[Resource]:
        return ListResourcesResult.model_validate(await self.request("resources/list")).resources

    async def read_resource(self, uri: str) -> ReadResourceResult:
        return ReadResourceResult.model_validate(await self.request("resources/read", {"uri": uri}))

    async def list_prompts(self) -> list[Prompt]:
        return ListPromptsResult.model_validate(await self.request("prompts/list")).prompts

    async def get_prompt(self, name: str, arguments: dict[str, str] | None = None) -> GetPromptResult:
        result = await self.request("prompts/get", {"name": name, "arguments": arguments or {}})
        return GetPromptResult.model_validate(result)
