"""Tests for MCPClient, in isolation and against a live server."""

from __future__ import annotations

import shlex
import sys
from collections import deque
from typing import Any

import httpx
import pytest

from mcpd.client.client import MCPClient
from mcpd.client.transport import HttpTransport, StdioTransport, TransportError
from mcpd.protocol.errors import MCPError
from mcpd.server.server import MCPServer
from mcpd.transport.http import create_app

_INIT_RESULT = {
    "protocolVersion": "2025-03-26",
    "capabilities": {"tools": {"listChanged": True}},
    "serverInfo": {"name": "fake", "version": "0.0.1"},
}


class FakeTransport:
    """Replays canned responses and records what was sent."""

    def __init__(self, responses: list[dict[str, Any]]) -> None:
        self.sent: list[dict[str, Any]] = []
        self.closed = False
        self._responses = deque(responses)

    async def connect(self) -> None:
        pass

    async def send(self, data: dict[str, Any]) -> None:
        self.sent.append(data)

    async def receive(self) -> dict[str, Any]:
        if not self._responses:
            msg = "Transport closed"
            raise TransportError(msg)
        return self._responses.popleft()

    async def close(self) -> None:
        self.closed = True


def _fake(*responses: dict[str, Any]) -> FakeTransport:
    return FakeTransport([{"jsonrpc": "2.0", "id": 1, "result": _INIT_RESULT}, *responses])


class TestHandshake:
    async def test_initialize_sequence(self) -> None:
        transport = _fake()
        async with MCPClient(transport) as client:
            assert client.server is not None
            assert client.server.server_info.name == "fake"

        assert transport.sent[0]["method"] == "initialize"
        assert transport.sent[0]["params"]["protocolVersion"] == "2025-03-26"
        assert transport.sent[1] == {"jsonrpc": "2.0", "method": "notifications/initialized"}
        assert transport.closed

    async def test_connect_failure_wrapped(self) -> None:
        class Broken(FakeTransport):
            async def connect(self) -> None:
                raise OSError("no route")

        with pytest.raises(TransportError, match="no route"):
            await MCPClient(Broken([])).connect()

    async def test_request_before_connect(self) -> None:
        with pytest.raises(TransportError, match="not connected"):
            await MCPClient(_fake()).ping()


class TestRequests:
    async def test_skips_notifications(self) -> None:
        transport = _fake(
            {"jsonrpc": "2.0", "method": "notifications/tools/list_changed"},
            {"jsonrpc": "2.0", "id": 2, "result": {"tools": [{"name": "echo"}]}},
        )
        async with MCPClient(transport) as client:
            tools = await client.list_tools()
        assert [tool.name for tool in tools] == ["echo"]

    async def test_error_response_raises(self) -> None:
        transport = _fake(
            {
                "jsonrpc": "2.0",
                "id": 2,
                "error": {"code": -32602, "message": "Tool not found: x", "data": {"name": "x"}},
            }
        )
        async with MCPClient(transport) as client:
            with pytest.raises(MCPError) as exc_info:
                await client.call_tool("x")

        assert exc_info.value.code == -32602
        assert exc_info.value.data == {"name": "x"}

    async def test_ids_increase(self) -> None:
        transport = _fake(
            {"jsonrpc": "2.0", "id": 2, "result": {}},
            {"jsonrpc": "2.0", "id": 3, "result": {}},
        )
        async with MCPClient(transport) as client:
            await client.ping()
            await client.ping()
        assert [m.get("id") for m in transport.sent] == [1, None, 2, 3]


class TestAgainstHttpServer:
    async def test_round_trip(self, server: MCPServer) -> None:
        transport = HttpTransport(
            "http://testserver/mcp",
            transport=httpx.ASGITransport(app=create_app(server)),
        )
        async with MCPClient(transport) as client:
            assert server.initialized
            assert server.session.acknowledged

            await client.ping()
            tools = await client.list_tools()
            echoed = await client.call_tool("echo", {"text": "Hello, World!"})
            resources = await client.list_resources()
            docs = await client.read_resource("docs://api")
            prompts = await client.list_prompts()
            prompt = await client.get_prompt("summarize", {"text": "abc"})

        assert "echo" in [tool.name for tool in tools]
        assert echoed.content[0].text == "Hello, World!"
        assert "docs://api" in [resource.uri for resource in resources]
        assert docs.contents[0].text
        assert "summarize" in [p.name for p in prompts]
        assert prompt.messages[0].content.text.endswith("abc")

    async def test_protocol_error(self, server: MCPServer) -> None:
        transport = HttpTransport(
            "http://testserver/mcp",
            transport=httpx.ASGITransport(app=create_app(server)),
        )
        async with MCPClient(transport) as client:
            with pytest.raises(MCPError) as exc_info:
                await client.read_resource("mem://missing")
        assert exc_info.value.code == -32602


class TestAgainstStdioServer:
    async def test_subprocess_round_trip(self) -> None:
        command = f"{shlex.quote(sys.executable)} -m mcpd.cli serve stdio"
        async with MCPClient(StdioTransport(command)) as client:
            assert client.server is not None
            assert client.server.server_info.name == "mcpd"
            result = await client.call_tool("calculate", {"expression": "6 * 7"})

        assert result.content[0].text == "6 * 7 = 42"
