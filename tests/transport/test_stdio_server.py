"""Tests for the newline-delimited stdio transport."""

from __future__ import annotations

import asyncio
import io
import json
from typing import Any

from mcpd.config import ServerSettings
from mcpd.protocol.models import JsonRpcNotification, Tool
from mcpd.providers import register_builtins
from mcpd.server.server import MCPServer
from mcpd.transport.stdio import StdioServer


def _reader(*lines: str | bytes, limit: int = 2**16) -> asyncio.StreamReader:
    reader = asyncio.StreamReader(limit=limit)
    for line in lines:
        data = line.encode() if isinstance(line, str) else line
        reader.feed_data(data + b"\n")
    reader.feed_eof()
    return reader


def _line(message: dict[str, Any] | list[Any]) -> str:
    return json.dumps(message)


async def _serve(server: MCPServer, *lines: str | bytes, limit: int = 2**16) -> list[Any]:
    output = io.StringIO()
    await StdioServer(server, reader=_reader(*lines, limit=limit), output=output).serve()
    return [json.loads(line) for line in output.getvalue().splitlines()]


def _open_server() -> MCPServer:
    server = MCPServer(ServerSettings(require_initialization=False))
    register_builtins(server)
    return server


class TestStdioServer:
    async def test_request_response(self, server: MCPServer, init_payload: dict[str, Any]) -> None:
        outputs = await _serve(server, _line(init_payload))

        assert len(outputs) == 1
        assert outputs[0]["id"] == 1
        assert outputs[0]["result"]["serverInfo"]["name"] == "mcpd"

    async def test_one_line_per_response(self) -> None:
        outputs = await _serve(
            _open_server(),
            _line({"jsonrpc": "2.0", "id": "a", "method": "ping"}),
            _line({"jsonrpc": "2.0", "method": "notifications/initialized"}),
            _line(
                {
                    "jsonrpc": "2.0",
                    "id": "b",
                    "method": "tools/call",
                    "params": {"name": "echo", "arguments": {"text": "hi"}},
                }
            ),
        )

        by_id = {item["id"]: item for item in outputs}
        assert set(by_id) == {"a", "b"}
        assert by_id["a"]["result"] == {}
        assert by_id["b"]["result"]["content"][0]["text"] == "hi"

    async def test_parse_error(self) -> None:
        outputs = await _serve(_open_server(), "{not json")

        assert len(outputs) == 1
        assert outputs[0]["id"] is None
        assert outputs[0]["error"]["code"] == -32700
        assert outputs[0]["error"]["message"] == "Parse error"

    async def test_blank_lines_ignored(self) -> None:
        outputs = await _serve(_open_server(), "", "   ", _line({"jsonrpc": "2.0", "id": 1, "method": "ping"}))
        assert len(outputs) == 1

    async def test_batch_is_one_line(self) -> None:
        outputs = await _serve(
            _open_server(),
            _line(
                [
                    {"jsonrpc": "2.0", "id": 1, "method": "ping"},
                    {"jsonrpc": "2.0", "id": 2, "method": "ping"},
                ]
            ),
        )
        assert len(outputs) == 1
        assert [item["id"] for item in outputs[0]] == [1, 2]

    async def test_empty_batch(self) -> None:
        outputs = await _serve(_open_server(), "[]")
        assert outputs[0]["error"]["code"] == -32600

    async def test_line_too_long(self) -> None:
        outputs = await _serve(
            _open_server(),
            "x" * 200,
            _line({"jsonrpc": "2.0", "id": 1, "method": "ping"}),
            limit=64,
        )

        errors = [item for item in outputs if "error" in item]
        results = [item for item in outputs if "result" in item]
        assert errors[0]["error"]["code"] == -32700
        assert errors[0]["error"]["data"] == "Line too long"
        assert results[0]["id"] == 1

    async def test_lines_handled_concurrently(self) -> None:
        server = _open_server()
        released = asyncio.Event()

        async def slow(_params: Any) -> dict[str, Any]:
            await asyncio.wait_for(released.wait(), timeout=5)
            return {}

        async def fast(_params: Any) -> dict[str, Any]:
            released.set()
            return {}

        server.register_method("test/slow", slow)
        server.register_method("test/fast", fast)

        outputs = await _serve(
            server,
            _line({"jsonrpc": "2.0", "id": 1, "method": "test/slow"}),
            _line({"jsonrpc": "2.0", "id": 2, "method": "test/fast"}),
        )

        assert [item["id"] for item in outputs] == [2, 1]

    async def test_nan_id_is_parse_error(self) -> None:
        stdio = StdioServer(_open_server(), output=io.StringIO())
        response = await stdio.handle_line(b'{"jsonrpc":"2.0","id":NaN,"method":"ping"}')
        assert response is not None
        body = json.loads(response)
        assert body["id"] is None
        assert body["error"]["code"] == -32700

    async def test_handle_line(self) -> None:
        stdio = StdioServer(_open_server(), output=io.StringIO())
        response = await stdio.handle_line(b'{"jsonrpc":"2.0","id":3,"method":"ping"}')
        assert response == '{"jsonrpc":"2.0","id":3,"result":{}}'
        assert await stdio.handle_line('{"jsonrpc":"2.0","method":"initialized"}') is None


class TestNotifications:
    async def test_list_changed_written(self, server: MCPServer, init_payload: dict[str, Any]) -> None:
        await server.handle_payload(init_payload)

        async def add_tool(_params: Any) -> dict[str, Any]:
            server.register_tool(Tool(name="late"))
            return {}

        server.register_method("test/add_tool", add_tool)

        outputs = await _serve(server, _line({"jsonrpc": "2.0", "id": 9, "method": "test/add_tool"}))

        methods = [item.get("method") for item in outputs]
        assert "notifications/tools/list_changed" in methods
        assert any(item.get("id") == 9 for item in outputs)

    async def test_listener_removed_after_serve(self, server: MCPServer) -> None:
        await _serve(server)
        assert server._listeners == []

    def test_notification_without_loop(self, server: MCPServer) -> None:
        output = io.StringIO()
        stdio = StdioServer(server, output=output)

        stdio._on_notification(JsonRpcNotification(method="notifications/tools/list_changed"))

        assert output.getvalue() == '{"jsonrpc":"2.0","method":"notifications/tools/list_changed"}\n'


class TestStopEvent:
    async def test_stop_before_eof(self) -> None:
        reader = asyncio.StreamReader()
        reader.feed_data(b'{"jsonrpc":"2.0","id":1,"method":"ping"}\n')
        output = io.StringIO()
        stop = asyncio.Event()
        stdio = StdioServer(_open_server(), reader=reader, output=output)

        task = asyncio.create_task(stdio.serve(stop))
        for _ in range(50):
            if output.getvalue():
                break
            await asyncio.sleep(0.01)
        stop.set()
        await asyncio.wait_for(task, timeout=5)

        assert json.loads(output.getvalue())["id"] == 1
