"""Stdio transport: newline-delimited JSON-RPC over stdin/stdout.

Each input line holds one message or one batch array.  Lines are handled
as independent tasks, so responses may be written out of order; every
response is exactly one line.  Only protocol traffic goes to stdout.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
import sys
import threading
from collections.abc import Coroutine
from typing import TYPE_CHECKING, Any, TextIO

from mcpd.protocol.codec import encode, error_response, parse_json
from mcpd.protocol.errors import ParseError
from mcpd.utils.telemetry import ATTR_TRANSPORT, get_tracer

if TYPE_CHECKING:
    from mcpd.protocol.models import JsonRpcNotification
    from mcpd.server.server import MCPServer

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

# Upper bound for a single input line.
LINE_LIMIT = 16 * 1024 * 1024


class StdioServer:
    """Serves one :class:`MCPServer` session over a pair of streams.

    Usage::

        await StdioServer(server).serve()

    Tests pass their own ``reader`` (an :class:`asyncio.StreamReader`) and
    ``output`` (any text stream).
    """

    def __init__(
        self,
        server: MCPServer,
        *,
        reader: asyncio.StreamReader | None = None,
        output: TextIO | None = None,
    ) -> None:
        self.server = server
        self._reader = reader
        self._output = output or sys.stdout
        self._write_lock = asyncio.Lock()
        self._tasks: set[asyncio.Task[None]] = set()

    async def serve(self, stop: asyncio.Event | None = None) -> None:
        """Read until EOF (or until *stop* is set), then drain pending work."""
        reader = self._reader or _stdin_reader()
        unsubscribe = self.server.add_notification_listener(self._on_notification)
        logger.info("Serving MCP on stdio")

        read_task = asyncio.create_task(self._read_loop(reader))
        try:
            if stop is None:
                await read_task
            else:
                stop_task = asyncio.create_task(stop.wait())
                await asyncio.wait({read_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
                for task in (read_task, stop_task):
                    task.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await task
            while self._tasks:
                await asyncio.gather(*list(self._tasks))
        finally:
            unsubscribe()
        logger.info("Stdio transport closed")

    async def handle_line(self, line: str | bytes) -> str | None:
        """Process one input line; returns the response line, if any."""
        try:
            payload = parse_json(line)
        except ParseError as exc:
            logger.warning("Unparseable input line: %s", exc.data)
            return encode(error_response(None, exc))

        result = await self.server.handle_payload(payload)
        if result is None:
            return None
        return encode(result)

    async def _read_loop(self, reader: asyncio.StreamReader) -> None:
        while True:
            try:
                line = await reader.readline()
            except ValueError:
                # Line exceeded the reader limit; the rest of it is discarded.
                logger.error("Input line exceeds %d bytes", LINE_LIMIT)
                await self._write(encode(error_response(None, ParseError(data="Line too long"))))
                continue
            if not line:
                break
            if not line.strip():
                continue
            self._spawn(self._process(line))

    async def _process(self, line: bytes) -> None:
        with _tracer.start_as_current_span("mcpd.stdio.line") as span:
            span.set_attribute(ATTR_TRANSPORT, "stdio")
            try:
                response = await self.handle_line(line)
            except Exception:
                logger.exception("Failed to process input line")
                return
        if response is not None:
            await self._write(response)

    async def _write(self, text: str) -> None:
        async with self._write_lock:
            self._output.write(text + "\n")
            self._output.flush()

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _on_notification(self, notification: JsonRpcNotification) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self._output.write(encode(notification) + "\n")
            self._output.flush()
            return
        self._spawn(self._write(encode(notification)))


def _stdin_reader() -> asyncio.StreamReader:
    """Feed ``sys.stdin`` into a :class:`asyncio.StreamReader` from a daemon thread.

    Works for pipes, terminals and redirected files alike; the daemon thread
    never blocks interpreter shutdown.
    """
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader(limit=LINE_LIMIT)

    def pump() -> None:
        with contextlib.suppress(RuntimeError):
            for line in iter(sys.stdin.buffer.readline, b""):
                loop.call_soon_threadsafe(reader.feed_data, line)
            loop.call_soon_threadsafe(reader.feed_eof)

    threading.Thread(target=pump, name="mcpd-stdin", daemon=True).start()
    return reader


async def _serve_until_signal(server: MCPServer) -> None:
    loop = asyncio.get_running_loop()
    stop = asyncio.Event()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, stop.set)
    await StdioServer(server).serve(stop)


def run_stdio(server: MCPServer) -> None:
    """Serve *server* on stdin/stdout until EOF, SIGINT or SIGTERM."""
    asyncio.run(_serve_until_signal(server))
