"""Shared fixtures for the mcpd test suite."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

import pytest

from mcpd.config import ServerSettings
from mcpd.providers import register_builtins
from mcpd.server.server import MCPServer
from mcpd.utils.logging import LOGGER_NAME


def initialize_request(request_id: Any = 1, version: str = "2024-11-05") -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "initialize",
        "params": {
            "protocolVersion": version,
            "capabilities": {},
            "clientInfo": {"name": "test-client", "version": "1.0"},
        },
    }


@pytest.fixture
def init_payload() -> dict[str, Any]:
    """A valid ``initialize`` request with id 1."""
    return initialize_request()


@pytest.fixture
def settings() -> ServerSettings:
    return ServerSettings()


@pytest.fixture
def server(settings: ServerSettings) -> MCPServer:
    """A server with the built-in providers, not yet initialized."""
    srv = MCPServer(settings)
    register_builtins(srv)
    return srv


@pytest.fixture
async def ready_server(server: MCPServer) -> MCPServer:
    """A server that has completed ``initialize``."""
    response = await server.handle_payload(initialize_request())
    assert response is not None
    return server


@pytest.fixture(autouse=True)
def _restore_log_level() -> Iterator[None]:
    logger = logging.getLogger(LOGGER_NAME)
    level = logger.level
    yield
    logger.setLevel(level)
