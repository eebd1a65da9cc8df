"""Smoke test to verify the project scaffolding works."""

from __future__ import annotations


def test_import() -> None:
    import mcpd

    assert mcpd.__version__ == "0.1.0"


def test_cli_entrypoint() -> None:
    from mcpd.cli import main

    assert callable(main)


def test_lazy_import_from_mcpd() -> None:
    import mcpd

    assert mcpd.MCPServer is not None
    assert mcpd.ServerSettings is not None


def test_subpackage_exports() -> None:
    from mcpd.client import HttpTransport, MCPClient, StdioTransport
    from mcpd.server import Dispatcher, MCPServer, Registry
    from mcpd.transport import StdioServer, create_app

    assert all(
        obj is not None
        for obj in (HttpTransport, MCPClient, StdioTransport, Dispatcher, MCPServer, Registry, StdioServer, create_app)
    )
