"""Tests for installing the built-in providers on a server."""

from __future__ import annotations

from pathlib import Path

from mcpd.config import CapabilitySettings, FileResourceSettings, ServerSettings
from mcpd.providers import (
    BuiltinPromptProvider,
    BuiltinResourceProvider,
    BuiltinToolProvider,
    register_builtins,
)
from mcpd.server.server import MCPServer


class TestRegisterBuiltins:
    def test_defaults(self) -> None:
        server = MCPServer()
        register_builtins(server)

        assert isinstance(server.tool_provider, BuiltinToolProvider)
        assert isinstance(server.resource_provider, BuiltinResourceProvider)
        assert isinstance(server.prompt_provider, BuiltinPromptProvider)
        assert "echo" in server.registry.tools
        assert "docs://api" in server.registry.resources
        assert "code_review" in server.registry.prompts

    def test_disabled_family_skipped(self) -> None:
        server = MCPServer(ServerSettings(capabilities=CapabilitySettings(tools=False)))
        register_builtins(server)

        assert server.tool_provider is None
        assert len(server.registry.tools) == 0
        assert len(server.registry.prompts) > 0

    def test_builtins_off_keeps_file_resources(self, tmp_path: Path) -> None:
        path = tmp_path / "readme.txt"
        path.write_text("hi")
        settings = ServerSettings(
            builtins=False,
            file_resources=[FileResourceSettings(path=str(path), uri="file:///readme")],
        )
        server = MCPServer(settings)
        register_builtins(server)

        assert [r.uri for r in server.registry.resources.list()] == ["file:///readme"]
        assert len(server.registry.tools) == 0
        assert server.prompt_provider is None
        assert server.resource_provider is not None
