"""Tests for ``mcpd probe`` CLI command."""

from __future__ import annotations

from unittest.mock import patch

import httpx
from click.testing import CliRunner

from mcpd.cli import main
from mcpd.client.transport import HttpTransport
from mcpd.config import CapabilitySettings, ServerSettings
from mcpd.providers import register_builtins
from mcpd.server.server import MCPServer
from mcpd.transport.http import create_app


def _in_process_transport(settings: ServerSettings | None = None) -> HttpTransport:
    server = MCPServer(settings)
    register_builtins(server)
    return HttpTransport(
        "http://testserver/mcp",
        transport=httpx.ASGITransport(app=create_app(server)),
    )


class TestProbeCommand:
    def test_probe_http(self) -> None:
        runner = CliRunner()
        with patch("mcpd.client.create_transport", return_value=_in_process_transport()) as mock_create:
            result = runner.invoke(main, ["probe", "http://testserver/mcp"])

        assert result.exit_code == 0, result.output
        mock_create.assert_called_once_with("http://testserver/mcp", None)
        assert "Connected" in result.output
        assert "echo" in result.output
        assert "code_review" in result.output

    def test_probe_skips_disabled_families(self) -> None:
        settings = ServerSettings(capabilities=CapabilitySettings(tools=False))
        runner = CliRunner()
        with patch("mcpd.client.create_transport", return_value=_in_process_transport(settings)):
            result = runner.invoke(main, ["probe", "http://testserver/mcp", "--transport", "http"])

        assert result.exit_code == 0, result.output
        assert "Tools" not in result.output
        assert "Resources" in result.output

    def test_probe_unreachable(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["probe", "definitely-not-an-mcpd-binary-xyz"])

        assert result.exit_code == 1
        assert "Probe error" in result.output
