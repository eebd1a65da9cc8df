"""mcpd: a JSON-RPC 2.0 dispatch engine serving the Model Context Protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from mcpd.config import ServerSettings as ServerSettings
    from mcpd.server.server import MCPServer as MCPServer

_LAZY_EXPORTS = {
    "MCPServer": "mcpd.server.server",
    "ServerSettings": "mcpd.config",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'mcpd' has no attribute {name!r}")
