"""Server layer: registry, session, dispatcher and the MCP method set."""

from mcpd.server.dispatcher import Dispatcher, Handler, HandlerKind, Method
from mcpd.server.provider import PromptProvider, ResourceProvider, ToolProvider
from mcpd.server.registry import CapabilityRegistry, Registry, RegistryEvent
from mcpd.server.server import MCPServer, parse_params
from mcpd.server.session import ServerSession

__all__ = [
    "CapabilityRegistry",
    "Dispatcher",
    "Handler",
    "HandlerKind",
    "MCPServer",
    "Method",
    "PromptProvider",
    "Registry",
    "RegistryEvent",
    "ResourceProvider",
    "ServerSession",
    "ToolProvider",
    "parse_params",
]
