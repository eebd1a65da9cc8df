"""MCP client used to probe servers over stdio or HTTP."""

from mcpd.client.client import MCPClient
from mcpd.client.transport import (
    HttpTransport,
    MCPTransport,
    StdioTransport,
    TransportError,
    create_transport,
)

__all__ = [
    "HttpTransport",
    "MCPClient",
    "MCPTransport",
    "StdioTransport",
    "TransportError",
    "create_transport",
]
