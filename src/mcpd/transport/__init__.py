"""Transports: stdio (line-delimited) and HTTP (Starlette)."""

from mcpd.transport.http import create_app, run_http
from mcpd.transport.stdio import StdioServer, run_stdio

__all__ = ["StdioServer", "create_app", "run_http", "run_stdio"]
