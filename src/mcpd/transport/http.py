"""HTTP transport: a Starlette app serving JSON-RPC on ``POST /mcp``.

Routes:

* ``POST /mcp``: one message or a batch array.  Notifications-only input
  yields ``204``; malformed JSON yields ``400`` with a parse error envelope.
* ``GET /health``: liveness plus server info and capabilities.
* ``GET /``: a short description of the service.

Any other path or method gets a JSON ``404`` listing the endpoints.

The whole process shares one :class:`~mcpd.server.session.ServerSession`.
List-changed notifications are not relayed: plain request/response HTTP
has no channel for server-initiated messages.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import uvicorn
from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from mcpd.protocol.codec import error_response, parse_json
from mcpd.protocol.errors import InvalidRequestError, ParseError
from mcpd.utils.logging import to_python_level
from mcpd.utils.telemetry import ATTR_BATCH_SIZE, ATTR_TRANSPORT, get_tracer

if TYPE_CHECKING:
    from mcpd.config import ServerSettings
    from mcpd.server.server import MCPServer

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

ENDPOINTS = ["/", "/health", "/mcp"]


def create_app(server: MCPServer, settings: ServerSettings | None = None) -> Starlette:
    """Build the ASGI app for *server*.

    Usage::

        app = create_app(server)
        uvicorn.run(app, host="127.0.0.1", port=3000)
    """
    settings = settings or server.settings

    async def handle_mcp(request: Request) -> Response:
        raw = await request.body()
        try:
            payload = parse_json(raw)
        except ParseError as exc:
            logger.warning("Rejected malformed request body: %s", exc.data)
            return JSONResponse(error_response(None, exc).dump(), status_code=400)

        if isinstance(payload, list) and not payload:
            error = InvalidRequestError(data="Batch must not be empty")
            return JSONResponse(error_response(None, error).dump(), status_code=400)

        with _tracer.start_as_current_span("mcpd.http.request") as span:
            span.set_attribute(ATTR_TRANSPORT, "http")
            if isinstance(payload, list):
                span.set_attribute(ATTR_BATCH_SIZE, len(payload))
            result = await server.handle_payload(payload)

        if result is None:
            return Response(status_code=204)
        if isinstance(result, list):
            return JSONResponse([response.dump() for response in result])
        return JSONResponse(result.dump())

    async def health(_request: Request) -> Response:
        return JSONResponse(
            {
                "status": "healthy",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                **server.describe(),
                "initialized": server.initialized,
            }
        )

    async def index(_request: Request) -> Response:
        return JSONResponse(
            {
                "name": settings.name,
                "description": "Model Context Protocol server (JSON-RPC 2.0)",
                "version": settings.version,
                "endpoints": {"health": "/health", "mcp": "/mcp (POST)"},
                **server.describe(),
            }
        )

    async def not_found(request: Request, _exc: HTTPException) -> Response:
        return JSONResponse(
            {
                "error": "Not Found",
                "message": f"Endpoint {request.url.path} not found",
                "availableEndpoints": ENDPOINTS,
            },
            status_code=404,
        )

    async def server_error(request: Request, exc: Exception) -> Response:
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        message = str(exc) if settings.debug else "An unexpected error occurred"
        return JSONResponse(
            {"error": "Internal Server Error", "message": message},
            status_code=500,
        )

    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=settings.http.cors_origins,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization"],
        )
    ]

    app = Starlette(
        debug=False,
        routes=[
            Route("/", index, methods=["GET"]),
            Route("/health", health, methods=["GET"]),
            Route("/mcp", handle_mcp, methods=["POST"]),
        ],
        middleware=middleware,
        exception_handlers={404: not_found, 405: not_found, 500: server_error},
    )
    app.state.server = server
    return app


def uvicorn_log_level(level: str) -> str:
    """Translate an MCP level name into one uvicorn accepts."""
    return logging.getLevelName(to_python_level(level)).lower()


def run_http(
    server: MCPServer,
    settings: ServerSettings | None = None,
    *,
    host: str | None = None,
    port: int | None = None,
) -> None:
    """Serve *server* over HTTP with uvicorn until interrupted."""
    settings = settings or server.settings
    app = create_app(server, settings)
    bind_host = host or settings.http.host
    bind_port = port or settings.http.port
    logger.info("Serving MCP on http://%s:%d/mcp", bind_host, bind_port)
    uvicorn.run(app, host=bind_host, port=bind_port, log_level=uvicorn_log_level(settings.log_level))
