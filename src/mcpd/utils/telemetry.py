"""OpenTelemetry tracing for mcpd.

Every layer asks for a tracer through :func:`get_tracer` and opens spans
unconditionally.  Until :func:`configure_telemetry` installs an SDK
provider the OpenTelemetry API hands out no-op tracers, so spans cost
nothing when tracing is off.

Span names used by the server:

* ``mcpd.dispatch``: one per JSON-RPC message routed by the dispatcher
* ``mcpd.tool.call`` / ``mcpd.resource.read`` / ``mcpd.prompt.get``
* ``mcpd.stdio.line`` / ``mcpd.http.request``: one per transport input

Enable export with the ``otel`` extra (``pip install mcpd[otel]``) and
``mcpd serve ... --telemetry``.
"""

from __future__ import annotations

import sys
from typing import Any, TextIO

from opentelemetry import trace

# Span attribute keys
ATTR_METHOD = "mcpd.rpc.method"
ATTR_REQUEST_ID = "mcpd.rpc.request_id"
ATTR_NOTIFICATION = "mcpd.rpc.notification"
ATTR_ERROR_CODE = "mcpd.rpc.error_code"
ATTR_TRANSPORT = "mcpd.transport"
ATTR_BATCH_SIZE = "mcpd.batch.size"
ATTR_TOOL_NAME = "mcpd.tool.name"
ATTR_TOOL_IS_ERROR = "mcpd.tool.is_error"
ATTR_RESOURCE_URI = "mcpd.resource.uri"
ATTR_PROMPT_NAME = "mcpd.prompt.name"

_INSTRUMENTATION_NAME = "mcpd"

_SDK_HINT = "Install it with: pip install mcpd[otel]"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return the tracer for *name* (``mcpd`` when omitted)."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    *,
    service_name: str = "mcpd",
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Install an SDK tracer provider for the whole process.

    Parameters
    ----------
    service_name:
        The ``service.name`` resource attribute.
    export_to_console:
        Write finished spans as JSON to *stream* (stderr by default, since
        stdout carries protocol traffic on the stdio transport).
    otlp_endpoint:
        Also batch-export spans via OTLP/gRPC to this endpoint.
    stream:
        Target of the console exporter.

    Raises
    ------
    ImportError
        If ``opentelemetry-sdk`` (or, for OTLP, ``opentelemetry-exporter-otlp``)
        is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
    except ImportError as exc:
        msg = f"opentelemetry-sdk is required for configure_telemetry(). {_SDK_HINT}"
        raise ImportError(msg) from exc

    processors: list[Any] = []
    if export_to_console:
        processors.append(_console_processor(stream or sys.stderr))
    if otlp_endpoint:
        processors.append(_otlp_processor(otlp_endpoint))

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))  # pyright: ignore[reportUnknownVariableType,reportUnknownMemberType]
    for processor in processors:
        provider.add_span_processor(processor)  # pyright: ignore[reportUnknownMemberType]
    trace.set_tracer_provider(provider)  # pyright: ignore[reportUnknownArgumentType]


def _console_processor(stream: TextIO) -> Any:
    from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor  # pyright: ignore[reportMissingImports,reportUnknownVariableType]

    return SimpleSpanProcessor(ConsoleSpanExporter(out=stream))


def _otlp_processor(endpoint: str) -> Any:
    from opentelemetry.sdk.trace.export import BatchSpanProcessor  # pyright: ignore[reportMissingImports,reportUnknownVariableType]

    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
    except ImportError as exc:
        msg = f"opentelemetry-exporter-otlp is required for OTLP export. {_SDK_HINT}"
        raise ImportError(msg) from exc

    return BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint))
