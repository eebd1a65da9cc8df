"""Message codec: parse, validate and serialize JSON-RPC 2.0 messages.

Parsing happens in two steps so transports can batch:

1. :func:`parse_json` turns raw bytes into a Python value (or raises
   :class:`ParseError`).
2. :func:`parse_message` validates one decoded object and returns a
   :class:`JsonRpcRequest` or :class:`JsonRpcNotification` (or raises
   :class:`InvalidRequestError`).

A message is a request iff the ``id`` key is present, including an explicit
``null``.  Absence of the key marks a notification.
"""

from __future__ import annotations

import json
import math
from typing import Any

from mcpd.protocol.errors import InvalidRequestError, MCPError, ParseError
from mcpd.protocol.models import (
    JSONRPC_VERSION,
    JsonRpcError,
    JsonRpcMessage,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    RequestId,
)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _parse_float(literal: str) -> float:
    value = float(literal)
    if not math.isfinite(value):
        raise ValueError(f"Number out of range: {literal}")
    return value


def parse_json(raw: str | bytes) -> Any:
    """Decode *raw* into a Python value.

    Only standard JSON is accepted: ``NaN``, ``Infinity`` and numbers that
    overflow a float are rejected.

    Raises:
        ParseError: If *raw* is not valid UTF-8 JSON.
    """
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return json.loads(raw, parse_constant=_reject_constant, parse_float=_parse_float)
    except ValueError as exc:
        raise ParseError(data=str(exc)) from exc


def is_valid_id(value: object) -> bool:
    """Return ``True`` for ids JSON-RPC allows: string, number or null."""
    if value is None or isinstance(value, str):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    return isinstance(value, int) and not isinstance(value, bool)


def salvage_id(obj: object) -> RequestId:
    """Best-effort id extraction for error responses to invalid messages."""
    if isinstance(obj, dict):
        candidate = obj.get("id")
        if is_valid_id(candidate):
            return candidate  # type: ignore[return-value]
    return None


def parse_message(obj: Any) -> JsonRpcMessage:
    """Validate a decoded JSON value as a single request or notification.

    The protocol tag is compared literally and ``method``/``id``/``params``
    are checked by type, not just presence.

    Raises:
        InvalidRequestError: If *obj* is not a well-formed JSON-RPC message.
    """
    if not isinstance(obj, dict):
        raise InvalidRequestError(data="JSON-RPC message must be an object")

    request_id = salvage_id(obj)

    if obj.get("jsonrpc") != JSONRPC_VERSION:
        raise InvalidRequestError(
            data="'jsonrpc' must be exactly \"2.0\"", request_id=request_id
        )

    method = obj.get("method")
    if not isinstance(method, str):
        raise InvalidRequestError(data="'method' must be a string", request_id=request_id)

    if "id" in obj and not is_valid_id(obj["id"]):
        raise InvalidRequestError(data="'id' must be a string, number or null")

    params = obj.get("params")
    if params is not None and not isinstance(params, dict | list):
        raise InvalidRequestError(
            data="'params' must be an object or array", request_id=request_id
        )

    if "id" in obj:
        return JsonRpcRequest(id=obj["id"], method=method, params=params)
    return JsonRpcNotification(method=method, params=params)


def parse(raw: str | bytes) -> JsonRpcMessage | list[JsonRpcMessage]:
    """Parse raw input into one message or a batch of messages.

    Convenience for callers that want exceptions rather than per-member
    error responses; transports use :func:`parse_json` and
    :func:`parse_message` separately.
    """
    payload = parse_json(raw)
    if isinstance(payload, list):
        if not payload:
            raise InvalidRequestError(data="Batch must not be empty")
        return [parse_message(item) for item in payload]
    return parse_message(payload)


def success_response(request_id: RequestId, result: Any) -> JsonRpcResponse:
    return JsonRpcResponse(id=request_id, result=result)


def error_response(request_id: RequestId, error: JsonRpcError | MCPError) -> JsonRpcResponse:
    if isinstance(error, MCPError):
        error = error.to_error()
    return JsonRpcResponse(id=request_id, error=error)


def encode(message: JsonRpcResponse | JsonRpcMessage | list[JsonRpcResponse]) -> str:
    """Serialize one message or a batch of responses to compact JSON."""
    if isinstance(message, list):
        return json.dumps([item.dump() for item in message], separators=(",", ":"))
    return json.dumps(message.dump(), separators=(",", ":"))
