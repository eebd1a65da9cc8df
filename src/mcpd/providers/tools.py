"""BuiltinToolProvider: the example tool set shipped with mcpd.

Tool failures a caller can act on (missing argument, bad expression,
division by zero, unreadable directory) come back as results with
``isError: true``.  Anything else propagates and is reported as an
internal error by the dispatcher.
"""

from __future__ import annotations

import ast
import asyncio
import base64
import binascii
import logging
import math
import operator
import os
import uuid
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any

from mcpd.protocol.errors import ToolNotFoundError
from mcpd.protocol.models import CallToolResult, Tool

logger = logging.getLogger(__name__)


class ToolInputError(ValueError):
    """A tool received arguments it cannot work with."""


TOOLS: list[Tool] = [
    Tool(
        name="echo",
        description="Echo back the provided text",
        input_schema={
            "type": "object",
            "properties": {
                "text": {"type": "string", "description": "The text to echo back"},
            },
            "required": ["text"],
        },
    ),
    Tool(
        name="calculate",
        description="Evaluate an arithmetic expression, or apply an operation to two numbers",
        input_schema={
            "type": "object",
            "properties": {
                "expression": {
                    "type": "string",
                    "description": 'Arithmetic expression to evaluate (e.g. "2 + 3 * 4")',
                },
                "operation": {
                    "type": "string",
                    "enum": ["add", "subtract", "multiply", "divide"],
                },
                "a": {"type": "number"},
                "b": {"type": "number"},
            },
        },
    ),
    Tool(
        name="uuid",
        description="Generate one or more random UUIDs (v4)",
        input_schema={
            "type": "object",
            "properties": {
                "count": {
                    "type": "integer",
                    "description": "Number of UUIDs to generate",
                    "default": 1,
                    "minimum": 1,
                    "maximum": 10,
                },
            },
        },
    ),
    Tool(
        name="timestamp",
        description="Get the current time",
        input_schema={
            "type": "object",
            "properties": {
                "format": {
                    "type": "string",
                    "enum": ["iso", "unix", "readable"],
                    "default": "iso",
                },
            },
        },
    ),
    Tool(
        name="base64_encode",
        description="Encode text to base64",
        input_schema={
            "type": "object",
            "properties": {"text": {"type": "string", "description": "Text to encode"}},
            "required": ["text"],
        },
    ),
    Tool(
        name="base64_decode",
        description="Decode base64 text",
        input_schema={
            "type": "object",
            "properties": {
                "encoded": {"type": "string", "description": "Base64 encoded text to decode"},
            },
            "required": ["encoded"],
        },
    ),
    Tool(
        name="weather",
        description="Get (mock) weather information for a location",
        input_schema={
            "type": "object",
            "properties": {
                "location": {"type": "string", "description": "Location to get weather for"},
                "units": {"type": "string", "enum": ["celsius", "fahrenheit"]},
            },
            "required": ["location"],
        },
    ),
    Tool(
        name="file_list",
        description="List files in a directory",
        input_schema={
            "type": "object",
            "properties": {"path": {"type": "string", "description": "Directory path to list"}},
            "required": ["path"],
        },
    ),
]


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------

_BINARY_OPS: dict[type[ast.operator], Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPS: dict[type[ast.unaryop], Callable[[Any], Any]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

_NAMED_OPS: dict[str, tuple[str, Callable[[Any, Any], Any]]] = {
    "add": ("+", operator.add),
    "subtract": ("-", operator.sub),
    "multiply": ("*", operator.mul),
    "divide": ("/", operator.truediv),
}

# Larger exponents can stall the event loop.
_MAX_EXPONENT = 1000

# Integer results are capped well below the interpreter's int-to-str digit limit.
_MAX_RESULT_BITS = 8192


def evaluate(expression: str) -> int | float:
    """Evaluate a plain arithmetic expression without ``eval``.

    Only numeric literals, ``+ - * / // % **`` and parentheses are accepted.

    Raises:
        ToolInputError: On any other syntax, or a non-finite result.
        ZeroDivisionError: On division by zero.
    """
    try:
        tree = ast.parse(expression, mode="eval")
    except (SyntaxError, ValueError, RecursionError) as exc:
        raise ToolInputError(f"Invalid expression: {expression!r}") from exc

    try:
        result = _eval_node(tree.body)
    except RecursionError as exc:
        raise ToolInputError("Expression is nested too deeply") from exc
    if isinstance(result, float) and (result != result or result in (float("inf"), float("-inf"))):
        raise ToolInputError("Result is not a finite number")
    return result


def _eval_node(node: ast.AST) -> int | float:
    if isinstance(node, ast.Constant) and type(node.value) in (int, float):
        return _check_magnitude(node.value)
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
        left = _eval_node(node.left)
        right = _eval_node(node.right)
        if isinstance(node.op, ast.Pow):
            _check_power(left, right)
        return _check_magnitude(_BINARY_OPS[type(node.op)](left, right))
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_eval_node(node.operand))
    raise ToolInputError("Only numbers and arithmetic operators are allowed")


def _check_power(base: int | float, exponent: int | float) -> None:
    if abs(exponent) > _MAX_EXPONENT:
        raise ToolInputError("Exponent too large")
    if isinstance(base, int) and isinstance(exponent, int) and exponent > 0:
        if abs(base).bit_length() * exponent > _MAX_RESULT_BITS:
            raise ToolInputError("Result is too large")


def _check_magnitude(value: int | float) -> int | float:
    if isinstance(value, complex):
        raise ToolInputError("Result is not a real number")
    if isinstance(value, int) and abs(value).bit_length() > _MAX_RESULT_BITS:
        raise ToolInputError("Result is too large")
    return value


def format_number(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _to_number(value: Any, name: str) -> int | float:
    if isinstance(value, bool):
        raise ToolInputError(f"'{name}' must be a number")
    if isinstance(value, int | float):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ToolInputError(f"'{name}' must be a number") from None


def _require_str(arguments: dict[str, Any], *names: str) -> str:
    for name in names:
        value = arguments.get(name)
        if isinstance(value, str):
            return value
    raise ToolInputError(f"'{names[0]}' is required and must be a string")


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------


class BuiltinToolProvider:
    """Runs the tools in :data:`TOOLS`.

    Satisfies the :class:`~mcpd.server.provider.ToolProvider` protocol.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, Callable[[dict[str, Any]], Awaitable[str]]] = {
            "echo": self._echo,
            "calculate": self._calculate,
            "uuid": self._uuid,
            "timestamp": self._timestamp,
            "base64_encode": self._base64_encode,
            "base64_decode": self._base64_decode,
            "weather": self._weather,
            "file_list": self._file_list,
        }

    def descriptors(self) -> list[Tool]:
        return [tool for tool in TOOLS if tool.name in self._handlers]

    async def execute(self, name: str, arguments: dict[str, Any]) -> CallToolResult:
        handler = self._handlers.get(name)
        if handler is None:
            raise ToolNotFoundError(name)
        try:
            text = await handler(arguments)
        except ToolInputError as exc:
            logger.debug("Tool %s rejected input: %s", name, exc)
            return CallToolResult.from_text(f"Error: {exc}", is_error=True)
        except ZeroDivisionError:
            return CallToolResult.from_text("Error: Division by zero", is_error=True)
        except OverflowError:
            return CallToolResult.from_text("Error: Result is too large", is_error=True)
        return CallToolResult.from_text(text)

    async def _echo(self, arguments: dict[str, Any]) -> str:
        # "message" is accepted for older clients.
        return _require_str(arguments, "text", "message")

    async def _calculate(self, arguments: dict[str, Any]) -> str:
        expression = arguments.get("expression")
        if isinstance(expression, str) and expression.strip():
            return f"{expression} = {format_number(evaluate(expression))}"

        operation = arguments.get("operation")
        if operation is None:
            raise ToolInputError("Provide 'expression', or 'operation' with 'a' and 'b'")
        if operation not in _NAMED_OPS:
            raise ToolInputError(f"Unknown operation: {operation}")
        symbol, fn = _NAMED_OPS[operation]
        a = _to_number(arguments.get("a"), "a")
        b = _to_number(arguments.get("b"), "b")
        result = _check_magnitude(fn(_check_magnitude(a), _check_magnitude(b)))
        return f"{format_number(a)} {symbol} {format_number(b)} = {format_number(result)}"

    async def _uuid(self, arguments: dict[str, Any]) -> str:
        raw = arguments.get("count", 1)
        number = _to_number(raw, "count") if raw is not None else 1
        if not math.isfinite(number):
            raise ToolInputError("'count' must be a finite number")
        count = int(number)
        count = min(max(count, 1), 10)
        return "\n".join(str(uuid.uuid4()) for _ in range(count))

    async def _timestamp(self, arguments: dict[str, Any]) -> str:
        fmt = arguments.get("format") or "iso"
        now = datetime.now(timezone.utc)
        if fmt == "iso":
            return now.isoformat()
        if fmt == "unix":
            return str(int(now.timestamp()))
        if fmt == "readable":
            return now.strftime("%Y-%m-%d %H:%M:%S UTC")
        raise ToolInputError(f"Unknown format: {fmt}")

    async def _base64_encode(self, arguments: dict[str, Any]) -> str:
        text = _require_str(arguments, "text")
        return base64.b64encode(text.encode("utf-8")).decode("ascii")

    async def _base64_decode(self, arguments: dict[str, Any]) -> str:
        encoded = _require_str(arguments, "encoded", "text")
        try:
            return base64.b64decode(encoded, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise ToolInputError("Invalid base64 input") from exc

    async def _weather(self, arguments: dict[str, Any]) -> str:
        location = _require_str(arguments, "location")
        units = arguments.get("units") or "celsius"
        if units not in ("celsius", "fahrenheit"):
            raise ToolInputError(f"Unknown units: {units}")
        temperature = "22°C" if units == "celsius" else "72°F"
        return f"Weather in {location}: Sunny, {temperature}, Light breeze"

    async def _file_list(self, arguments: dict[str, Any]) -> str:
        path = _require_str(arguments, "path")
        try:
            entries = await asyncio.to_thread(os.listdir, path)
        except OSError as exc:
            raise ToolInputError(f"Cannot list {path}: {exc.strerror or exc}") from exc
        lines = [f"- {entry}" for entry in sorted(entries)]
        return "\n".join([f"Files in {path}:", *lines])
