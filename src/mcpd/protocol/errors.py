"""JSON-RPC error codes and the exception hierarchy of the protocol layer.

Handlers signal protocol-level rejections by raising an :class:`MCPError`
subclass.  The dispatcher forwards those verbatim; any other exception is
wrapped as :class:`InternalError`.
"""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mcpd.protocol.models import JsonRpcError, RequestId


class ErrorCode(IntEnum):
    """Canonical JSON-RPC 2.0 error codes plus the reserved application ranges."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    SERVER_ERROR = -32000
    APPLICATION_ERROR = -32500


class MCPError(Exception):
    """Base error for every fault that maps onto a JSON-RPC error object."""

    code: int = ErrorCode.INTERNAL_ERROR
    default_message: str = "Internal error"

    def __init__(
        self,
        message: str | None = None,
        data: Any = None,
        *,
        code: int | None = None,
    ) -> None:
        if code is not None:
            self.code = code
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)

    def to_error(self) -> JsonRpcError:
        """Return the wire representation of this fault."""
        from mcpd.protocol.models import JsonRpcError

        return JsonRpcError(code=int(self.code), message=self.message, data=self.data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={int(self.code)}, message={self.message!r})"


class ParseError(MCPError):
    """The payload is not syntactically valid JSON."""

    code = ErrorCode.PARSE_ERROR
    default_message = "Parse error"


class InvalidRequestError(MCPError):
    """The payload is JSON but not a valid JSON-RPC 2.0 message.

    ``request_id`` keeps the message id when it could be salvaged, so the
    error response can still echo it.
    """

    code = ErrorCode.INVALID_REQUEST
    default_message = "Invalid Request"

    def __init__(
        self,
        message: str | None = None,
        data: Any = None,
        *,
        request_id: RequestId = None,
    ) -> None:
        self.request_id = request_id
        super().__init__(message, data)


class MethodNotFoundError(MCPError):
    """No handler is registered for the requested method."""

    code = ErrorCode.METHOD_NOT_FOUND
    default_message = "Method not found"

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"Method not found: {method}", {"method": method})


class InvalidParamsError(MCPError):
    """The method exists but its parameters are missing or malformed."""

    code = ErrorCode.INVALID_PARAMS
    default_message = "Invalid params"


class InternalError(MCPError):
    """An unexpected fault inside a handler or provider."""

    code = ErrorCode.INTERNAL_ERROR
    default_message = "Internal error"


class ResourceNotFoundError(InvalidParamsError):
    """Requested resource URI is not registered."""

    def __init__(self, uri: str) -> None:
        self.uri = uri
        super().__init__(f"Resource not found: {uri}", {"uri": uri})


class ToolNotFoundError(InvalidParamsError):
    """Requested tool does not exist in the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool not found: {name}", {"name": name})


class PromptNotFoundError(InvalidParamsError):
    """Requested prompt does not exist in the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Prompt not found: {name}", {"name": name})


class UnsupportedProtocolVersionError(InvalidParamsError):
    """The client asked for a protocol revision this server does not speak."""

    def __init__(self, requested: object, supported: list[str]) -> None:
        self.requested = requested
        self.supported = list(supported)
        super().__init__(
            f"Unsupported protocol version: {requested}",
            {"requested": requested, "supported": self.supported},
        )
