"""Protocol layer: JSON-RPC envelopes, MCP payload models and the error taxonomy."""

from mcpd.protocol.codec import encode, error_response, parse, parse_json, parse_message, success_response
from mcpd.protocol.errors import (
    ErrorCode,
    InternalError,
    InvalidParamsError,
    InvalidRequestError,
    MCPError,
    MethodNotFoundError,
    ParseError,
    PromptNotFoundError,
    ResourceNotFoundError,
    ToolNotFoundError,
    UnsupportedProtocolVersionError,
)
from mcpd.protocol.models import (
    CallToolResult,
    GetPromptResult,
    JsonRpcError,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    Prompt,
    PromptArgument,
    ReadResourceResult,
    Resource,
    ServerCapabilities,
    Tool,
)

__all__ = [
    "CallToolResult",
    "ErrorCode",
    "GetPromptResult",
    "InternalError",
    "InvalidParamsError",
    "InvalidRequestError",
    "JsonRpcError",
    "JsonRpcNotification",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "MCPError",
    "MethodNotFoundError",
    "ParseError",
    "Prompt",
    "PromptArgument",
    "PromptNotFoundError",
    "ReadResourceResult",
    "Resource",
    "ResourceNotFoundError",
    "ServerCapabilities",
    "Tool",
    "ToolNotFoundError",
    "UnsupportedProtocolVersionError",
    "encode",
    "error_response",
    "parse",
    "parse_json",
    "parse_message",
    "success_response",
]
