"""MCP models: JSON-RPC 2.0 envelopes and Model Context Protocol payloads.

Wire names are camelCase; Python attributes are snake_case.  Every model
accepts either spelling on input and :meth:`MCPModel.dump` produces the
wire form with unset optional fields omitted.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

RequestId = str | int | float | None

LoggingLevel = Literal[
    "debug",
    "info",
    "notice",
    "warning",
    "error",
    "critical",
    "alert",
    "emergency",
]

JSONRPC_VERSION = "2.0"


class MCPModel(BaseModel):
    """Base for every wire model."""

    model_config = ConfigDict(populate_by_name=True)

    def dump(self) -> dict[str, Any]:
        """Serialize to the camelCase wire shape, dropping ``None`` fields."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcRequest(MCPModel):
    """A JSON-RPC 2.0 request: carries an ``id`` and expects a response."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: RequestId
    method: str
    params: dict[str, Any] | list[Any] | None = None


class JsonRpcNotification(MCPModel):
    """A JSON-RPC 2.0 notification: no ``id``, never answered."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    method: str
    params: dict[str, Any] | list[Any] | None = None


JsonRpcMessage = JsonRpcRequest | JsonRpcNotification


class JsonRpcError(MCPModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(MCPModel):
    """A JSON-RPC 2.0 response carrying exactly one of ``result`` or ``error``."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: RequestId = None
    result: Any = None
    error: JsonRpcError | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def dump(self) -> dict[str, Any]:
        """Wire shape; ``id`` is always present, even when ``null``."""
        data: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            data["error"] = self.error.dump()
        else:
            data["result"] = self.result
        return data


# ---------------------------------------------------------------------------
# Capability negotiation
# ---------------------------------------------------------------------------


class Implementation(MCPModel):
    """Name and version of a client or server implementation."""

    name: str
    version: str


class ResourcesCapability(MCPModel):
    subscribe: bool = False
    list_changed: bool = Field(default=False, alias="listChanged")


class ToolsCapability(MCPModel):
    list_changed: bool = Field(default=False, alias="listChanged")


class PromptsCapability(MCPModel):
    list_changed: bool = Field(default=False, alias="listChanged")


class ServerCapabilities(MCPModel):
    """Feature flags advertised by the server during ``initialize``."""

    resources: ResourcesCapability | None = None
    tools: ToolsCapability | None = None
    prompts: PromptsCapability | None = None
    logging: dict[str, Any] | None = None
    experimental: dict[str, Any] | None = None


class ClientCapabilities(MCPModel):
    """Feature flags sent by the client; unknown keys are kept."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    experimental: dict[str, Any] | None = None
    sampling: dict[str, Any] | None = None
    roots: dict[str, Any] | None = None


class InitializeParams(MCPModel):
    protocol_version: str = Field(alias="protocolVersion")
    capabilities: ClientCapabilities = Field(default_factory=ClientCapabilities)
    client_info: Implementation = Field(alias="clientInfo")


class InitializeResult(MCPModel):
    protocol_version: str = Field(alias="protocolVersion")
    capabilities: ServerCapabilities
    server_info: Implementation = Field(alias="serverInfo")


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


class Resource(MCPModel):
    """Metadata for a readable resource, keyed by ``uri``."""

    uri: str
    name: str
    description: str | None = None
    mime_type: str | None = Field(default=None, alias="mimeType")


class Tool(MCPModel):
    """Metadata for an invocable tool, keyed by ``name``.

    ``input_schema`` is declarative; it is never validated by the server.
    """

    name: str
    description: str | None = None
    input_schema: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        alias="inputSchema",
    )


class PromptArgument(MCPModel):
    name: str
    description: str | None = None
    required: bool = False


class Prompt(MCPModel):
    """Metadata for a prompt template, keyed by ``name``."""

    name: str
    description: str | None = None
    arguments: list[PromptArgument] = Field(default_factory=lambda: list[PromptArgument]())

    @property
    def required_arguments(self) -> list[str]:
        return [arg.name for arg in self.arguments if arg.required]


# ---------------------------------------------------------------------------
# Content blocks (text, image, embedded resource)
# ---------------------------------------------------------------------------


class ResourceContents(MCPModel):
    """Content of a resource: exactly one of ``text`` or ``blob`` (base64)."""

    uri: str
    mime_type: str | None = Field(default=None, alias="mimeType")
    text: str | None = None
    blob: str | None = None

    @model_validator(mode="after")
    def _one_payload(self) -> ResourceContents:
        if (self.text is None) == (self.blob is None):
            msg = "resource contents need exactly one of 'text' or 'blob'"
            raise ValueError(msg)
        return self


class TextContent(MCPModel):
    type: Literal["text"] = "text"
    text: str


class ImageContent(MCPModel):
    type: Literal["image"] = "image"
    data: str
    mime_type: str = Field(alias="mimeType")


class EmbeddedResource(MCPModel):
    type: Literal["resource"] = "resource"
    resource: ResourceContents


ContentBlock = Annotated[
    TextContent | ImageContent | EmbeddedResource,
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Method params and results
# ---------------------------------------------------------------------------


class PaginatedParams(MCPModel):
    """Params accepted by the ``*/list`` methods; the cursor is opaque."""

    cursor: str | None = None


class ListResourcesResult(MCPModel):
    resources: list[Resource]
    next_cursor: str | None = Field(default=None, alias="nextCursor")


class ListToolsResult(MCPModel):
    tools: list[Tool]
    next_cursor: str | None = Field(default=None, alias="nextCursor")


class ListPromptsResult(MCPModel):
    prompts: list[Prompt]
    next_cursor: str | None = Field(default=None, alias="nextCursor")


class ReadResourceParams(MCPModel):
    uri: str


class ReadResourceResult(MCPModel):
    contents: list[ResourceContents]


class CallToolParams(MCPModel):
    name: str
    arguments: dict[str, Any] = Field(default_factory=lambda: dict[str, Any]())


class CallToolResult(MCPModel):
    """Outcome of a tool run.

    ``is_error=True`` means the tool ran and reported a failure; protocol
    faults are JSON-RPC errors instead.
    """

    content: list[ContentBlock] = Field(default_factory=lambda: list[ContentBlock]())
    is_error: bool | None = Field(default=None, alias="isError")

    @classmethod
    def from_text(cls, text: str, *, is_error: bool = False) -> CallToolResult:
        """Create a result with a single text block."""
        blocks: list[ContentBlock] = [TextContent(text=text)]
        return cls(content=blocks, is_error=True if is_error else None)


class GetPromptParams(MCPModel):
    name: str
    arguments: dict[str, str] = Field(default_factory=lambda: dict[str, str]())


class PromptMessage(MCPModel):
    role: Literal["user", "assistant", "system"]
    content: ContentBlock


class GetPromptResult(MCPModel):
    description: str | None = None
    messages: list[PromptMessage]


class SetLevelParams(MCPModel):
    level: LoggingLevel
