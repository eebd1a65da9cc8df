"""Provider protocols: the interfaces the server delegates content to.

The registry only knows descriptors.  Actually running a tool, reading a
resource or rendering a prompt is delegated to a provider satisfying one
of these protocols.  Providers signal protocol-level rejections by raising
:class:`~mcpd.protocol.errors.MCPError`; any other exception is reported to
the client as an internal error.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from mcpd.protocol.models import CallToolResult, GetPromptResult, ReadResourceResult


@runtime_checkable
class ToolProvider(Protocol):
    """Executes tools by name."""

    async def execute(self, name: str, arguments: dict[str, Any]) -> CallToolResult:
        """Run tool *name* with *arguments*.

        A handled failure (bad input, division by zero, ...) is returned as
        a result with ``is_error=True`` rather than raised.
        """
        ...


@runtime_checkable
class ResourceProvider(Protocol):
    """Reads resource content by URI."""

    async def read(self, uri: str) -> ReadResourceResult: ...


@runtime_checkable
class PromptProvider(Protocol):
    """Renders prompt templates by name."""

    async def render(self, name: str, arguments: dict[str, str]) -> GetPromptResult: ...
