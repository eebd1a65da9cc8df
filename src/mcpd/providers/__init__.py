"""Built-in providers and the helper that installs them on a server."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mcpd.providers.prompts import PROMPTS, BuiltinPromptProvider
from mcpd.providers.resources import RESOURCES, BuiltinResourceProvider, file_resource
from mcpd.providers.tools import TOOLS, BuiltinToolProvider, ToolInputError, evaluate

if TYPE_CHECKING:
    from mcpd.config import ServerSettings
    from mcpd.server.server import MCPServer

logger = logging.getLogger(__name__)

__all__ = [
    "PROMPTS",
    "RESOURCES",
    "TOOLS",
    "BuiltinPromptProvider",
    "BuiltinResourceProvider",
    "BuiltinToolProvider",
    "ToolInputError",
    "evaluate",
    "file_resource",
    "register_builtins",
]


def register_builtins(server: MCPServer, settings: ServerSettings | None = None) -> None:
    """Wire the built-in providers into *server* and register their descriptors.

    Families whose capability is disabled are skipped.  Configured file
    resources are served even when ``settings.builtins`` is off.
    """
    settings = settings or server.settings

    if server.capabilities.resources is not None:
        resources = BuiltinResourceProvider(server.capabilities, settings.file_resources)
        server.resource_provider = resources
        descriptors = resources.descriptors()
        if not settings.builtins:
            descriptors = [file_resource(entry) for entry in settings.file_resources]
        for resource in descriptors:
            server.register_resource(resource)

    if not settings.builtins:
        logger.info("Built-in tools and prompts disabled")
        return

    if server.capabilities.tools is not None:
        tools = BuiltinToolProvider()
        server.tool_provider = tools
        for tool in tools.descriptors():
            server.register_tool(tool)

    if server.capabilities.prompts is not None:
        prompts = BuiltinPromptProvider()
        server.prompt_provider = prompts
        for prompt in prompts.descriptors():
            server.register_prompt(prompt)

    logger.debug(
        "Registered %d resources, %d tools, %d prompts",
        len(server.registry.resources),
        len(server.registry.tools),
        len(server.registry.prompts),
    )
