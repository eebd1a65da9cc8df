"""MCPServer: wires session, registry, providers and dispatcher together.

The server implements the fixed MCP method set on top of a
:class:`~mcpd.server.dispatcher.Dispatcher`.  Transports hand it decoded
JSON payloads (single messages or batches) via :meth:`MCPServer.handle_payload`
and write back whatever it returns.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import ValidationError

from mcpd.config import ServerSettings
from mcpd.protocol.codec import error_response, parse_message
from mcpd.protocol.errors import (
    InternalError,
    InvalidParamsError,
    InvalidRequestError,
    PromptNotFoundError,
    ResourceNotFoundError,
    ToolNotFoundError,
    UnsupportedProtocolVersionError,
)
from mcpd.protocol.models import (
    CallToolParams,
    CallToolResult,
    GetPromptParams,
    GetPromptResult,
    Implementation,
    InitializeParams,
    InitializeResult,
    JsonRpcMessage,
    JsonRpcNotification,
    JsonRpcResponse,
    ListPromptsResult,
    ListResourcesResult,
    ListToolsResult,
    MCPModel,
    PaginatedParams,
    Prompt,
    ReadResourceParams,
    ReadResourceResult,
    Resource,
    SetLevelParams,
    Tool,
)
from mcpd.server.dispatcher import Dispatcher, HandlerFn, HandlerKind, Method
from mcpd.server.registry import CapabilityRegistry, RegistryEvent
from mcpd.server.session import ServerSession
from mcpd.utils.logging import set_level
from mcpd.utils.telemetry import (
    ATTR_PROMPT_NAME,
    ATTR_RESOURCE_URI,
    ATTR_TOOL_IS_ERROR,
    ATTR_TOOL_NAME,
    get_tracer,
)

if TYPE_CHECKING:
    from mcpd.server.provider import PromptProvider, ResourceProvider, ToolProvider

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

P = TypeVar("P", bound=MCPModel)

NotificationListener = Callable[[JsonRpcNotification], None]


def parse_params(model: type[P], params: Any) -> P:
    """Validate raw ``params`` against *model*.

    Raises:
        InvalidParamsError: If *params* is not an object or fails validation.
    """
    if params is None:
        params = {}
    if not isinstance(params, dict):
        raise InvalidParamsError("Params must be an object")
    try:
        return model.model_validate(params)
    except ValidationError as exc:
        problems = [
            {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"]}
            for err in exc.errors()
        ]
        raise InvalidParamsError(data=problems) from exc


class MCPServer:
    """An MCP server: one session, three registries, three providers.

    Usage::

        server = MCPServer(ServerSettings(), tool_provider=my_tools)
        server.register_tool(Tool(name="echo", input_schema={...}))
        response = await server.handle_payload({"jsonrpc": "2.0", "id": 1, ...})
    """

    def __init__(
        self,
        settings: ServerSettings | None = None,
        *,
        registry: CapabilityRegistry | None = None,
        tool_provider: ToolProvider | None = None,
        resource_provider: ResourceProvider | None = None,
        prompt_provider: PromptProvider | None = None,
    ) -> None:
        self.settings = settings or ServerSettings()
        self.registry = registry or CapabilityRegistry()
        self.tool_provider = tool_provider
        self.resource_provider = resource_provider
        self.prompt_provider = prompt_provider

        self.session = ServerSession(log_level=self.settings.log_level)
        self.capabilities = self.settings.capabilities.build()
        self.server_info = Implementation(name=self.settings.name, version=self.settings.version)

        self.dispatcher = Dispatcher(
            self.session,
            require_initialization=self.settings.require_initialization,
            debug=self.settings.debug,
        )
        self._listeners: list[NotificationListener] = []

        self._install_handlers()
        self.registry.subscribe(self._on_registry_change)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def initialized(self) -> bool:
        return self.session.initialized

    def register_resource(self, resource: Resource) -> None:
        self.registry.resources.register(resource)

    def register_tool(self, tool: Tool) -> None:
        self.registry.tools.register(tool)

    def register_prompt(self, prompt: Prompt) -> None:
        self.registry.prompts.register(prompt)

    def register_method(
        self,
        method: str,
        fn: HandlerFn,
        *,
        kind: HandlerKind = HandlerKind.REQUEST,
    ) -> None:
        """Extension point: add or replace a method handler (last one wins)."""
        self.dispatcher.register(method, fn, kind=kind)

    def add_notification_listener(self, listener: NotificationListener) -> Callable[[], None]:
        """Receive server-initiated notifications; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    async def dispatch(self, message: JsonRpcMessage) -> JsonRpcResponse | None:
        return await self.dispatcher.dispatch(message)

    async def handle_payload(self, payload: Any) -> JsonRpcResponse | list[JsonRpcResponse] | None:
        """Handle one decoded JSON payload: a single message or a batch.

        Batch members are dispatched concurrently; the returned list keeps
        input order and omits notifications.  Returns ``None`` when nothing
        needs to be sent back.
        """
        if isinstance(payload, list):
            if not payload:
                return error_response(None, InvalidRequestError(data="Batch must not be empty"))
            results = await asyncio.gather(*(self._handle_one(item) for item in payload))
            responses = [response for response in results if response is not None]
            return responses or None
        return await self._handle_one(payload)

    def describe(self) -> dict[str, Any]:
        """Server info and capabilities, as reported by ``/health`` and ``/``."""
        return {
            "server": self.server_info.dump(),
            "capabilities": self.capabilities.dump(),
        }

    # ------------------------------------------------------------------
    # Handler table
    # ------------------------------------------------------------------

    def _install_handlers(self) -> None:
        register = self.dispatcher.register
        register(Method.INITIALIZE, self._initialize)
        register(Method.INITIALIZED, self._initialized, kind=HandlerKind.NOTIFICATION)
        register(
            Method.NOTIFICATIONS_INITIALIZED,
            self._initialized,
            kind=HandlerKind.NOTIFICATION,
        )
        register(Method.PING, self._ping)

        if self.capabilities.resources is not None:
            register(Method.RESOURCES_LIST, self._list_resources)
            register(Method.RESOURCES_READ, self._read_resource)
        if self.capabilities.tools is not None:
            register(Method.TOOLS_LIST, self._list_tools)
            register(Method.TOOLS_CALL, self._call_tool)
        if self.capabilities.prompts is not None:
            register(Method.PROMPTS_LIST, self._list_prompts)
            register(Method.PROMPTS_GET, self._get_prompt)
        if self.capabilities.logging is not None:
            register(Method.LOGGING_SET_LEVEL, self._set_level)

    async def _handle_one(self, obj: Any) -> JsonRpcResponse | None:
        try:
            message = parse_message(obj)
        except InvalidRequestError as exc:
            return error_response(exc.request_id, exc)
        return await self.dispatch(message)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def _initialize(self, params: Any) -> InitializeResult:
        if self.session.initialized and not self.settings.allow_reinitialize:
            raise InvalidRequestError("Server already initialized")

        request = parse_params(InitializeParams, params)
        supported = self.settings.protocol_versions
        if request.protocol_version not in supported:
            raise UnsupportedProtocolVersionError(request.protocol_version, supported)

        self.session.begin(request.protocol_version, request.client_info, request.capabilities)
        logger.info(
            "Session initialized by %s %s (protocol %s)",
            request.client_info.name,
            request.client_info.version,
            request.protocol_version,
        )
        return InitializeResult(
            protocol_version=request.protocol_version,
            capabilities=self.capabilities,
            server_info=self.server_info,
        )

    async def _initialized(self, _params: Any) -> None:
        self.session.acknowledge()
        logger.info("Client acknowledged initialization")

    async def _ping(self, _params: Any) -> dict[str, Any]:
        return {}

    async def _set_level(self, params: Any) -> dict[str, Any]:
        request = parse_params(SetLevelParams, params)
        self.session.log_level = request.level
        set_level(request.level)
        logger.info("Log level set to %s", request.level)
        return {}

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    async def _list_resources(self, params: Any) -> ListResourcesResult:
        parse_params(PaginatedParams, params)
        return ListResourcesResult(resources=self.registry.resources.list())

    async def _read_resource(self, params: Any) -> ReadResourceResult:
        request = parse_params(ReadResourceParams, params)
        if request.uri not in self.registry.resources:
            raise ResourceNotFoundError(request.uri)
        if self.resource_provider is None:
            raise InternalError("No resource provider configured")

        with _tracer.start_as_current_span("mcpd.resource.read") as span:
            span.set_attribute(ATTR_RESOURCE_URI, request.uri)
            return await self.resource_provider.read(request.uri)

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    async def _list_tools(self, params: Any) -> ListToolsResult:
        parse_params(PaginatedParams, params)
        return ListToolsResult(tools=self.registry.tools.list())

    async def _call_tool(self, params: Any) -> CallToolResult:
        request = parse_params(CallToolParams, params)
        if request.name not in self.registry.tools:
            raise ToolNotFoundError(request.name)
        if self.tool_provider is None:
            raise InternalError("No tool provider configured")

        with _tracer.start_as_current_span("mcpd.tool.call") as span:
            span.set_attribute(ATTR_TOOL_NAME, request.name)
            result = await self.tool_provider.execute(request.name, request.arguments)
            span.set_attribute(ATTR_TOOL_IS_ERROR, bool(result.is_error))
            return result

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------

    async def _list_prompts(self, params: Any) -> ListPromptsResult:
        parse_params(PaginatedParams, params)
        return ListPromptsResult(prompts=self.registry.prompts.list())

    async def _get_prompt(self, params: Any) -> GetPromptResult:
        request = parse_params(GetPromptParams, params)
        prompt = self.registry.prompts.get(request.name)
        if prompt is None:
            raise PromptNotFoundError(request.name)
        if self.prompt_provider is None:
            raise InternalError("No prompt provider configured")

        with _tracer.start_as_current_span("mcpd.prompt.get") as span:
            span.set_attribute(ATTR_PROMPT_NAME, request.name)
            result = await self.prompt_provider.render(request.name, request.arguments)
        if result.description is None:
            result = result.model_copy(update={"description": prompt.description})
        return result

    # ------------------------------------------------------------------
    # List-changed relay
    # ------------------------------------------------------------------

    def _on_registry_change(self, event: RegistryEvent) -> None:
        if not self.session.initialized:
            return
        capability = getattr(self.capabilities, event.kind)
        if capability is None or not capability.list_changed:
            return

        notification = JsonRpcNotification(method=f"notifications/{event.kind}/list_changed")
        for listener in list(self._listeners):
            try:
                listener(notification)
            except Exception:
                logger.exception("Notification listener failed for %s", notification.method)
