"""Method dispatcher: routes JSON-RPC messages to handlers.

The dispatcher owns the handler table and the session state machine
(uninitialized → initialized).  It turns handler outcomes into responses:

* success → ``result``
* :class:`~mcpd.protocol.errors.MCPError` → forwarded verbatim
* any other exception → ``InternalError`` with the message text as ``data``
* notifications → never a response, whatever the outcome
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel

from mcpd.protocol.errors import InternalError, InvalidRequestError, MCPError, MethodNotFoundError
from mcpd.protocol.models import JsonRpcError, JsonRpcMessage, JsonRpcRequest, JsonRpcResponse, MCPModel
from mcpd.server.session import ServerSession
from mcpd.utils.telemetry import (
    ATTR_ERROR_CODE,
    ATTR_METHOD,
    ATTR_NOTIFICATION,
    ATTR_REQUEST_ID,
    get_tracer,
)

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


class Method(str, Enum):
    """The fixed method set every server registers at startup."""

    INITIALIZE = "initialize"
    INITIALIZED = "initialized"
    NOTIFICATIONS_INITIALIZED = "notifications/initialized"
    PING = "ping"
    RESOURCES_LIST = "resources/list"
    RESOURCES_READ = "resources/read"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    PROMPTS_LIST = "prompts/list"
    PROMPTS_GET = "prompts/get"
    LOGGING_SET_LEVEL = "logging/setLevel"


class HandlerKind(str, Enum):
    REQUEST = "request"
    NOTIFICATION = "notification"


HandlerFn = Callable[[Any], Awaitable[Any]]


@dataclass(frozen=True)
class Handler:
    """A handler tagged with the kind of message it answers."""

    kind: HandlerKind
    fn: HandlerFn


# Methods a client may call before ``initialize`` has succeeded.
UNGATED_METHODS: frozenset[str] = frozenset({Method.INITIALIZE.value, Method.PING.value})


class Dispatcher:
    """Pluggable method router bound to one :class:`ServerSession`.

    Usage::

        dispatcher = Dispatcher(session)
        dispatcher.register("tools/list", list_tools)
        response = await dispatcher.dispatch(message)  # None for notifications
    """

    def __init__(
        self,
        session: ServerSession,
        *,
        require_initialization: bool = True,
        ungated: Iterable[str] = UNGATED_METHODS,
        debug: bool = False,
    ) -> None:
        self.session = session
        self.require_initialization = require_initialization
        self.debug = debug
        self._ungated = frozenset(ungated)
        self._handlers: dict[str, Handler] = {}

    def register(
        self,
        method: str,
        fn: HandlerFn,
        *,
        kind: HandlerKind = HandlerKind.REQUEST,
    ) -> None:
        """Bind *fn* to *method*; an existing binding is silently replaced."""
        name = method.value if isinstance(method, Method) else method
        if name in self._handlers:
            logger.debug("Replacing handler for %s", name)
        self._handlers[name] = Handler(kind=kind, fn=fn)

    def handler(self, method: str) -> Handler | None:
        return self._handlers.get(method)

    def methods(self) -> list[str]:
        return list(self._handlers)

    async def dispatch(self, message: JsonRpcMessage) -> JsonRpcResponse | None:
        """Run the handler for *message* and build its response.

        Returns ``None`` for notifications.
        """
        is_request = isinstance(message, JsonRpcRequest)

        with _tracer.start_as_current_span("mcpd.dispatch") as span:
            span.set_attribute(ATTR_METHOD, message.method)
            span.set_attribute(ATTR_NOTIFICATION, not is_request)
            if is_request and message.id is not None:
                span.set_attribute(ATTR_REQUEST_ID, str(message.id))

            try:
                result = await self._invoke(message, is_request=is_request)
            except Exception as exc:
                error = self._classify(exc, message.method, is_request=is_request)
                span.set_attribute(ATTR_ERROR_CODE, error.code)
                if not is_request:
                    return None
                return JsonRpcResponse(id=message.id, error=error)

            if not is_request:
                return None
            return JsonRpcResponse(id=message.id, result=_to_wire(result))

    async def _invoke(self, message: JsonRpcMessage, *, is_request: bool) -> Any:
        handler = self._handlers.get(message.method)
        if handler is None:
            raise MethodNotFoundError(message.method)

        if is_request and handler.kind is HandlerKind.NOTIFICATION:
            raise InvalidRequestError(f"{message.method} is a notification and takes no id")

        if (
            self.require_initialization
            and not self.session.initialized
            and message.method not in self._ungated
        ):
            raise InvalidRequestError("Server not initialized")

        logger.debug("Dispatching %s", message.method)
        return await handler.fn(message.params)

    def _classify(self, exc: Exception, method: str, *, is_request: bool) -> JsonRpcError:
        if isinstance(exc, MCPError):
            if is_request:
                logger.info("%s rejected: %s", method, exc.message)
            else:
                logger.debug("Notification %s dropped: %s", method, exc.message)
            return exc.to_error()

        logger.error("Unhandled error in %s", method, exc_info=exc)
        data: Any = str(exc)
        if self.debug:
            data = {"detail": str(exc), "exception": type(exc).__name__}
        return InternalError(data=data).to_error()


def _to_wire(result: Any) -> Any:
    if isinstance(result, MCPModel):
        return result.dump()
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json", exclude_none=True)
    return result
