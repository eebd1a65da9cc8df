"""Capability registry: in-memory descriptor maps with change subscriptions.

Each :class:`Registry` maps a key (resource URI, tool name, prompt name) to a
descriptor.  The registry holds metadata only; content and behavior live in
the providers.  Mutations notify subscribers synchronously and
fire-and-forget: a failing subscriber is logged and never affects the
caller, and nothing is buffered when nobody is listening.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

from mcpd.protocol.models import Prompt, Resource, Tool

logger = logging.getLogger(__name__)

T = TypeVar("T")

RegistryKind = Literal["resources", "tools", "prompts"]


@dataclass(frozen=True)
class RegistryEvent:
    """Emitted whenever a registry's contents change."""

    kind: RegistryKind
    key: str
    action: Literal["registered", "unregistered"] = "registered"


RegistryListener = Callable[[RegistryEvent], None]


class Registry(Generic[T]):
    """Ordered key → descriptor map.

    ``register`` replaces an existing entry in place (last write wins, the
    original position is kept), so ``list()`` never holds duplicate keys.
    """

    def __init__(self, kind: RegistryKind, key: Callable[[T], str]) -> None:
        self.kind: RegistryKind = kind
        self._key = key
        self._items: dict[str, T] = {}
        self._listeners: list[RegistryListener] = []

    def register(self, descriptor: T) -> None:
        key = self._key(descriptor)
        self._items[key] = descriptor
        logger.debug("Registered %s entry %s", self.kind, key)
        self._emit(RegistryEvent(self.kind, key))

    def unregister(self, key: str) -> bool:
        """Remove *key*; returns ``False`` when it was not registered."""
        if self._items.pop(key, None) is None:
            return False
        self._emit(RegistryEvent(self.kind, key, "unregistered"))
        return True

    def get(self, key: str) -> T | None:
        return self._items.get(key)

    def list(self) -> list[T]:
        """Snapshot of all descriptors in insertion order."""
        return list(self._items.values())

    def subscribe(self, listener: RegistryListener) -> Callable[[], None]:
        """Add *listener*; returns a callable that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: RegistryEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Registry listener failed for %s/%s", event.kind, event.key)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)


class CapabilityRegistry:
    """The three independent registries served by an MCP server."""

    def __init__(self) -> None:
        self.resources: Registry[Resource] = Registry("resources", lambda r: r.uri)
        self.tools: Registry[Tool] = Registry("tools", lambda t: t.name)
        self.prompts: Registry[Prompt] = Registry("prompts", lambda p: p.name)

    def subscribe(self, listener: RegistryListener) -> Callable[[], None]:
        """Subscribe *listener* to all three registries at once."""
        unsubscribers = [
            self.resources.subscribe(listener),
            self.tools.subscribe(listener),
            self.prompts.subscribe(listener),
        ]

        def unsubscribe() -> None:
            for fn in unsubscribers:
                fn()

        return unsubscribe
