"""Tests for the capability registries."""

from __future__ import annotations

from mcpd.protocol.models import Prompt, Resource, Tool
from mcpd.server.registry import CapabilityRegistry, Registry, RegistryEvent


def _tool_registry() -> Registry[Tool]:
    return Registry("tools", lambda t: t.name)


class TestRegistry:
    def test_insertion_order(self) -> None:
        reg = _tool_registry()
        for name in ("b", "a", "c"):
            reg.register(Tool(name=name))
        assert [t.name for t in reg.list()] == ["b", "a", "c"]

    def test_replace_keeps_position(self) -> None:
        reg = _tool_registry()
        reg.register(Tool(name="a", description="old"))
        reg.register(Tool(name="b"))
        reg.register(Tool(name="a", description="new"))

        tools = reg.list()
        assert [t.name for t in tools] == ["a", "b"]
        assert tools[0].description == "new"

    def test_get_and_contains(self) -> None:
        reg = _tool_registry()
        reg.register(Tool(name="a"))
        assert reg.get("a") is not None
        assert reg.get("missing") is None
        assert "a" in reg
        assert "missing" not in reg
        assert len(reg) == 1

    def test_list_is_snapshot(self) -> None:
        reg = _tool_registry()
        reg.register(Tool(name="a"))
        snapshot = reg.list()
        snapshot.clear()
        assert len(reg.list()) == 1

    def test_unregister(self) -> None:
        reg = _tool_registry()
        reg.register(Tool(name="a"))
        assert reg.unregister("a") is True
        assert reg.unregister("a") is False
        assert reg.list() == []


class TestRegistryEvents:
    def test_register_emits(self) -> None:
        reg = _tool_registry()
        events: list[RegistryEvent] = []
        reg.subscribe(events.append)

        reg.register(Tool(name="a"))
        reg.unregister("a")

        assert events == [
            RegistryEvent("tools", "a", "registered"),
            RegistryEvent("tools", "a", "unregistered"),
        ]

    def test_unsubscribe(self) -> None:
        reg = _tool_registry()
        events: list[RegistryEvent] = []
        unsubscribe = reg.subscribe(events.append)
        unsubscribe()
        reg.register(Tool(name="a"))
        assert events == []

    def test_failing_listener_does_not_break_register(self) -> None:
        reg = _tool_registry()
        events: list[RegistryEvent] = []

        def broken(_event: RegistryEvent) -> None:
            raise RuntimeError("listener down")

        reg.subscribe(broken)
        reg.subscribe(events.append)
        reg.register(Tool(name="a"))

        assert "a" in reg
        assert len(events) == 1

    def test_no_listener_no_buffering(self) -> None:
        reg = _tool_registry()
        reg.register(Tool(name="a"))
        events: list[RegistryEvent] = []
        reg.subscribe(events.append)
        assert events == []


class TestCapabilityRegistry:
    def test_independent_namespaces(self) -> None:
        registry = CapabilityRegistry()
        registry.tools.register(Tool(name="x"))
        registry.prompts.register(Prompt(name="x"))
        registry.resources.register(Resource(uri="x", name="x"))

        assert len(registry.tools) == 1
        assert len(registry.prompts) == 1
        assert len(registry.resources) == 1

    def test_subscribe_all(self) -> None:
        registry = CapabilityRegistry()
        kinds: list[str] = []
        unsubscribe = registry.subscribe(lambda event: kinds.append(event.kind))

        registry.tools.register(Tool(name="t"))
        registry.resources.register(Resource(uri="mem://r", name="r"))
        registry.prompts.register(Prompt(name="p"))
        unsubscribe()
        registry.tools.register(Tool(name="t2"))

        assert kinds == ["tools", "resources", "prompts"]
