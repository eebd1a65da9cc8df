"""Tests for MCP wire models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from mcpd.protocol.models import (
    CallToolResult,
    ImageContent,
    InitializeParams,
    JsonRpcResponse,
    Prompt,
    PromptArgument,
    PromptMessage,
    ResourceContents,
    ResourcesCapability,
    ServerCapabilities,
    TextContent,
    Tool,
    ToolsCapability,
)


class TestTool:
    def test_default_schema(self) -> None:
        tool = Tool(name="t")
        assert tool.input_schema == {"type": "object", "properties": {}}

    def test_alias_input(self) -> None:
        tool = Tool.model_validate({"name": "t", "inputSchema": {"type": "object"}})
        assert tool.input_schema == {"type": "object"}

    def test_dump_uses_camel_case(self) -> None:
        dumped = Tool(name="t", description="d").dump()
        assert "inputSchema" in dumped
        assert "input_schema" not in dumped


class TestCapabilities:
    def test_list_changed_alias(self) -> None:
        caps = ServerCapabilities(
            tools=ToolsCapability(list_changed=True),
            resources=ResourcesCapability(subscribe=False, list_changed=True),
            logging={},
        )
        assert caps.dump() == {
            "tools": {"listChanged": True},
            "resources": {"subscribe": False, "listChanged": True},
            "logging": {},
        }

    def test_absent_family_omitted(self) -> None:
        assert ServerCapabilities().dump() == {}


class TestInitializeParams:
    def test_camel_case_input(self) -> None:
        params = InitializeParams.model_validate(
            {
                "protocolVersion": "2024-11-05",
                "capabilities": {"roots": {"listChanged": True}},
                "clientInfo": {"name": "c", "version": "1"},
            }
        )
        assert params.protocol_version == "2024-11-05"
        assert params.client_info.name == "c"

    def test_capabilities_optional(self) -> None:
        params = InitializeParams.model_validate(
            {"protocolVersion": "2024-11-05", "clientInfo": {"name": "c", "version": "1"}}
        )
        assert params.capabilities.dump() == {}

    def test_client_info_required(self) -> None:
        with pytest.raises(ValidationError):
            InitializeParams.model_validate({"protocolVersion": "2024-11-05"})


class TestContent:
    def test_resource_contents_needs_one_payload(self) -> None:
        with pytest.raises(ValidationError):
            ResourceContents(uri="mem://x")
        with pytest.raises(ValidationError):
            ResourceContents(uri="mem://x", text="a", blob="YQ==")

    def test_resource_contents_text(self) -> None:
        contents = ResourceContents(uri="mem://x", mime_type="text/plain", text="a")
        assert contents.dump() == {"uri": "mem://x", "mimeType": "text/plain", "text": "a"}

    def test_content_discriminator(self) -> None:
        message = PromptMessage.model_validate(
            {"role": "user", "content": {"type": "image", "data": "AA==", "mimeType": "image/png"}}
        )
        assert isinstance(message.content, ImageContent)

    def test_unknown_content_type(self) -> None:
        with pytest.raises(ValidationError):
            PromptMessage.model_validate({"role": "user", "content": {"type": "video"}})

    def test_call_tool_result_from_text(self) -> None:
        assert CallToolResult.from_text("hi").dump() == {
            "content": [{"type": "text", "text": "hi"}],
        }

    def test_call_tool_result_error_flag(self) -> None:
        result = CallToolResult.from_text("bad", is_error=True)
        assert result.dump()["isError"] is True
        assert isinstance(result.content[0], TextContent)


class TestPrompt:
    def test_required_arguments(self) -> None:
        prompt = Prompt(
            name="p",
            arguments=[
                PromptArgument(name="a", required=True),
                PromptArgument(name="b"),
            ],
        )
        assert prompt.required_arguments == ["a"]


class TestJsonRpcResponse:
    def test_id_always_present(self) -> None:
        assert JsonRpcResponse(id=None, result={}).dump() == {
            "jsonrpc": "2.0",
            "id": None,
            "result": {},
        }

    def test_is_error(self) -> None:
        response = JsonRpcResponse.model_validate(
            {"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "nope"}}
        )
        assert response.is_error
