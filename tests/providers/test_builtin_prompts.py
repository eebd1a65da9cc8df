"""Tests for the built-in prompt templates."""

from __future__ import annotations

import pytest

from mcpd.protocol.errors import InvalidParamsError, PromptNotFoundError
from mcpd.providers.prompts import BuiltinPromptProvider
from mcpd.server.provider import PromptProvider


async def _render(name: str, **arguments: str) -> str:
    result = await BuiltinPromptProvider().render(name, arguments)
    assert len(result.messages) == 1
    message = result.messages[0]
    assert message.role == "user"
    assert message.content.type == "text"
    return message.content.text


class TestProvider:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(BuiltinPromptProvider(), PromptProvider)

    def test_descriptors(self) -> None:
        prompts = {p.name: p for p in BuiltinPromptProvider().descriptors()}
        assert set(prompts) == {"code_review", "explain_concept", "debug_help", "write_docs", "summarize"}
        assert prompts["summarize"].required_arguments == ["text"]

    async def test_unknown(self) -> None:
        with pytest.raises(PromptNotFoundError):
            await BuiltinPromptProvider().render("nope", {})

    async def test_missing_required(self) -> None:
        with pytest.raises(InvalidParamsError) as exc_info:
            await BuiltinPromptProvider().render("debug_help", {"context": "startup"})
        assert exc_info.value.message == "Missing required argument: error"
        assert exc_info.value.data == {"prompt": "debug_help", "missing": ["error"]}

    async def test_empty_required_counts_as_missing(self) -> None:
        with pytest.raises(InvalidParamsError):
            await BuiltinPromptProvider().render("summarize", {"text": ""})

    async def test_description(self) -> None:
        result = await BuiltinPromptProvider().render("summarize", {"text": "t"})
        assert result.description == "Generate a summary of the provided text"


class TestTemplates:
    async def test_code_review(self) -> None:
        text = await _render("code_review", code="print(1)", language="python", focus="style")
        assert "```python\nprint(1)\n```" in text
        assert "Please focus specifically on: style" in text

    async def test_code_review_without_language(self) -> None:
        text = await _render("code_review", code="x")
        assert text.startswith("Please review the following code:")

    async def test_explain_concept_examples_flag(self) -> None:
        with_examples = await _render("explain_concept", concept="closures", examples="true")
        without = await _render("explain_concept", concept="closures", examples="no")
        assert "- Practical examples or use cases" in with_examples
        assert "- Practical examples or use cases" not in without

    async def test_explain_concept_audience(self) -> None:
        text = await _render("explain_concept", concept="monads", audience="beginner")
        assert text.startswith('Please explain the concept of "monads" for a beginner audience.')

    async def test_debug_help(self) -> None:
        text = await _render("debug_help", error="KeyError: 'x'", code="d['x']")
        assert "KeyError: 'x'" in text
        assert "Relevant code:" in text

    async def test_write_docs(self) -> None:
        text = await _render("write_docs", subject="the parser", include_examples="yes")
        assert "Please write documentation for: the parser" in text
        assert "- Code examples showing how to use it" in text

    async def test_summarize_default_length(self) -> None:
        text = await _render("summarize", text="long text")
        assert text == "Please summarize the following text in no more than 100 words:\n\nlong text"

    async def test_summarize_max_words(self) -> None:
        assert "no more than 20 words" in await _render("summarize", text="t", max_words="20")
