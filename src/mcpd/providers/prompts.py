"""BuiltinPromptProvider: prompt templates for common developer tasks."""

from __future__ import annotations

from collections.abc import Callable

from mcpd.protocol.errors import InvalidParamsError, PromptNotFoundError
from mcpd.protocol.models import (
    GetPromptResult,
    Prompt,
    PromptArgument,
    PromptMessage,
    TextContent,
)

PROMPTS: list[Prompt] = [
    Prompt(
        name="code_review",
        description="Perform a code review on the provided code",
        arguments=[
            PromptArgument(name="code", description="The code to review", required=True),
            PromptArgument(name="language", description="Programming language of the code"),
            PromptArgument(
                name="focus",
                description="Specific aspects to focus on (security, performance, style, ...)",
            ),
        ],
    ),
    Prompt(
        name="explain_concept",
        description="Explain a technical concept in simple terms",
        arguments=[
            PromptArgument(name="concept", description="The concept to explain", required=True),
            PromptArgument(
                name="audience",
                description="Target audience (beginner, intermediate, expert)",
            ),
            PromptArgument(name="examples", description="Include practical examples (true/false)"),
        ],
    ),
    Prompt(
        name="debug_help",
        description="Help debug a problem or error",
        arguments=[
            PromptArgument(
                name="error",
                description="The error message or problem description",
                required=True,
            ),
            PromptArgument(name="context", description="When the error occurs"),
            PromptArgument(name="code", description="Relevant code snippet"),
        ],
    ),
    Prompt(
        name="write_docs",
        description="Generate documentation for code or an API",
        arguments=[
            PromptArgument(name="subject", description="What to document", required=True),
            PromptArgument(name="style", description="Documentation style (Sphinx, JSDoc, ...)"),
            PromptArgument(name="include_examples", description="Include usage examples (true/false)"),
        ],
    ),
    Prompt(
        name="summarize",
        description="Generate a summary of the provided text",
        arguments=[
            PromptArgument(name="text", description="The text to summarize", required=True),
            PromptArgument(name="max_words", description="Maximum number of words in the summary"),
        ],
    ),
]

PromptRenderer = Callable[[dict[str, str]], str]


def _flag(value: str | None) -> bool:
    return (value or "").strip().lower() in ("true", "yes", "1")


def _code_review(args: dict[str, str]) -> str:
    language = args.get("language")
    lines = [
        f"Please review the following {language or 'code'}:",
        "",
        f"```{language or ''}",
        args["code"],
        "```",
        "",
    ]
    if args.get("focus"):
        lines += [f"Please focus specifically on: {args['focus']}", ""]
    lines += [
        "Please provide feedback on:",
        "- Code quality and readability",
        "- Potential bugs or issues",
        "- Performance considerations",
        "- Security considerations",
        "- Suggestions for improvement",
    ]
    return "\n".join(lines)


def _explain_concept(args: dict[str, str]) -> str:
    intro = f'Please explain the concept of "{args["concept"]}"'
    if args.get("audience"):
        intro += f" for a {args['audience']} audience"
    lines = [
        intro + ".",
        "",
        "Please structure your explanation with:",
        "- A clear definition",
        "- Key characteristics or components",
        "- Why it is important or useful",
    ]
    if _flag(args.get("examples")):
        lines.append("- Practical examples or use cases")
    lines.append("- Common misconceptions (if any)")
    return "\n".join(lines)


def _debug_help(args: dict[str, str]) -> str:
    lines = ["I'm encountering the following error:", "", args["error"], ""]
    if args.get("context"):
        lines += [f"Context: {args['context']}", ""]
    if args.get("code"):
        lines += ["Relevant code:", "```", args["code"], "```", ""]
    lines += [
        "Please help me:",
        "- Understand what is causing this error",
        "- Find possible solutions",
        "- Prevent this in the future",
    ]
    return "\n".join(lines)


def _write_docs(args: dict[str, str]) -> str:
    lines = [f"Please write documentation for: {args['subject']}", ""]
    if args.get("style"):
        lines += [f"Please use {args['style']} format.", ""]
    lines += [
        "Please include:",
        "- Clear description of purpose and functionality",
        "- Parameters and return values (if applicable)",
        "- Usage instructions",
    ]
    if _flag(args.get("include_examples")):
        lines.append("- Code examples showing how to use it")
    lines.append("- Any important notes or warnings")
    return "\n".join(lines)


def _summarize(args: dict[str, str]) -> str:
    max_words = args.get("max_words") or "100"
    return f"Please summarize the following text in no more than {max_words} words:\n\n{args['text']}"


_RENDERERS: dict[str, PromptRenderer] = {
    "code_review": _code_review,
    "explain_concept": _explain_concept,
    "debug_help": _debug_help,
    "write_docs": _write_docs,
    "summarize": _summarize,
}


class BuiltinPromptProvider:
    """Renders the templates in :data:`PROMPTS` into a single user message.

    Satisfies the :class:`~mcpd.server.provider.PromptProvider` protocol.
    """

    def __init__(self) -> None:
        self._prompts = {prompt.name: prompt for prompt in PROMPTS}

    def descriptors(self) -> list[Prompt]:
        return list(self._prompts.values())

    async def render(self, name: str, arguments: dict[str, str]) -> GetPromptResult:
        prompt = self._prompts.get(name)
        renderer = _RENDERERS.get(name)
        if prompt is None or renderer is None:
            raise PromptNotFoundError(name)

        missing = [arg for arg in prompt.required_arguments if not arguments.get(arg)]
        if missing:
            raise InvalidParamsError(
                f"Missing required argument: {', '.join(missing)}",
                {"prompt": name, "missing": missing},
            )

        message = PromptMessage(role="user", content=TextContent(text=renderer(arguments)))
        return GetPromptResult(description=prompt.description, messages=[message])
