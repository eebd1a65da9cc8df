"""Logging setup and MCP log-level mapping.

All log output goes to stderr: on the stdio transport stdout carries
protocol traffic only.
"""

from __future__ import annotations

import logging
from typing import get_args

from rich.console import Console
from rich.logging import RichHandler

from mcpd.protocol.models import LoggingLevel

LOGGER_NAME = "mcpd"

MCP_LEVELS: tuple[str, ...] = get_args(LoggingLevel)

_LEVEL_MAP: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "notice": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "alert": logging.CRITICAL,
    "emergency": logging.CRITICAL,
}


def to_python_level(level: str) -> int:
    """Map an MCP logging level name onto a :mod:`logging` level number.

    Raises:
        ValueError: If *level* is not one of the eight MCP level names.
    """
    try:
        return _LEVEL_MAP[level.lower()]
    except KeyError:
        msg = f"Unknown log level: {level!r} (expected one of {', '.join(MCP_LEVELS)})"
        raise ValueError(msg) from None


def set_level(level: str) -> None:
    """Set the level of the ``mcpd`` logger tree."""
    logging.getLogger(LOGGER_NAME).setLevel(to_python_level(level))


def configure_logging(level: str = "info") -> None:
    """Install a rich handler on stderr for the ``mcpd`` logger tree."""
    root = logging.getLogger(LOGGER_NAME)
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)

    handler = RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    root.propagate = False
    set_level(level)
