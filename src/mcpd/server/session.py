"""Server session: the protocol state of one connection."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mcpd.protocol.models import ClientCapabilities, Implementation, LoggingLevel


@dataclass
class ServerSession:
    """Negotiated state for one stdio connection (or the whole HTTP process).

    ``initialized`` flips to ``True`` on the first successful ``initialize``
    and never reverts.
    """

    initialized: bool = False
    protocol_version: str | None = None
    client_info: Implementation | None = None
    client_capabilities: ClientCapabilities | None = None
    log_level: LoggingLevel = "info"
    acknowledged: bool = field(default=False)

    def begin(
        self,
        protocol_version: str,
        client_info: Implementation,
        client_capabilities: ClientCapabilities,
    ) -> None:
        """Record the outcome of a successful ``initialize``."""
        self.protocol_version = protocol_version
        self.client_info = client_info
        self.client_capabilities = client_capabilities
        self.initialized = True

    def acknowledge(self) -> None:
        """The client sent ``notifications/initialized``."""
        self.acknowledged = True
