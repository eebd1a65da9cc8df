"""Server configuration: pydantic settings loaded from YAML."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from mcpd import __version__
from mcpd.protocol.models import (
    LoggingLevel,
    PromptsCapability,
    ResourcesCapability,
    ServerCapabilities,
    ToolsCapability,
)

DEFAULT_PROTOCOL_VERSIONS = ["2024-11-05", "2025-03-26"]


class ConfigError(Exception):
    """Raised when a settings file cannot be read, parsed or validated."""


class CapabilitySettings(BaseModel):
    """Which primitive families the server exposes and advertises.

    A disabled family is neither advertised nor routed: its methods answer
    ``Method not found``.
    """

    resources: bool = True
    resources_subscribe: bool = False
    resources_list_changed: bool = True
    tools: bool = True
    tools_list_changed: bool = True
    prompts: bool = True
    prompts_list_changed: bool = True
    logging: bool = True
    experimental: dict[str, Any] = Field(default_factory=lambda: dict[str, Any]())

    def build(self) -> ServerCapabilities:
        """Translate the flags into the advertised capability object."""
        return ServerCapabilities(
            resources=ResourcesCapability(
                subscribe=self.resources_subscribe,
                list_changed=self.resources_list_changed,
            )
            if self.resources
            else None,
            tools=ToolsCapability(list_changed=self.tools_list_changed) if self.tools else None,
            prompts=PromptsCapability(list_changed=self.prompts_list_changed)
            if self.prompts
            else None,
            logging={} if self.logging else None,
            experimental=dict(self.experimental) or None,
        )


class HttpSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 3000
    cors_origins: list[str] = ["*"]


class FileResourceSettings(BaseModel):
    """A file on disk served as a resource."""

    path: str
    uri: str | None = None
    name: str | None = None
    description: str | None = None
    mime_type: str | None = None

    @property
    def resolved_uri(self) -> str:
        return self.uri or Path(self.path).resolve().as_uri()


class ServerSettings(BaseModel):
    """Top-level server configuration."""

    name: str = "mcpd"
    version: str = __version__
    protocol_versions: list[str] = Field(default_factory=lambda: list(DEFAULT_PROTOCOL_VERSIONS))
    require_initialization: bool = True
    allow_reinitialize: bool = False
    debug: bool = False
    log_level: LoggingLevel = "info"
    builtins: bool = True
    capabilities: CapabilitySettings = Field(default_factory=CapabilitySettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    file_resources: list[FileResourceSettings] = []

    @field_validator("protocol_versions")
    @classmethod
    def _require_versions(cls, value: list[str]) -> list[str]:
        if not value:
            msg = "protocol_versions must list at least one version"
            raise ValueError(msg)
        return value


class SettingsLoader:
    """Load and validate a YAML settings file into :class:`ServerSettings`."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self) -> ServerSettings:
        """Read YAML, interpolate env vars, and validate.

        Environment variables in the form ``${VAR}`` or ``$VAR`` are expanded
        using :func:`os.path.expandvars` before YAML parsing.  An empty file
        yields the defaults.

        Raises:
            ConfigError: On read errors, YAML parse errors or validation failures.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read {self._path}: {exc}") from exc

        expanded = os.path.expandvars(raw)

        try:
            data: Any = yaml.safe_load(expanded)
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Settings YAML must be a mapping")

        try:
            return ServerSettings.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc


def load_settings(path: str | Path | None = None) -> ServerSettings:
    """Load settings from *path*, or return the defaults when it is ``None``."""
    if path is None:
        return ServerSettings()
    return SettingsLoader(Path(path)).load()
