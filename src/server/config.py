"""Configuration model for the websocket event server."""

from __future__ import annotations

from dataclasses import dataclass


class ServerConfigurationError(Exception):
    """Raised when event server configuration is invalid."""


HEALTHZ_PATH = "/healthz"


@dataclass(frozen=True)
class EventServerConfig:
    """Validated event server configuration derived from app settings."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    ws_path: str = "/ws"

    def __post_init__(self) -> None:
        if not self.host.strip():
            raise ServerConfigurationError("server.host cannot be empty")

        if not 1 <= self.port <= 65535:
            raise ServerConfigurationError(
                f"server.port must be in [1, 65535], got: {self.port}"
            )

        if not self.ws_path.startswith("/"):
            raise ServerConfigurationError(
                f"server.ws_path must start with '/', got: {self.ws_path}"
            )

        if self.ws_path == HEALTHZ_PATH:
            raise ServerConfigurationError(
                f"server.ws_path cannot be {HEALTHZ_PATH}"
            )

    @property
    def websocket_path(self) -> str:
        return self.ws_path

    @classmethod
    def from_settings(cls, settings) -> "EventServerConfig":
        return cls(
            enabled=bool(settings.enabled),
            host=settings.host.strip(),
            port=settings.port,
            ws_path=settings.ws_path.strip() or "/ws",
        )
