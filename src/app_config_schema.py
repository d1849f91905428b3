"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from contracts.focus_protocol import (
    SETTING_AUTO_ROUNDS,
    SETTING_ENABLE_SOUNDS,
    SETTING_INTERRUPTS,
    SETTING_LONG_BREAK,
    SETTING_LONG_BREAK_INTERVAL,
    SETTING_POMODORO,
    SETTING_SHORT_BREAK,
    SETTING_SOUND_FILE,
    SETTING_SOUND_VOLUME,
)
from timer.constants import (
    DEFAULT_AUTO_ROUNDS,
    DEFAULT_AUTO_START_DELAY_SECONDS,
    DEFAULT_INTERRUPT_REASONS,
    DEFAULT_LONG_BREAK_INTERVAL,
    DEFAULT_LONG_BREAK_MINUTES,
    DEFAULT_POMODORO_MINUTES,
    DEFAULT_SHORT_BREAK_MINUTES,
    DEFAULT_SOUND_VOLUME,
)

DEFAULT_CONFIG_FILE = "config.toml"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class TimerSettings:
    """Global timer defaults from `[timer]`; boards may override each of them."""
    pomodoro_minutes: float = DEFAULT_POMODORO_MINUTES
    short_break_minutes: float = DEFAULT_SHORT_BREAK_MINUTES
    long_break_minutes: float = DEFAULT_LONG_BREAK_MINUTES
    long_break_interval: int = DEFAULT_LONG_BREAK_INTERVAL
    auto_rounds: int = DEFAULT_AUTO_ROUNDS
    interrupts: tuple[str, ...] = DEFAULT_INTERRUPT_REASONS
    enable_sounds: bool = False
    sound_volume: int = DEFAULT_SOUND_VOLUME
    sound_file: str = ""
    auto_start_delay_seconds: float = DEFAULT_AUTO_START_DELAY_SECONDS

    def as_setting_map(self) -> dict[str, Any]:
        """Global settings layer keyed like board overrides."""
        return {
            SETTING_POMODORO: self.pomodoro_minutes,
            SETTING_SHORT_BREAK: self.short_break_minutes,
            SETTING_LONG_BREAK: self.long_break_minutes,
            SETTING_LONG_BREAK_INTERVAL: self.long_break_interval,
            SETTING_AUTO_ROUNDS: self.auto_rounds,
            SETTING_INTERRUPTS: list(self.interrupts),
            SETTING_ENABLE_SOUNDS: self.enable_sounds,
            SETTING_SOUND_VOLUME: self.sound_volume,
            SETTING_SOUND_FILE: self.sound_file,
        }


@dataclass(frozen=True)
class SoundSettings:
    """Audio output settings from `[sound]`."""
    output_device: Optional[int] = None


@dataclass(frozen=True)
class ServerSettings:
    """Websocket event server settings from `[server]`."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    ws_path: str = "/ws"


@dataclass(frozen=True)
class LoggingSettings:
    """Root logging settings from `[logging]`."""
    level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    timer: TimerSettings
    sound: SoundSettings
    server: ServerSettings
    logging: LoggingSettings
    source_file: str
