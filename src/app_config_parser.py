"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

from app_config_schema import (
    AppConfig,
    AppConfigurationError,
    LoggingSettings,
    ServerSettings,
    SoundSettings,
    TimerSettings,
)

_DEFAULT_TIMER = TimerSettings()
_ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    return AppConfig(
        timer=_parse_timer_settings(_section(raw, "timer"), base_dir=base_dir),
        sound=_parse_sound_settings(_section(raw, "sound")),
        server=_parse_server_settings(_section(raw, "server")),
        logging=_parse_logging_settings(_section(raw, "logging")),
        source_file=source_file,
    )


def _parse_timer_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> TimerSettings:
    def minutes(key: str) -> float:
        value = _as_float(section.get(key, getattr(_DEFAULT_TIMER, key)), f"timer.{key}")
        if value <= 0:
            raise AppConfigurationError(f"timer.{key} must be greater than zero.")
        return value

    def count(key: str, minimum: int, maximum: int | None = None) -> int:
        value = _as_int(section.get(key, getattr(_DEFAULT_TIMER, key)), f"timer.{key}")
        if value < minimum or (maximum is not None and value > maximum):
            bounds = f">= {minimum}" if maximum is None else f"between {minimum} and {maximum}"
            raise AppConfigurationError(f"timer.{key} must be {bounds}.")
        return value

    delay = _as_float(
        section.get("auto_start_delay_seconds", _DEFAULT_TIMER.auto_start_delay_seconds),
        "timer.auto_start_delay_seconds",
    )
    if delay < 0:
        raise AppConfigurationError("timer.auto_start_delay_seconds must not be negative.")

    return TimerSettings(
        pomodoro_minutes=minutes("pomodoro_minutes"),
        short_break_minutes=minutes("short_break_minutes"),
        long_break_minutes=minutes("long_break_minutes"),
        long_break_interval=count("long_break_interval", 1),
        auto_rounds=count("auto_rounds", 0),
        interrupts=_as_str_tuple(
            section.get("interrupts", list(_DEFAULT_TIMER.interrupts)),
            "timer.interrupts",
        ),
        enable_sounds=_as_bool(
            section.get("enable_sounds", _DEFAULT_TIMER.enable_sounds),
            "timer.enable_sounds",
        ),
        sound_volume=count("sound_volume", 0, 100),
        sound_file=_resolve_path(
            base_dir, _as_str(section.get("sound_file", ""), "timer.sound_file")
        ),
        auto_start_delay_seconds=delay,
    )


def _parse_sound_settings(section: Mapping[str, Any]) -> SoundSettings:
    return SoundSettings(
        output_device=(
            _as_int(section.get("output_device"), "sound.output_device")
            if section.get("output_device") is not None
            else None
        ),
    )


def _parse_server_settings(section: Mapping[str, Any]) -> ServerSettings:
    return ServerSettings(
        enabled=_as_bool(section.get("enabled", True), "server.enabled"),
        host=_as_str(section.get("host", "127.0.0.1"), "server.host"),
        port=_as_int(section.get("port", 8765), "server.port"),
        ws_path=_as_str(section.get("ws_path", "/ws"), "server.ws_path") or "/ws",
    )


def _parse_logging_settings(section: Mapping[str, Any]) -> LoggingSettings:
    level = _as_str(section.get("level", "INFO"), "logging.level").upper() or "INFO"
    if level not in _ALLOWED_LOG_LEVELS:
        allowed = ", ".join(sorted(_ALLOWED_LOG_LEVELS))
        raise AppConfigurationError(f"logging.level must be one of: {allowed}")
    return LoggingSettings(level=level)


def log_level(settings: LoggingSettings) -> int:
    return logging.getLevelName(settings.level)


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_str_tuple(value: Any, field: str) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        raise AppConfigurationError(f"{field} must be a list of strings.")
    items: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise AppConfigurationError(f"{field} must be a list of strings.")
        text = item.strip()
        if text and text not in items:
            items.append(text)
    return tuple(items)


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip(), 10)
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be a number.")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a number.") from error
    raise AppConfigurationError(f"{field} must be a number.")


def _resolve_path(base_dir: Path, raw: str) -> str:
    if not raw:
        return ""
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)
