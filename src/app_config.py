"""Config file discovery and loading for the focus timer runtime."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Mapping

from app_config_parser import log_level, parse_app_config
from app_config_schema import (
    DEFAULT_CONFIG_FILE,
    AppConfig,
    AppConfigurationError,
    LoggingSettings,
    ServerSettings,
    SoundSettings,
    TimerSettings,
)

__all__ = [
    "AppConfig",
    "AppConfigurationError",
    "DEFAULT_CONFIG_FILE",
    "LoggingSettings",
    "ServerSettings",
    "SoundSettings",
    "TimerSettings",
    "load_app_config",
    "log_level",
    "resolve_config_path",
]


def resolve_config_path(config_path: str | None = None) -> Path:
    env_path = os.getenv("APP_CONFIG_FILE")
    raw = config_path or env_path or DEFAULT_CONFIG_FILE
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (Path.cwd() / path).resolve()
    return path


def load_app_config(config_path: str | None = None) -> AppConfig:
    path = resolve_config_path(config_path)
    if not path.exists():
        raise AppConfigurationError(f"Config file not found: {path}")
    if not path.is_file():
        raise AppConfigurationError(f"Config path is not a file: {path}")

    try:
        with open(path, "rb") as fh:
            raw = tomllib.load(fh)
    except tomllib.TOMLDecodeError as error:
        raise AppConfigurationError(f"Failed to parse config TOML: {error}") from error
    except OSError as error:
        raise AppConfigurationError(f"Failed to read config file: {error}") from error

    if not isinstance(raw, Mapping):
        raise AppConfigurationError("Root config TOML object must be a table.")

    return parse_app_config(raw, base_dir=path.parent, source_file=str(path))
