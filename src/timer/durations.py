"""Effective timer durations merged from board overrides, global settings, and defaults."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from board import BoardSettingsLike

from .constants import (
    DEFAULT_AUTO_ROUNDS,
    DEFAULT_LONG_BREAK_INTERVAL,
    DEFAULT_LONG_BREAK_MINUTES,
    DEFAULT_POMODORO_MINUTES,
    DEFAULT_SHORT_BREAK_MINUTES,
    MINUTE_MS,
    SETTING_AUTO_ROUNDS,
    SETTING_LONG_BREAK,
    SETTING_LONG_BREAK_INTERVAL,
    SETTING_POMODORO,
    SETTING_SHORT_BREAK,
)


@dataclass(frozen=True)
class EffectiveDurations:
    """Durations applied to the session that is starting."""
    pomodoro_ms: int
    short_break_ms: int
    long_break_ms: int
    long_break_interval: int
    auto_rounds: int

    def is_long_break_after(self, pomodoro_count: int) -> bool:
        return pomodoro_count > 0 and pomodoro_count % self.long_break_interval == 0

    def break_ms_after(self, pomodoro_count: int) -> int:
        """Break length earned by the ``pomodoro_count``-th completed pomodoro."""
        if self.is_long_break_after(pomodoro_count):
            return self.long_break_ms
        return self.short_break_ms


DEFAULT_DURATIONS = EffectiveDurations(
    pomodoro_ms=DEFAULT_POMODORO_MINUTES * MINUTE_MS,
    short_break_ms=DEFAULT_SHORT_BREAK_MINUTES * MINUTE_MS,
    long_break_ms=DEFAULT_LONG_BREAK_MINUTES * MINUTE_MS,
    long_break_interval=DEFAULT_LONG_BREAK_INTERVAL,
    auto_rounds=DEFAULT_AUTO_ROUNDS,
)


class DurationResolver:
    """Resolves each timer setting board-first, then global, then hardcoded.

    Malformed values at any layer are treated as absent and fall through to the
    next layer; resolution never raises.
    """

    def __init__(
        self,
        board_settings: Optional[BoardSettingsLike] = None,
        global_settings: Optional[Mapping[str, Any]] = None,
    ):
        self._board_settings = board_settings
        self._global_settings: dict[str, Any] = dict(global_settings or {})

    @property
    def global_settings(self) -> Mapping[str, Any]:
        return self._global_settings

    def update_global(self, settings: Mapping[str, Any]) -> None:
        self._global_settings = dict(settings)

    def set_global(self, key: str, value: Any) -> None:
        self._global_settings[key] = value

    def resolve(self, card_id: Optional[str]) -> EffectiveDurations:
        return EffectiveDurations(
            pomodoro_ms=self._resolve(
                card_id, SETTING_POMODORO, _minutes_to_ms, DEFAULT_DURATIONS.pomodoro_ms
            ),
            short_break_ms=self._resolve(
                card_id,
                SETTING_SHORT_BREAK,
                _minutes_to_ms,
                DEFAULT_DURATIONS.short_break_ms,
            ),
            long_break_ms=self._resolve(
                card_id,
                SETTING_LONG_BREAK,
                _minutes_to_ms,
                DEFAULT_DURATIONS.long_break_ms,
            ),
            long_break_interval=self._resolve(
                card_id,
                SETTING_LONG_BREAK_INTERVAL,
                _positive_count,
                DEFAULT_DURATIONS.long_break_interval,
            ),
            auto_rounds=self._resolve(
                card_id,
                SETTING_AUTO_ROUNDS,
                _non_negative_count,
                DEFAULT_DURATIONS.auto_rounds,
            ),
        )

    def board_value(self, card_id: Optional[str], key: str) -> Any:
        if not card_id or self._board_settings is None:
            return None
        return self._board_settings.board_setting(card_id, key)

    def layered_value(self, card_id: Optional[str], key: str) -> Any:
        """Raw board override when set, else the raw global value."""
        value = self.board_value(card_id, key)
        if value is not None:
            return value
        return self._global_settings.get(key)

    def _resolve(
        self,
        card_id: Optional[str],
        key: str,
        convert: Callable[[Any], Optional[int]],
        default: int,
    ) -> int:
        local = convert(self.board_value(card_id, key))
        if local is not None:
            return local
        global_value = convert(self._global_settings.get(key))
        if global_value is not None:
            return global_value
        return default


def _as_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def _minutes_to_ms(value: Any) -> Optional[int]:
    minutes = _as_number(value)
    if minutes is None or minutes <= 0:
        return None
    return int(round(minutes * MINUTE_MS))


def _positive_count(value: Any) -> Optional[int]:
    number = _as_number(value)
    if number is None or number < 1:
        return None
    return int(number)


def _non_negative_count(value: Any) -> Optional[int]:
    number = _as_number(value)
    if number is None or number < 0:
        return None
    return int(number)
