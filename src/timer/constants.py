"""Phase, default, and notice constants used by the timer state machine."""

from __future__ import annotations

from contracts.focus_protocol import (  # noqa: F401
    DURATION_SETTING_KEYS,
    EVENT_CHANGE,
    EVENT_LOG,
    EVENT_START,
    EVENT_STOP,
    EVENT_TICK,
    MINUTE_MS,
    MODE_BREAK,
    MODE_POMODORO,
    MODE_STOPWATCH,
    SETTING_AUTO_ROUNDS,
    SETTING_ENABLE_SOUNDS,
    SETTING_INTERRUPTS,
    SETTING_LONG_BREAK,
    SETTING_LONG_BREAK_INTERVAL,
    SETTING_POMODORO,
    SETTING_SHORT_BREAK,
    SETTING_SOUND_FILE,
    SETTING_SOUND_VOLUME,
    TIMER_EVENTS,
    TIMER_MODES,
    WORK_MODES,
)

PHASE_IDLE = "idle"
PHASE_RUNNING = "running"
PHASE_AWAITING_REASON = "awaiting_reason"

TICK_INTERVAL_SECONDS = 1.0
MIN_LOGGED_SESSION_MS = MINUTE_MS
DEFAULT_AUTO_START_DELAY_SECONDS = 1.0

DEFAULT_POMODORO_MINUTES = 25
DEFAULT_SHORT_BREAK_MINUTES = 5
DEFAULT_LONG_BREAK_MINUTES = 15
DEFAULT_LONG_BREAK_INTERVAL = 4
DEFAULT_AUTO_ROUNDS = 0
DEFAULT_SOUND_VOLUME = 100

DEFAULT_INTERRUPT_REASONS: tuple[str, ...] = (
    "Boss interrupted",
    "Colleague interrupted",
    "Email",
    "Going home",
    "Lunch",
    "Phone call",
    "Web browsing",
    "Task done",
)

NOTICE_NO_TARGET_CARD = "Select a card to start working"
NOTICE_TOO_SHORT = "Sessions shorter than 1 minute are not recorded."
NOTICE_BREAK_OVER = "Break over!"
NOTICE_BREAK_SKIPPED = "Break skipped"
NOTICE_TIMER_STOPPED = "Timer stopped:"
NOTICE_AUTO_STARTING = "Auto-starting pomodoro"
NOTICE_SESSION_NOT_SAVED = "Session not saved: card not found"


def rounds_completed_notice(auto_rounds: int) -> str:
    return f"Completed {auto_rounds} automatic pomodoro rounds!"


def auto_start_notice(round_number: int, auto_rounds: int) -> str:
    return f"{NOTICE_AUTO_STARTING} {round_number}/{auto_rounds}"
