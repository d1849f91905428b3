"""Timer modes, event names, and board setting keys shared across packages."""

from __future__ import annotations

MODE_STOPWATCH = "stopwatch"
MODE_POMODORO = "pomodoro"
MODE_BREAK = "break"

WORK_MODES: frozenset[str] = frozenset({MODE_STOPWATCH, MODE_POMODORO})
TIMER_MODES: frozenset[str] = frozenset({MODE_STOPWATCH, MODE_POMODORO, MODE_BREAK})

# Events emitted by the timer core
EVENT_TICK = "tick"
EVENT_START = "start"
EVENT_STOP = "stop"
EVENT_CHANGE = "change"
EVENT_LOG = "log"

TIMER_EVENTS: frozenset[str] = frozenset(
    {EVENT_TICK, EVENT_START, EVENT_STOP, EVENT_CHANGE, EVENT_LOG}
)

# Board-scoped and global setting keys
SETTING_POMODORO = "timer-pomodoro"
SETTING_SHORT_BREAK = "timer-short-break"
SETTING_LONG_BREAK = "timer-long-break"
SETTING_LONG_BREAK_INTERVAL = "timer-long-break-interval"
SETTING_AUTO_ROUNDS = "timer-auto-rounds"
SETTING_INTERRUPTS = "timer-interrupts"
SETTING_ENABLE_SOUNDS = "timer-enable-sounds"
SETTING_SOUND_VOLUME = "timer-sound-volume"
SETTING_SOUND_FILE = "timer-sound-file"

DURATION_SETTING_KEYS: tuple[str, ...] = (
    SETTING_POMODORO,
    SETTING_SHORT_BREAK,
    SETTING_LONG_BREAK,
    SETTING_LONG_BREAK_INTERVAL,
    SETTING_AUTO_ROUNDS,
)

MINUTE_MS = 60 * 1000
