from .constants import (
    MODE_BREAK,
    MODE_POMODORO,
    MODE_STOPWATCH,
    PHASE_AWAITING_REASON,
    PHASE_IDLE,
    PHASE_RUNNING,
)
from .contracts import (
    InterruptPromptLike,
    NotifierLike,
    SchedulerLike,
    SoundSinkLike,
)
from .durations import DEFAULT_DURATIONS, DurationResolver, EffectiveDurations
from .events import TimerEvents
from .finalizer import SessionFinalizer
from .service import TimerManager, TimerSnapshot, TimerState

__all__ = [
    "DEFAULT_DURATIONS",
    "DurationResolver",
    "EffectiveDurations",
    "InterruptPromptLike",
    "MODE_BREAK",
    "MODE_POMODORO",
    "MODE_STOPWATCH",
    "NotifierLike",
    "PHASE_AWAITING_REASON",
    "PHASE_IDLE",
    "PHASE_RUNNING",
    "SchedulerLike",
    "SessionFinalizer",
    "SoundSinkLike",
    "TimerEvents",
    "TimerManager",
    "TimerSnapshot",
    "TimerState",
]
