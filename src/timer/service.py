"""Single global focus timer with automatic break and round progression."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Mapping, Optional

from board import BoardRegistryLike
from session_log import FocusSession, SessionLogStore

from .constants import (
    DEFAULT_AUTO_START_DELAY_SECONDS,
    DEFAULT_INTERRUPT_REASONS,
    DEFAULT_SOUND_VOLUME,
    DURATION_SETTING_KEYS,
    EVENT_CHANGE,
    EVENT_START,
    EVENT_STOP,
    EVENT_TICK,
    MIN_LOGGED_SESSION_MS,
    MODE_BREAK,
    MODE_POMODORO,
    MODE_STOPWATCH,
    NOTICE_BREAK_OVER,
    NOTICE_BREAK_SKIPPED,
    NOTICE_NO_TARGET_CARD,
    NOTICE_TIMER_STOPPED,
    NOTICE_TOO_SHORT,
    PHASE_AWAITING_REASON,
    PHASE_IDLE,
    PHASE_RUNNING,
    SETTING_ENABLE_SOUNDS,
    SETTING_INTERRUPTS,
    SETTING_SOUND_FILE,
    SETTING_SOUND_VOLUME,
    TIMER_MODES,
    WORK_MODES,
    auto_start_notice,
    rounds_completed_notice,
)
from .contracts import (
    InterruptPromptLike,
    NotifierLike,
    SchedulerLike,
    SoundSinkLike,
)
from .durations import DurationResolver, EffectiveDurations
from .events import Listener, TimerEvents
from .finalizer import SessionFinalizer


@dataclass
class TimerState:
    """The one mutable clock. ``start`` and ``elapsed`` are epoch/ms values."""
    phase: str = PHASE_IDLE
    mode: str = MODE_STOPWATCH
    start: int = 0
    elapsed: int = 0
    target_card_id: Optional[str] = None

    @property
    def running(self) -> bool:
        return self.phase == PHASE_RUNNING


@dataclass(frozen=True)
class TimerSnapshot:
    """Immutable view of the timer exposed to UI publishers."""
    phase: str
    mode: str
    card_id: Optional[str]
    elapsed_ms: int
    remaining_ms: int
    target_ms: int
    session_start: int
    pomodoro_count: int
    auto_round: int
    auto_rounds: int

    @property
    def running(self) -> bool:
        return self.phase == PHASE_RUNNING


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


class TimerManager:
    """Tracks one timing session at a time across every board and card.

    All methods are expected to run on one loop (see ``runtime.loop``); the
    manager holds no locks. ``tick`` must be called once per second.
    """

    def __init__(
        self,
        registry: BoardRegistryLike,
        *,
        global_settings: Optional[Mapping[str, Any]] = None,
        log_store: Optional[SessionLogStore] = None,
        notifier: Optional[NotifierLike] = None,
        sound: Optional[SoundSinkLike] = None,
        prompt: Optional[InterruptPromptLike] = None,
        scheduler: Optional[SchedulerLike] = None,
        now_fn: Optional[Callable[[], int]] = None,
        auto_start_delay_seconds: float = DEFAULT_AUTO_START_DELAY_SECONDS,
        logger: Optional[logging.Logger] = None,
    ):
        self._registry = registry
        self._logger = logger or logging.getLogger("timer")
        self._now = now_fn or _wall_clock_ms
        self._notifier = notifier
        self._sound = sound
        self._prompt = prompt
        self._scheduler = scheduler
        self._auto_start_delay_seconds = auto_start_delay_seconds

        self._events = TimerEvents(logger=self._logger)
        self._resolver = DurationResolver(registry, global_settings)
        self._log_store = log_store or SessionLogStore(registry)
        self._finalizer = SessionFinalizer(
            registry,
            self._log_store,
            self._events,
            notify=self._notify,
            logger=self._logger,
        )

        self._state = TimerState()
        self._durations: EffectiveDurations = self._resolver.resolve(None)
        self._break_ms = self._durations.short_break_ms
        self._pomodoro_count = 0
        self._current_auto_round = 0
        self._last_work_mode = MODE_POMODORO
        self._last_work_card_id: Optional[str] = None
        self._session_start = 0
        self._paused_at: Optional[int] = None
        self._paused_total = 0

        self._unsubscribe_settings: Optional[Callable[[], None]] = (
            registry.subscribe_settings(self._on_board_settings_changed)
        )

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def log_store(self) -> SessionLogStore:
        return self._log_store

    @property
    def durations(self) -> EffectiveDurations:
        return self._durations

    @property
    def break_duration_ms(self) -> int:
        return self._break_ms

    @property
    def pomodoro_count(self) -> int:
        return self._pomodoro_count

    @property
    def current_auto_round(self) -> int:
        return self._current_auto_round

    @property
    def last_work_mode(self) -> str:
        return self._last_work_mode

    @property
    def last_work_card_id(self) -> Optional[str]:
        return self._last_work_card_id

    @property
    def current_session_start(self) -> int:
        return self._session_start

    @property
    def last_logged_session(self) -> Optional[FocusSession]:
        return self._finalizer.last_session

    def on(self, event: str, listener: Listener) -> Callable[[], None]:
        return self._events.on(event, listener)

    def off(self, event: str, listener: Listener) -> None:
        self._events.off(event, listener)

    def close(self) -> None:
        if self._unsubscribe_settings is not None:
            self._unsubscribe_settings()
            self._unsubscribe_settings = None
        self._events.clear()

    # -- commands -----------------------------------------------------------

    def start(self, mode: str, card_id: Optional[str] = None) -> bool:
        """Start ``mode`` on ``card_id``; a manual pomodoro restarts auto rounds."""
        return self._start(mode, card_id, restart_rounds=mode == MODE_POMODORO)

    def toggle(self, mode: str, card_id: Optional[str] = None) -> bool:
        if self._state.phase == PHASE_AWAITING_REASON:
            return False
        if not self._state.running:
            return self.start(mode, card_id)
        if not card_id or card_id == self._state.target_card_id:
            return self.stop()
        self._switch_card(card_id)
        return True

    def stop(self, ask_reason: bool = True) -> bool:
        """Stop the session; ``ask_reason=False`` also commits one awaiting a reason."""
        if self._state.phase == PHASE_AWAITING_REASON and not ask_reason:
            return self._commit_awaiting_reason()
        if not self._state.running:
            return False

        now = self._now()
        mode = self._state.mode
        card_id = self._state.target_card_id
        if self._active_session_ms(now) < MIN_LOGGED_SESSION_MS:
            self._pause_clock(now)
            self.reset(mode, card_id, reset_auto_round=self._durations.auto_rounds == 0)
            self._logger.debug("Session discarded as too short: card=%s", card_id)
            self._notify(NOTICE_TOO_SHORT)
            return True

        self._pause_clock(now)
        if not ask_reason or self._prompt is None:
            if ask_reason:
                self._events.emit(EVENT_STOP)
            self._finalize(now)
            return True

        self._state.phase = PHASE_AWAITING_REASON
        self._paused_at = now
        self._events.emit(EVENT_CHANGE)
        try:
            self._prompt.open(
                self.interrupt_reasons(card_id),
                self.select_stop_reason,
                self.cancel_stop_reason,
            )
        except Exception:
            self._logger.exception("Stop reason prompt failed; finalizing session")
            self._finalize(now)
        return True

    def select_stop_reason(self, reason: str) -> bool:
        if self._state.phase != PHASE_AWAITING_REASON or self._paused_at is None:
            return False
        self._events.emit(EVENT_STOP)
        self._notify(f"{NOTICE_TIMER_STOPPED} {reason}")
        self._logger.info(
            "Timer stopped: card=%s reason=%s", self._state.target_card_id, reason
        )
        self._finalize(self._paused_at)
        return True

    def cancel_stop_reason(self) -> bool:
        """Cancelling the prompt resumes the paused session where it left off."""
        if self._state.phase != PHASE_AWAITING_REASON or self._paused_at is None:
            return False
        now = self._now()
        self._paused_total += max(0, now - self._paused_at)
        self._paused_at = None
        self._state.phase = PHASE_RUNNING
        self._state.start = now
        self._logger.info("Timer resumed: card=%s", self._state.target_card_id)
        self._events.emit(EVENT_START)
        self._events.emit(EVENT_CHANGE)
        return True

    def skip_break(self) -> bool:
        if not (self._state.running and self._state.mode == MODE_BREAK):
            return False

        self._pause_clock(self._now())
        target_mode = self._last_work_mode
        target_card_id = self._last_work_card_id
        self.reset(
            target_mode,
            target_card_id,
            reset_auto_round=self._durations.auto_rounds == 0,
        )
        self._notify(NOTICE_BREAK_SKIPPED)
        self._logger.info("Break skipped: resuming %s on card=%s", target_mode, target_card_id)
        resumed = bool(target_card_id) and self._start(target_mode, target_card_id)
        self._continue_rounds(resumed=resumed)
        return True

    def reset(
        self,
        mode: str,
        card_id: Optional[str] = None,
        reset_auto_round: bool = True,
    ) -> None:
        self._state = TimerState(phase=PHASE_IDLE, mode=mode, target_card_id=card_id)
        self._paused_at = None
        self._paused_total = 0
        if reset_auto_round:
            self._current_auto_round = 0
        self._events.emit(EVENT_CHANGE)

    def tick(self) -> None:
        self._events.emit(EVENT_TICK)
        if not self._state.running:
            return

        spent = self.get_elapsed()
        if self._state.mode == MODE_POMODORO and spent >= self._durations.pomodoro_ms:
            self._complete_pomodoro()
        elif self._state.mode == MODE_BREAK and spent >= self._break_ms:
            self._complete_break()

    # -- settings -----------------------------------------------------------

    def update_settings(self, global_settings: Mapping[str, Any]) -> None:
        self._resolver.update_global(global_settings)
        self._apply_durations(self._state.target_card_id)

    def interrupt_reasons(self, card_id: Optional[str] = None) -> list[str]:
        raw = self._resolver.layered_value(card_id, SETTING_INTERRUPTS)
        if isinstance(raw, (list, tuple)):
            reasons = [item.strip() for item in raw if isinstance(item, str) and item.strip()]
            if reasons:
                return reasons
        return list(DEFAULT_INTERRUPT_REASONS)

    def add_interrupt_reason(self, reason: str, card_id: Optional[str] = None) -> bool:
        text = reason.strip() if isinstance(reason, str) else ""
        card_id = card_id or self._state.target_card_id
        reasons = self.interrupt_reasons(card_id)
        if not text or text in reasons:
            return False
        reasons.append(text)
        if card_id and self._registry.set_board_setting(card_id, SETTING_INTERRUPTS, reasons):
            return True
        self._resolver.set_global(SETTING_INTERRUPTS, reasons)
        return True

    # -- queries ------------------------------------------------------------

    def is_running(self, mode: Optional[str] = None, card_id: Optional[str] = None) -> bool:
        if not self._state.running:
            return False
        if mode and self._state.mode != mode:
            return False
        if card_id and self._state.target_card_id != card_id:
            return False
        return True

    def get_elapsed(self) -> int:
        if not self._state.running:
            return self._state.elapsed
        return self._state.elapsed + (self._now() - self._state.start)

    def get_remaining(self) -> int:
        target = self.target_duration_ms
        if not target:
            return 0
        return max(0, target - self.get_elapsed())

    @property
    def target_duration_ms(self) -> int:
        if self._state.mode == MODE_POMODORO:
            return self._durations.pomodoro_ms
        if self._state.mode == MODE_BREAK:
            return self._break_ms
        return 0

    def get_total_focused(self, card_id: Optional[str]) -> int:
        return self._log_store.get_total_focused(card_id)

    def get_logs_for_date(self, day: Optional[date] = None) -> list[FocusSession]:
        return self._log_store.get_logs_for_date(day)

    def force_reparse_logs(self) -> None:
        self._log_store.force_reparse()

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            phase=self._state.phase,
            mode=self._state.mode,
            card_id=self._state.target_card_id,
            elapsed_ms=self.get_elapsed(),
            remaining_ms=self.get_remaining(),
            target_ms=self.target_duration_ms,
            session_start=self._session_start,
            pomodoro_count=self._pomodoro_count,
            auto_round=self._current_auto_round,
            auto_rounds=self._durations.auto_rounds,
        )

    # -- internals ----------------------------------------------------------

    def _start(
        self,
        mode: str,
        card_id: Optional[str],
        *,
        restart_rounds: bool = False,
    ) -> bool:
        if mode not in TIMER_MODES:
            self._logger.warning("Unsupported timer mode: %s", mode)
            return False
        if not card_id:
            self._notify(NOTICE_NO_TARGET_CARD)
            return False
        if self._state.phase != PHASE_IDLE:
            return False

        self._apply_durations(card_id)
        if mode in WORK_MODES:
            self._last_work_mode = mode
            self._last_work_card_id = card_id
        if restart_rounds:
            self._current_auto_round = 0

        now = self._now()
        self._state = TimerState(
            phase=PHASE_RUNNING,
            mode=mode,
            start=now,
            elapsed=0,
            target_card_id=card_id,
        )
        self._session_start = now
        self._paused_at = None
        self._paused_total = 0
        self._logger.info("Timer started: mode=%s card=%s", mode, card_id)
        self._events.emit(EVENT_START)
        self._events.emit(EVENT_CHANGE)
        return True

    def _switch_card(self, card_id: str) -> None:
        """Log the time spent on the current card and keep the clock running."""
        now = self._now()
        previous_card_id = self._state.target_card_id
        self._finalizer.finalize(
            previous_card_id,
            self._state.mode,
            self._session_start,
            now,
            self._active_session_ms(now),
        )
        self._state.target_card_id = card_id
        if self._state.mode in WORK_MODES:
            self._last_work_card_id = card_id
        self._session_start = now
        self._paused_total = 0
        self._logger.info(
            "Timer switched: mode=%s card=%s -> %s",
            self._state.mode,
            previous_card_id,
            card_id,
        )
        self._events.emit(EVENT_CHANGE)

    def _commit_awaiting_reason(self) -> bool:
        if self._paused_at is None:
            return False
        if self._prompt is not None:
            try:
                self._prompt.dismiss()
            except Exception:
                self._logger.exception("Failed to dismiss stop reason prompt")
        self._logger.info(
            "Committing session awaiting a stop reason: card=%s",
            self._state.target_card_id,
        )
        self._events.emit(EVENT_STOP)
        self._finalize(self._paused_at)
        return True

    def _finalize(self, end: int) -> None:
        mode = self._state.mode
        card_id = self._state.target_card_id
        self._finalizer.finalize(
            card_id,
            mode,
            self._session_start,
            end,
            max(0, end - self._session_start - self._paused_total),
        )
        self.reset(mode, card_id, reset_auto_round=self._durations.auto_rounds == 0)

    def _complete_pomodoro(self) -> None:
        card_id = self._state.target_card_id
        self.stop(ask_reason=False)
        self._play_end_sound(card_id)
        self._pomodoro_count += 1
        self._current_auto_round += 1
        self._break_ms = self._durations.break_ms_after(self._pomodoro_count)
        self._logger.info(
            "Pomodoro completed: count=%d round=%d long_break=%s",
            self._pomodoro_count,
            self._current_auto_round,
            self._durations.is_long_break_after(self._pomodoro_count),
        )
        self._start(MODE_BREAK, card_id)

    def _complete_break(self) -> None:
        card_id = self._state.target_card_id
        self.stop(ask_reason=False)
        self._notify(NOTICE_BREAK_OVER)
        self._play_end_sound(card_id)
        self._continue_rounds()

    def _continue_rounds(self, resumed: bool = False) -> None:
        """Advance auto rounds after a break; ``resumed`` means work already restarted."""
        auto_rounds = self._durations.auto_rounds
        if auto_rounds <= 0:
            return
        if self._current_auto_round < auto_rounds:
            if resumed:
                self._notify(auto_start_notice(self._current_auto_round + 1, auto_rounds))
            else:
                self._schedule(self._auto_start_next_round)
            return
        self._current_auto_round = 0
        self._logger.info("Automatic rounds completed: rounds=%d", auto_rounds)
        self._notify(rounds_completed_notice(auto_rounds))

    def _auto_start_next_round(self) -> None:
        if self._start(MODE_POMODORO, self._last_work_card_id):
            self._notify(
                auto_start_notice(self._current_auto_round + 1, self._durations.auto_rounds)
            )

    def _schedule(self, callback: Callable[[], None]) -> None:
        if self._scheduler is None:
            callback()
            return
        self._scheduler.call_later(self._auto_start_delay_seconds, callback)

    def _pause_clock(self, now: int) -> None:
        if self._state.running:
            self._state.elapsed += now - self._state.start
            self._state.start = 0

    def _active_session_ms(self, now: int) -> int:
        return now - self._session_start - self._paused_total

    def _apply_durations(self, card_id: Optional[str]) -> None:
        self._durations = self._resolver.resolve(card_id)

    def _on_board_settings_changed(self, path: str, key: str) -> None:
        if key not in DURATION_SETTING_KEYS:
            return
        if self._state.running and self._state.target_card_id:
            self._logger.info("Board timer setting changed: board=%s key=%s", path, key)
            self._apply_durations(self._state.target_card_id)
            self._events.emit(EVENT_CHANGE)

    def _play_end_sound(self, card_id: Optional[str]) -> None:
        if self._sound is None:
            return
        if not _as_flag(self._resolver.layered_value(card_id, SETTING_ENABLE_SOUNDS)):
            return

        volume = _as_volume(self._resolver.layered_value(card_id, SETTING_SOUND_VOLUME))
        sound_file = _as_path(self._resolver.board_value(card_id, SETTING_SOUND_FILE))
        if not sound_file:
            sound_file = _as_path(self._resolver.global_settings.get(SETTING_SOUND_FILE))
        try:
            self._sound.play(volume, sound_file or None)
        except Exception:
            self._logger.exception("End-of-session sound failed")

    def _notify(self, message: str) -> None:
        self._logger.debug("Notice: %s", message)
        if self._notifier is None:
            return
        try:
            self._notifier.notify(message)
        except Exception:
            self._logger.exception("Notification sink failed")


def _as_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return False


def _as_volume(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_SOUND_VOLUME
    if not math.isfinite(value):
        return DEFAULT_SOUND_VOLUME
    return int(max(0, min(100, value)))


def _as_path(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""
