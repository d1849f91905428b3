"""Single-consumer loop that owns the timer, its ticks and its delayed callbacks."""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass, field
from queue import Empty, Queue
from typing import Any, Callable, Optional

from timer.constants import TICK_INTERVAL_SECONDS


@dataclass(order=True)
class _Delayed:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)


@dataclass(frozen=True)
class _Command:
    fn: Callable[..., Any]
    args: tuple[Any, ...]
    kwargs: dict[str, Any]
    future: Future


_STOP = object()


class TimerRuntime:
    """Serializes every timer mutation onto one consumer thread.

    Other threads hand work to the loop with ``submit``; the loop also fires
    the tick handler once per interval and runs ``call_later`` callbacks when
    they come due. ``call_later`` is only called from the loop thread, by
    code already running on it.
    """

    def __init__(
        self,
        *,
        tick_interval_seconds: float = TICK_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ):
        self._tick_interval_seconds = tick_interval_seconds
        self._clock = clock
        self._logger = logger or logging.getLogger("runtime")
        self._commands: Queue[Any] = Queue()
        self._delayed: list[_Delayed] = []
        self._seq = itertools.count()
        self._tick_handler: Optional[Callable[[], None]] = None
        self._next_tick = 0.0
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def pending_callbacks(self) -> int:
        return len(self._delayed)

    def set_tick_handler(self, handler: Optional[Callable[[], None]]) -> None:
        self._tick_handler = handler

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        future: Future = Future()
        self._commands.put(_Command(fn=fn, args=args, kwargs=kwargs, future=future))
        return future

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        due = self._clock() + max(0.0, delay_seconds)
        heapq.heappush(self._delayed, _Delayed(due, next(self._seq), callback))

    def start(self) -> None:
        if self.is_running:
            self._logger.warning("Timer runtime is already running")
            return
        self._next_tick = self._clock() + self._tick_interval_seconds
        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name="timer-runtime",
        )
        self._thread.start()
        self._logger.info("Timer runtime started")

    def stop(self, timeout_seconds: float = 5.0) -> None:
        if self._thread is None:
            return
        self._commands.put(_STOP)
        self._thread.join(timeout=timeout_seconds)
        if self._thread.is_alive():
            self._logger.error(
                "Timer runtime thread did not stop within %.1fs",
                timeout_seconds,
            )
        self._thread = None
        self._logger.info("Timer runtime stopped")

    def drain(self) -> int:
        """Run every queued command without blocking; returns how many ran."""
        count = 0
        while True:
            try:
                item = self._commands.get_nowait()
            except Empty:
                return count
            if item is _STOP:
                self._commands.put(_STOP)
                return count
            self._execute(item)
            count += 1

    def run_due(self, now: Optional[float] = None) -> None:
        """Fire due delayed callbacks, then the tick if its interval elapsed."""
        now = self._clock() if now is None else now
        while self._delayed and self._delayed[0].due <= now:
            delayed = heapq.heappop(self._delayed)
            self._guarded(delayed.callback, "Delayed callback failed")

        if now >= self._next_tick:
            self._next_tick = now + self._tick_interval_seconds
            if self._tick_handler is not None:
                self._guarded(self._tick_handler, "Tick handler failed")

    def _run(self) -> None:
        while True:
            try:
                item = self._commands.get(timeout=self._wait_seconds())
            except Empty:
                item = None

            if item is _STOP:
                return
            if item is not None:
                self._execute(item)
            self.run_due()

    def _wait_seconds(self) -> float:
        wake_at = self._next_tick
        if self._delayed:
            wake_at = min(wake_at, self._delayed[0].due)
        return max(0.0, wake_at - self._clock())

    def _execute(self, command: _Command) -> None:
        if not command.future.set_running_or_notify_cancel():
            return
        try:
            result = command.fn(*command.args, **command.kwargs)
        except Exception as error:
            self._logger.error("Runtime command failed: %s", error, exc_info=True)
            command.future.set_exception(error)
        else:
            command.future.set_result(result)

    def _guarded(self, callback: Callable[[], None], message: str) -> None:
        try:
            callback()
        except Exception:
            self._logger.exception(message)
