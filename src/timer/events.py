"""Observer list used by the timer to fan out state changes."""

from __future__ import annotations

import logging
from typing import Callable, Optional

Listener = Callable[[], None]


class TimerEvents:
    """Named listener lists; each subscription returns its own unsubscribe handle."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._listeners: dict[str, list[Listener]] = {}
        self._logger = logger or logging.getLogger("timer.events")

    def on(self, event: str, listener: Listener) -> Callable[[], None]:
        self._listeners.setdefault(event, []).append(listener)
        return lambda: self.off(event, listener)

    def off(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def emit(self, event: str) -> None:
        for listener in tuple(self._listeners.get(event, ())):
            try:
                listener()
            except Exception:
                self._logger.exception("Timer %s listener failed", event)

    def clear(self) -> None:
        self._listeners.clear()
