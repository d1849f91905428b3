"""Publishes timer state, committed sessions and notices as websocket events."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from board import BoardDocument, document_to_dict
from contracts.ui_protocol import (
    EVENT_BOARD_CHANGED,
    EVENT_NOTICE,
    EVENT_SESSION,
    EVENT_TIMER,
)
from session_log import FocusSession
from timer import TimerManager, TimerSnapshot
from timer.constants import (
    EVENT_CHANGE,
    EVENT_LOG,
    EVENT_START,
    EVENT_STOP,
    EVENT_TICK,
)

from .contracts import EventPublisherLike


def snapshot_payload(snapshot: TimerSnapshot) -> dict[str, Any]:
    return {
        "phase": snapshot.phase,
        "mode": snapshot.mode,
        "card_id": snapshot.card_id,
        "elapsed_ms": snapshot.elapsed_ms,
        "remaining_ms": snapshot.remaining_ms,
        "target_ms": snapshot.target_ms,
        "session_start": snapshot.session_start,
        "pomodoro_count": snapshot.pomodoro_count,
        "auto_round": snapshot.auto_round,
        "auto_rounds": snapshot.auto_rounds,
    }


def session_payload(session: FocusSession) -> dict[str, Any]:
    return {
        "card_id": session.card_id,
        "card_title": session.card_title,
        "mode": session.mode,
        "start": session.start,
        "end": session.end,
        "duration_ms": session.duration,
    }


class NoticePublisher:
    """Notification sink that logs each notice and broadcasts it."""

    def __init__(
        self,
        publisher: Optional[EventPublisherLike] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._publisher = publisher
        self._logger = logger or logging.getLogger("runtime")

    def set_publisher(self, publisher: Optional[EventPublisherLike]) -> None:
        self._publisher = publisher

    def notify(self, message: str) -> None:
        self._logger.info("Notice: %s", message)
        if self._publisher is not None:
            self._publisher.publish(EVENT_NOTICE, message=message)


class BoardChangePublisher:
    """Persist hook that hands mutated boards back to the host as events."""

    def __init__(
        self,
        publisher: EventPublisherLike,
        logger: Optional[logging.Logger] = None,
    ):
        self._publisher = publisher
        self._logger = logger or logging.getLogger("runtime")

    def persist(self, document: BoardDocument) -> None:
        self._logger.debug("Publishing board change: %s", document.path)
        self._publisher.publish(EVENT_BOARD_CHANGED, board=document_to_dict(document))


class TimerEventBridge:
    """Subscribes to the manager and turns its events into client events."""

    def __init__(
        self,
        manager: TimerManager,
        publisher: EventPublisherLike,
        logger: Optional[logging.Logger] = None,
    ):
        self._manager = manager
        self._publisher = publisher
        self._logger = logger or logging.getLogger("runtime")
        self._unsubscribers: list[Callable[[], None]] = []

    def attach(self) -> None:
        if self._unsubscribers:
            return
        for event in (EVENT_START, EVENT_STOP, EVENT_CHANGE):
            self._unsubscribers.append(
                self._manager.on(event, self._timer_listener(event))
            )
        self._unsubscribers.append(self._manager.on(EVENT_TICK, self._on_tick))
        self._unsubscribers.append(self._manager.on(EVENT_LOG, self._on_log))

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def publish_snapshot(self, event: str, **extra: Any) -> None:
        self._publisher.publish(
            EVENT_TIMER,
            event=event,
            **snapshot_payload(self._manager.snapshot()),
            **extra,
        )

    def _timer_listener(self, event: str) -> Callable[[], None]:
        return lambda: self.publish_snapshot(event)

    def _on_tick(self) -> None:
        if self._manager.is_running():
            self.publish_snapshot(EVENT_TICK)

    def _on_log(self) -> None:
        session = self._manager.last_logged_session
        if session is None:
            return
        self._logger.debug("Publishing committed session for card=%s", session.card_id)
        self._publisher.publish(EVENT_SESSION, **session_payload(session))
