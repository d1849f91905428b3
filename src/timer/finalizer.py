"""Commits finished sessions to the session log and to the owning card."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from board import BoardError, CardNotFoundError, CardStoreLike
from session_log import FocusSession, SessionLogStore, format_log_line, parse_log_line

from .constants import (
    EVENT_LOG,
    MIN_LOGGED_SESSION_MS,
    NOTICE_SESSION_NOT_SAVED,
    NOTICE_TOO_SHORT,
)
from .events import TimerEvents


class SessionFinalizer:
    """Turns a stopped session into a ``FocusSession`` and a card log line.

    This is the only path that mutates documents. The in-memory entry is the
    written line read back, at minute resolution, so a reparse yields the same
    history. A session whose card cannot be found, or whose line would not
    read back (it starts and ends within one clock minute), is dropped
    entirely.
    """

    def __init__(
        self,
        card_store: CardStoreLike,
        log_store: SessionLogStore,
        events: TimerEvents,
        *,
        notify: Optional[Callable[[str], None]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._card_store = card_store
        self._log_store = log_store
        self._events = events
        self._notify = notify or (lambda message: None)
        self._logger = logger or logging.getLogger("timer.finalizer")
        self._last_session: Optional[FocusSession] = None

    @property
    def last_session(self) -> Optional[FocusSession]:
        return self._last_session

    def finalize(
        self,
        card_id: Optional[str],
        mode: str,
        session_start: int,
        session_end: int,
        duration: int,
    ) -> Optional[FocusSession]:
        card = self._card_store.find_card(card_id) if card_id else None
        if card is None:
            self._drop(card_id, mode, duration)
            return None

        line = format_log_line(session_start, session_end, duration)
        recorded = parse_log_line(line)
        if recorded is None:
            if duration < MIN_LOGGED_SESSION_MS:
                self._logger.info(
                    "Session not logged, shorter than a log line minute: card=%s duration=%dms",
                    card_id,
                    duration,
                )
                self._notify(NOTICE_TOO_SHORT)
            else:
                # A single-date line cannot express a session ending past midnight.
                self._logger.warning("Session not logged, unreadable log line: %r", line)
                self._notify(NOTICE_SESSION_NOT_SAVED)
            return None

        # Load before writing so the new line is not also picked up by a rebuild.
        self._log_store.load()
        try:
            self._card_store.update_card_body(card.id, f"{card.body}\n{line}")
        except CardNotFoundError:
            self._drop(card_id, mode, duration)
            return None
        except BoardError as error:
            # The card body is already updated in the document tree; only the
            # persistence request failed.
            self._logger.error("Session log write not persisted: %s", error)

        session = FocusSession(
            card_id=card.id,
            card_title=card.title,
            mode=mode,
            start=recorded.start,
            end=recorded.end,
            duration=recorded.duration,
        )
        self._log_store.add(session)
        self._last_session = session
        self._logger.info(
            "Session logged: card=%s mode=%s duration=%dms line=%r",
            card.id,
            mode,
            session.duration,
            line,
        )
        self._events.emit(EVENT_LOG)
        return session

    def _drop(self, card_id: Optional[str], mode: str, duration: int) -> None:
        self._logger.warning(
            "Session dropped, card not found: card=%s mode=%s duration=%dms",
            card_id,
            mode,
            duration,
        )
        self._notify(NOTICE_SESSION_NOT_SAVED)
