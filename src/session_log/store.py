"""Session history rebuilt from the log lines embedded in board documents."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

from board import Card, DocumentRegistryLike

from .grammar import parse_log_line
from .models import FocusSession


class SessionLogStore:
    """Cache of committed sessions; a pure projection of document content.

    The cache is rebuilt from scratch on the first query and whenever the
    number of known documents changes. Sessions committed in between are
    appended incrementally by the finalizer.
    """

    def __init__(
        self,
        registry: DocumentRegistryLike,
        *,
        logger: Optional[logging.Logger] = None,
    ):
        self._registry = registry
        self._logger = logger or logging.getLogger("session_log")
        self._sessions: list[FocusSession] = []
        self._keys: set[tuple[int, Optional[str]]] = set()
        self._parsed = False
        self._parsed_document_count = 0

    @property
    def sessions(self) -> tuple[FocusSession, ...]:
        self._ensure_parsed()
        return tuple(self._sessions)

    def load(self) -> None:
        """Parse the documents now if the cache is missing or stale."""
        self._ensure_parsed()

    def add(self, session: FocusSession) -> None:
        self._sessions.append(session)
        self._keys.add((session.start, session.card_id))

    def get_logs_for_date(self, day: Optional[date] = None) -> list[FocusSession]:
        self._ensure_parsed()
        day = day or date.today()
        day_start = _local_midnight_ms(day)
        day_end = _local_midnight_ms(day + timedelta(days=1))
        return [s for s in self._sessions if day_start <= s.start < day_end]

    def get_logs_for_card(self, card_id: str) -> list[FocusSession]:
        self._ensure_parsed()
        return [s for s in self._sessions if s.card_id == card_id]

    def get_total_focused(self, card_id: Optional[str]) -> int:
        self._ensure_parsed()
        if not card_id:
            return 0
        return sum(s.duration for s in self._sessions if s.card_id == card_id)

    def force_reparse(self) -> None:
        self._parsed = False
        self._parsed_document_count = 0
        self._ensure_parsed()

    def _ensure_parsed(self) -> None:
        documents = self._registry.documents()
        if self._parsed and len(documents) == self._parsed_document_count:
            return

        self._sessions = []
        self._keys = set()
        for document in documents:
            for lane in document.lanes:
                self._collect(lane.cards)
        self._parsed = True
        self._parsed_document_count = len(documents)
        self._logger.debug(
            "Session log rebuilt: documents=%d sessions=%d",
            len(documents),
            len(self._sessions),
        )

    def _collect(self, cards: Iterable[Card]) -> None:
        for card in cards:
            for line in card.detail_lines:
                parsed = parse_log_line(line)
                if parsed is None:
                    continue
                key = (parsed.start, card.id)
                if key in self._keys:
                    self._logger.debug(
                        "Skipping duplicate log line on card %s: %s", card.id, line
                    )
                    continue
                self.add(
                    FocusSession(
                        card_id=card.id,
                        card_title=card.title,
                        mode=parsed.mode,
                        start=parsed.start,
                        end=parsed.end,
                        duration=parsed.duration,
                    )
                )
            if card.children:
                self._collect(card.children)


def _local_midnight_ms(day: date) -> int:
    return int(datetime.combine(day, time.min).timestamp() * 1000)
