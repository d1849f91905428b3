"""Interruption-reason prompt answered by websocket clients."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from contracts.ui_protocol import EVENT_STOP_REASON_PROMPT

from .contracts import EventPublisherLike


@dataclass(frozen=True)
class _PendingPrompt:
    prompt_id: int
    reasons: tuple[str, ...]
    on_select: Callable[[str], None]
    on_cancel: Callable[[], None]


class WebsocketInterruptPrompt:
    """Publishes the reason list and waits for a client to answer.

    Only one prompt is pending at a time; the prompt event is published again
    with ``active=False`` once it is answered so late joiners do not see it.
    """

    def __init__(
        self,
        publisher: EventPublisherLike,
        logger: Optional[logging.Logger] = None,
    ):
        self._publisher = publisher
        self._logger = logger or logging.getLogger("runtime")
        self._ids = itertools.count(1)
        self._pending: Optional[_PendingPrompt] = None

    @property
    def is_open(self) -> bool:
        return self._pending is not None

    @property
    def reasons(self) -> tuple[str, ...]:
        return self._pending.reasons if self._pending is not None else ()

    def open(
        self,
        reasons: Sequence[str],
        on_select: Callable[[str], None],
        on_cancel: Callable[[], None],
    ) -> None:
        if self._pending is not None:
            self._logger.debug("Replacing open stop reason prompt %d", self._pending.prompt_id)
        self._pending = _PendingPrompt(
            prompt_id=next(self._ids),
            reasons=tuple(reasons),
            on_select=on_select,
            on_cancel=on_cancel,
        )
        self._publisher.publish(
            EVENT_STOP_REASON_PROMPT,
            active=True,
            prompt_id=self._pending.prompt_id,
            reasons=list(self._pending.reasons),
        )

    def select(self, reason: str) -> bool:
        pending = self._close()
        if pending is None:
            return False
        pending.on_select(reason)
        return True

    def cancel(self) -> bool:
        pending = self._close()
        if pending is None:
            return False
        pending.on_cancel()
        return True

    def dismiss(self) -> None:
        pending = self._close()
        if pending is not None:
            self._logger.debug("Stop reason prompt %d dismissed", pending.prompt_id)

    def _close(self) -> Optional[_PendingPrompt]:
        pending = self._pending
        if pending is None:
            return None
        self._pending = None
        self._publisher.publish(
            EVENT_STOP_REASON_PROMPT,
            active=False,
            prompt_id=pending.prompt_id,
            reasons=[],
        )
        return pending
