"""Event envelopes sent to clients and the latest-state cache replayed on connect."""

from __future__ import annotations

import json
import threading
import time
from typing import Any, Callable, Optional

from contracts.ui_protocol import STICKY_EVENT_ORDER, STICKY_EVENT_TYPES


def make_event(
    event_type: str,
    *,
    now_ms: Optional[Callable[[], int]] = None,
    **payload: Any,
) -> str:
    """Serialize ``{"type", "timestamp", **payload}``.

    The timestamp is epoch milliseconds, the same unit as every timer field,
    so clients can compare it with ``session_start`` directly.
    """
    timestamp = now_ms() if now_ms is not None else int(time.time() * 1000)
    envelope = {"type": event_type, "timestamp": timestamp}
    envelope.update(payload)
    return json.dumps(envelope, ensure_ascii=False)


class StickyEventStore:
    """Latest message per sticky event type.

    A late client gets the current timer, an open reason prompt and the last
    notice. Messages published with ``retain=False`` withdraw the entry, so a
    closed prompt is never replayed.
    """

    def __init__(self):
        self._latest: dict[str, str] = {}
        self._lock = threading.Lock()

    def remember(self, event_type: str, message: str, *, retain: bool = True) -> None:
        if event_type not in STICKY_EVENT_TYPES:
            return
        with self._lock:
            if retain:
                self._latest[event_type] = message
            else:
                self._latest.pop(event_type, None)

    def snapshot(self) -> list[str]:
        with self._lock:
            latest = dict(self._latest)
        return [latest[event_type] for event_type in STICKY_EVENT_ORDER if event_type in latest]
