"""Protocols describing what the runtime needs from its surroundings."""

from __future__ import annotations

from concurrent.futures import Future
from typing import Any, Callable, Protocol


class EventPublisherLike(Protocol):
    """Broadcasts one typed event to every connected client."""
    def publish(self, event_type: str, **payload: Any) -> None:
        ...


class CommandSubmitterLike(Protocol):
    """Runs a callable on the loop that owns the timer."""
    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        ...
