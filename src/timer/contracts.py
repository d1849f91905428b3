"""Protocols for the external collaborators the timer calls out to."""

from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence


class NotifierLike(Protocol):
    """Fire-and-forget short user-facing messages."""
    def notify(self, message: str) -> None:
        ...


class SoundSinkLike(Protocol):
    """Plays the end-of-session cue at the given volume percentage."""
    def play(self, volume_percent: int, sound_file: Optional[str] = None) -> None:
        ...


class InterruptPromptLike(Protocol):
    """Asks the user why a session was stopped.

    Exactly one of the callbacks is invoked once the user answers; closing the
    prompt without a reason invokes ``on_cancel``.
    """
    def open(
        self,
        reasons: Sequence[str],
        on_select: Callable[[str], None],
        on_cancel: Callable[[], None],
    ) -> None:
        ...

    def dismiss(self) -> None:
        """Withdraw an open prompt without invoking either callback."""
        ...


class SchedulerLike(Protocol):
    """Runs a callback later on the same loop that owns the timer."""
    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        ...
