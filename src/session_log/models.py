"""Committed focus session record."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FocusSession:
    """One committed session. Timestamps are epoch milliseconds."""
    card_id: Optional[str]
    card_title: Optional[str]
    mode: str
    start: int
    end: int
    duration: int
