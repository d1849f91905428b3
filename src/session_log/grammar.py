"""Formatting and parsing of the focus-session log lines embedded in cards.

A log line looks like ``++ 2025-07-10 10:00 – 10:25 (25 m)``. Lines may carry a
list bullet, and the marker may also be a tomato or a stopwatch emoji; a tomato
marks the session as a pomodoro, every other marker reads back as stopwatch.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from contracts.focus_protocol import MINUTE_MS, MODE_POMODORO, MODE_STOPWATCH

LOG_MARKER = "++"
POMODORO_MARKER = "\U0001F345"
STOPWATCH_MARKER = "\u23f1"
EN_DASH = "\u2013"

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"

# Minutes are rounded when written and start/end lose their seconds, so the
# recorded duration may exceed the written window by up to this much.
ROUNDING_TOLERANCE_MS = 2 * MINUTE_MS

LOG_LINE_RE = re.compile(
    r"^(?:[-*]\s+)?"
    r"(?P<marker>\+\+|\U0001F345|\u23f1\ufe0f?)\s+"
    r"(?P<date>\d{4}-\d{2}-\d{2})\s+"
    r"(?P<start>\d{2}:\d{2})\s*[\u2013\u2014-]\s*"
    r"(?P<end>\d{2}:\d{2})\s+"
    r"\((?P<minutes>\d+)\s+m"
)


@dataclass(frozen=True)
class LogLine:
    """Timestamps recovered from one log line, in epoch milliseconds."""
    mode: str
    start: int
    end: int
    duration: int


def format_log_line(start_ms: int, end_ms: int, duration_ms: int) -> str:
    start = _local_datetime(start_ms)
    end = _local_datetime(end_ms)
    minutes = int(duration_ms / MINUTE_MS + 0.5)
    return (
        f"{LOG_MARKER} {start.strftime(DATE_FORMAT)} {start.strftime(TIME_FORMAT)} "
        f"{EN_DASH} {end.strftime(TIME_FORMAT)} ({minutes} m)"
    )


def parse_log_line(line: str) -> Optional[LogLine]:
    """Parse one card line; returns None for anything that is not a valid log."""
    stripped = line.strip()
    match = LOG_LINE_RE.match(stripped)
    if match is None:
        return None

    start = _parse_local(match.group("date"), match.group("start"))
    end = _parse_local(match.group("date"), match.group("end"))
    if start is None or end is None:
        return None

    duration = int(match.group("minutes")) * MINUTE_MS
    if duration <= 0 or end <= start:
        return None
    if duration > end - start + ROUNDING_TOLERANCE_MS:
        return None

    mode = MODE_POMODORO if POMODORO_MARKER in stripped else MODE_STOPWATCH
    return LogLine(mode=mode, start=start, end=end, duration=duration)


def _local_datetime(epoch_ms: int) -> datetime:
    return datetime.fromtimestamp(epoch_ms / 1000)


def _parse_local(date_text: str, time_text: str) -> Optional[int]:
    try:
        moment = datetime.strptime(
            f"{date_text} {time_text}", f"{DATE_FORMAT} {TIME_FORMAT}"
        )
    except ValueError:
        return None
    return int(moment.timestamp() * 1000)
