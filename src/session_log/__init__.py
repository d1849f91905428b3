"""Focus-session history embedded in board documents as log lines."""

from .grammar import LogLine, format_log_line, parse_log_line
from .models import FocusSession
from .store import SessionLogStore

__all__ = [
    "FocusSession",
    "LogLine",
    "SessionLogStore",
    "format_log_line",
    "parse_log_line",
]
