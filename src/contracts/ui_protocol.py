"""Websocket event types and client command actions."""

from __future__ import annotations

# Websocket event types
EVENT_HELLO = "hello"
EVENT_TIMER = "timer"
EVENT_SESSION = "session"
EVENT_NOTICE = "notice"
EVENT_STOP_REASON_PROMPT = "stop_reason_prompt"
EVENT_COMMAND_RESULT = "command_result"
EVENT_BOARD_CHANGED = "board_changed"

# Client command actions
ACTION_START = "start"
ACTION_STOP = "stop"
ACTION_TOGGLE = "toggle"
ACTION_SKIP_BREAK = "skip_break"
ACTION_SELECT_REASON = "select_reason"
ACTION_CANCEL_REASON = "cancel_reason"
ACTION_ADD_REASON = "add_reason"
ACTION_REPARSE = "reparse"
ACTION_STATUS = "status"
ACTION_PUT_BOARD = "put_board"
ACTION_REMOVE_BOARD = "remove_board"
ACTION_SYNC = "sync"

COMMAND_ACTIONS: frozenset[str] = frozenset(
    {
        ACTION_START,
        ACTION_STOP,
        ACTION_TOGGLE,
        ACTION_SKIP_BREAK,
        ACTION_SELECT_REASON,
        ACTION_CANCEL_REASON,
        ACTION_ADD_REASON,
        ACTION_REPARSE,
        ACTION_STATUS,
        ACTION_PUT_BOARD,
        ACTION_REMOVE_BOARD,
    }
)

# Rejection reasons reported with command results
REASON_INVALID_JSON = "invalid_json"
REASON_INVALID_COMMAND = "invalid_command"
REASON_UNKNOWN_ACTION = "unknown_action"
REASON_INVALID_MODE = "invalid_mode"
REASON_MISSING_REASON = "missing_reason"
REASON_INVALID_BOARD = "invalid_board"
REASON_NOT_APPLICABLE = "not_applicable"

STICKY_EVENT_TYPES: frozenset[str] = frozenset(
    {
        EVENT_TIMER,
        EVENT_NOTICE,
        EVENT_STOP_REASON_PROMPT,
    }
)

STICKY_EVENT_ORDER: tuple[str, ...] = (
    EVENT_TIMER,
    EVENT_STOP_REASON_PROMPT,
    EVENT_NOTICE,
)
