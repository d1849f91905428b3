"""Decodes websocket client commands and applies them to the timer."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from board import BoardDocument, BoardError, InMemoryBoardRegistry, document_from_dict
from contracts.ui_protocol import (
    ACTION_ADD_REASON,
    ACTION_CANCEL_REASON,
    ACTION_PUT_BOARD,
    ACTION_REMOVE_BOARD,
    ACTION_REPARSE,
    ACTION_SELECT_REASON,
    ACTION_SKIP_BREAK,
    ACTION_START,
    ACTION_STATUS,
    ACTION_STOP,
    ACTION_TOGGLE,
    COMMAND_ACTIONS,
    EVENT_COMMAND_RESULT,
    REASON_INVALID_BOARD,
    REASON_INVALID_COMMAND,
    REASON_INVALID_JSON,
    REASON_INVALID_MODE,
    REASON_MISSING_REASON,
    REASON_NOT_APPLICABLE,
    REASON_UNKNOWN_ACTION,
)
from timer import TimerManager
from timer.constants import MODE_POMODORO, TIMER_MODES

from .bridge import session_payload, snapshot_payload
from .contracts import CommandSubmitterLike, EventPublisherLike
from .prompt import WebsocketInterruptPrompt


@dataclass(frozen=True)
class TimerCommand:
    """One validated client request."""
    action: str
    mode: str = MODE_POMODORO
    card_id: Optional[str] = None
    reason: str = ""
    ask_reason: bool = True
    request_id: Optional[str] = None
    board: Optional[BoardDocument] = None
    path: Optional[str] = None


@dataclass(frozen=True)
class CommandResult:
    action: str
    accepted: bool
    reason: str = ""
    request_id: Optional[str] = None
    payload: Optional[dict[str, Any]] = None


class CommandRejected(Exception):
    """Raised by ``decode_command`` for malformed client messages."""

    def __init__(self, reason: str, message: str, *, action: str = "", request_id=None):
        super().__init__(message)
        self.reason = reason
        self.action = action
        self.request_id = request_id


def decode_command(raw: str) -> TimerCommand:
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as error:
        raise CommandRejected(REASON_INVALID_JSON, f"Invalid JSON: {error}") from error
    if not isinstance(data, dict):
        raise CommandRejected(REASON_INVALID_COMMAND, "Command must be a JSON object")

    request_id = data.get("request_id")
    if request_id is not None and not isinstance(request_id, (str, int)):
        request_id = None
    action = data.get("action")
    if not isinstance(action, str) or action not in COMMAND_ACTIONS:
        raise CommandRejected(
            REASON_UNKNOWN_ACTION,
            f"Unknown action: {action!r}",
            action=action if isinstance(action, str) else "",
            request_id=request_id,
        )

    mode = data.get("mode", MODE_POMODORO)
    if mode not in TIMER_MODES:
        raise CommandRejected(
            REASON_INVALID_MODE,
            f"Unsupported timer mode: {mode!r}",
            action=action,
            request_id=request_id,
        )

    card_id = data.get("card_id")
    if card_id is not None and not isinstance(card_id, str):
        raise CommandRejected(
            REASON_INVALID_COMMAND,
            "card_id must be a string",
            action=action,
            request_id=request_id,
        )

    reason = data.get("reason", "")
    if not isinstance(reason, str):
        reason = ""
    if action in (ACTION_SELECT_REASON, ACTION_ADD_REASON) and not reason.strip():
        raise CommandRejected(
            REASON_MISSING_REASON,
            f"{action} requires a non-empty reason",
            action=action,
            request_id=request_id,
        )

    board: Optional[BoardDocument] = None
    if action == ACTION_PUT_BOARD:
        try:
            board = document_from_dict(data.get("board"))
        except BoardError as error:
            raise CommandRejected(
                REASON_INVALID_BOARD,
                str(error),
                action=action,
                request_id=request_id,
            ) from error

    path = data.get("path")
    if action == ACTION_REMOVE_BOARD and (not isinstance(path, str) or not path):
        raise CommandRejected(
            REASON_INVALID_BOARD,
            "remove_board requires a path",
            action=action,
            request_id=request_id,
        )

    return TimerCommand(
        action=action,
        mode=mode,
        card_id=card_id or None,
        reason=reason.strip(),
        ask_reason=data.get("ask_reason", True) is not False,
        request_id=None if request_id is None else str(request_id),
        board=board,
        path=path if isinstance(path, str) else None,
    )


class CommandDispatcher:
    """Routes client commands onto the runtime loop and reports the outcome."""

    def __init__(
        self,
        *,
        manager: TimerManager,
        runtime: CommandSubmitterLike,
        publisher: EventPublisherLike,
        registry: Optional[InMemoryBoardRegistry] = None,
        prompt: Optional[WebsocketInterruptPrompt] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._manager = manager
        self._runtime = runtime
        self._publisher = publisher
        self._registry = registry
        self._prompt = prompt
        self._logger = logger or logging.getLogger("runtime")
        self._handlers = {
            ACTION_START: self._handle_start,
            ACTION_STOP: self._handle_stop,
            ACTION_TOGGLE: self._handle_toggle,
            ACTION_SKIP_BREAK: self._handle_skip_break,
            ACTION_SELECT_REASON: self._handle_select_reason,
            ACTION_CANCEL_REASON: self._handle_cancel_reason,
            ACTION_ADD_REASON: self._handle_add_reason,
            ACTION_REPARSE: self._handle_reparse,
            ACTION_STATUS: self._handle_status,
            ACTION_PUT_BOARD: self._handle_put_board,
            ACTION_REMOVE_BOARD: self._handle_remove_board,
        }

    def handle_message(self, raw: str) -> None:
        """Entry point for raw client messages; safe to call from any thread."""
        try:
            command = decode_command(raw)
        except CommandRejected as rejected:
            self._logger.warning("Rejected client command: %s", rejected)
            self._publish_result(
                CommandResult(
                    action=rejected.action,
                    accepted=False,
                    reason=rejected.reason,
                    request_id=rejected.request_id,
                )
            )
            return
        self._runtime.submit(self._execute_and_publish, command)

    def execute(self, command: TimerCommand) -> CommandResult:
        """Apply ``command`` to the manager; must run on the runtime loop."""
        handler = self._handlers[command.action]
        accepted, payload = handler(command)
        self._logger.debug(
            "Command %s accepted=%s card=%s", command.action, accepted, command.card_id
        )
        return CommandResult(
            action=command.action,
            accepted=accepted,
            reason="" if accepted else REASON_NOT_APPLICABLE,
            request_id=command.request_id,
            payload=payload,
        )

    def _execute_and_publish(self, command: TimerCommand) -> None:
        self._publish_result(self.execute(command))

    def _publish_result(self, result: CommandResult) -> None:
        payload: dict[str, Any] = {
            "action": result.action,
            "accepted": result.accepted,
        }
        if result.reason:
            payload["reason"] = result.reason
        if result.request_id is not None:
            payload["request_id"] = result.request_id
        if result.payload:
            payload.update(result.payload)
        self._publisher.publish(EVENT_COMMAND_RESULT, **payload)

    def _handle_start(self, command: TimerCommand):
        return self._manager.start(command.mode, command.card_id), None

    def _handle_stop(self, command: TimerCommand):
        return self._manager.stop(ask_reason=command.ask_reason), None

    def _handle_toggle(self, command: TimerCommand):
        return self._manager.toggle(command.mode, command.card_id), None

    def _handle_skip_break(self, command: TimerCommand):
        return self._manager.skip_break(), None

    def _handle_select_reason(self, command: TimerCommand):
        if self._prompt is not None and self._prompt.is_open:
            return self._prompt.select(command.reason), None
        return self._manager.select_stop_reason(command.reason), None

    def _handle_cancel_reason(self, command: TimerCommand):
        if self._prompt is not None and self._prompt.is_open:
            return self._prompt.cancel(), None
        return self._manager.cancel_stop_reason(), None

    def _handle_add_reason(self, command: TimerCommand):
        accepted = self._manager.add_interrupt_reason(command.reason, command.card_id)
        card_id = command.card_id or self._manager.state.target_card_id
        return accepted, {"reasons": self._manager.interrupt_reasons(card_id)}

    def _handle_reparse(self, command: TimerCommand):
        self._manager.force_reparse_logs()
        return True, {"sessions_today": len(self._manager.get_logs_for_date())}

    def _handle_status(self, command: TimerCommand):
        payload: dict[str, Any] = {
            "timer": snapshot_payload(self._manager.snapshot()),
            "today": [session_payload(s) for s in self._manager.get_logs_for_date()],
        }
        if command.card_id:
            payload["total_focused_ms"] = self._manager.get_total_focused(command.card_id)
        return True, payload

    def _handle_put_board(self, command: TimerCommand):
        if self._registry is None or command.board is None:
            return False, None
        self._registry.add_document(command.board)
        self._manager.force_reparse_logs()
        return True, {"path": command.board.path}

    def _handle_remove_board(self, command: TimerCommand):
        if self._registry is None:
            return False, None
        removed = self._registry.remove_document(command.path)
        if removed is None:
            return False, None
        self._manager.force_reparse_logs()
        return True, {"path": command.path}
