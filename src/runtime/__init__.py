"""Runtime loop, client command dispatch and event publishing for the timer."""

from .bridge import BoardChangePublisher, NoticePublisher, TimerEventBridge
from .dispatch import CommandDispatcher, CommandRejected, TimerCommand, decode_command
from .loop import TimerRuntime
from .prompt import WebsocketInterruptPrompt

__all__ = [
    "BoardChangePublisher",
    "CommandDispatcher",
    "CommandRejected",
    "NoticePublisher",
    "TimerCommand",
    "TimerEventBridge",
    "TimerRuntime",
    "WebsocketInterruptPrompt",
    "decode_command",
]
