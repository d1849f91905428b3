"""Websocket event server for the focus timer runtime."""

from .config import ServerConfigurationError, EventServerConfig
from .events import StickyEventStore, make_event
from .service import EventServer

__all__ = [
    "EventServer",
    "EventServerConfig",
    "ServerConfigurationError",
    "StickyEventStore",
    "make_event",
]
