"""Threaded websocket server that fans timer events out to connected clients."""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from http import HTTPStatus
from typing import Any, Callable, Optional
from urllib.parse import urlsplit

from websockets.asyncio.server import ServerConnection, broadcast, serve
from websockets.datastructures import Headers
from websockets.exceptions import ConnectionClosed
from websockets.http11 import Request, Response

from contracts.ui_protocol import COMMAND_ACTIONS, EVENT_HELLO

from .config import HEALTHZ_PATH, EventServerConfig
from .events import StickyEventStore, make_event

CommandHandler = Callable[[str], None]


class EventServer:
    """Runs an asyncio websocket server on its own thread.

    ``publish`` may be called from any thread. Incoming client messages are
    handed to ``command_handler`` on the server thread; the handler must not
    block.
    """

    def __init__(
        self,
        config: EventServerConfig,
        *,
        command_handler: Optional[CommandHandler] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config
        self._command_handler = command_handler
        self._logger = logger or logging.getLogger("server")
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_requested: Optional[asyncio.Event] = None
        self._ready = threading.Event()
        self._startup_error: Optional[BaseException] = None
        self._clients: set[ServerConnection] = set()
        self._sticky = StickyEventStore()

    @property
    def host(self) -> str:
        return self._config.host

    @property
    def port(self) -> int:
        return self._config.port

    @property
    def websocket_path(self) -> str:
        return self._config.websocket_path

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and self._loop is not None

    def set_command_handler(self, handler: Optional[CommandHandler]) -> None:
        self._command_handler = handler

    def start(self, timeout_seconds: float = 5.0) -> None:
        if self.is_running:
            self._logger.warning("Event server is already running")
            return

        self._startup_error = None
        self._ready.clear()
        self._thread = threading.Thread(target=self._run, daemon=True, name="event-server")
        self._thread.start()

        if not self._ready.wait(timeout_seconds):
            raise RuntimeError(f"Event server did not start within {timeout_seconds:.1f}s")
        if self._startup_error is not None:
            self._thread.join(timeout=timeout_seconds)
            self._thread = None
            raise RuntimeError(f"Event server startup failed: {self._startup_error}")

    def stop(self, timeout_seconds: float = 5.0) -> None:
        thread = self._thread
        if thread is None:
            return

        loop, stop_requested = self._loop, self._stop_requested
        if loop is not None and stop_requested is not None:
            try:
                loop.call_soon_threadsafe(stop_requested.set)
            except RuntimeError:
                self._logger.debug("Event server loop already closed")

        thread.join(timeout=timeout_seconds)
        if thread.is_alive():
            self._logger.error("Event server thread did not stop within %.1fs", timeout_seconds)
        self._thread = None

    def publish(self, event_type: str, **payload: Any) -> None:
        """Broadcast an event and keep it for late clients when it is sticky."""
        message = make_event(event_type, **payload)
        self._sticky.remember(event_type, message, retain=payload.get("active") is not False)

        loop = self._loop
        if loop is None:
            return
        try:
            loop.call_soon_threadsafe(self._broadcast, message)
        except RuntimeError:
            # Loop closed between the check and the call.
            self._logger.debug("Dropped %s event during shutdown", event_type)

    def _run(self) -> None:
        try:
            asyncio.run(self._serve())
        except Exception as error:
            self._logger.error("Event server failed: %s", error, exc_info=True)
            self._startup_error = error
        finally:
            self._loop = None
            self._stop_requested = None
            self._ready.set()

    async def _serve(self) -> None:
        self._stop_requested = asyncio.Event()
        async with serve(
            self._handler,
            host=self._config.host,
            port=self._config.port,
            process_request=self._process_request,
            logger=self._logger,
        ):
            self._loop = asyncio.get_running_loop()
            self._logger.info(
                "Event server running at ws://%s:%d%s",
                self._config.host,
                self._config.port,
                self._config.websocket_path,
            )
            self._ready.set()
            await self._stop_requested.wait()
            self._logger.info("Event server closing %d client(s)", len(self._clients))

    async def _handler(self, websocket: ServerConnection) -> None:
        self._clients.add(websocket)
        self._logger.info("Client connected: %s", websocket.remote_address)
        try:
            await websocket.send(make_event(EVENT_HELLO, actions=sorted(COMMAND_ACTIONS)))
            for message in self._sticky.snapshot():
                await websocket.send(message)
            async for message in websocket:
                self._dispatch(message)
        except ConnectionClosed:
            self._logger.debug("Connection closed: %s", websocket.remote_address)
        finally:
            self._clients.discard(websocket)
            self._logger.info("Client disconnected: %s", websocket.remote_address)

    def _dispatch(self, message: str | bytes) -> None:
        self._logger.debug("Received from client: %s", message)
        if self._command_handler is None:
            return
        if isinstance(message, bytes):
            message = message.decode("utf-8", errors="replace")
        try:
            self._command_handler(message)
        except Exception:
            self._logger.exception("Command handler failed")

    def _broadcast(self, message: str) -> None:
        if self._clients:
            broadcast(self._clients, message)

    def _process_request(
        self,
        connection: ServerConnection,
        request: Request,
    ) -> Optional[Response]:
        del connection
        path = urlsplit(request.path).path
        if path == self._config.websocket_path:
            return None
        if path == HEALTHZ_PATH:
            return _json_response(HTTPStatus.OK, {"status": "ok", "clients": len(self._clients)})
        return _json_response(HTTPStatus.NOT_FOUND, {"status": "not_found", "path": path})


def _json_response(status: HTTPStatus, body: dict[str, Any]) -> Response:
    payload = json.dumps(body).encode("utf-8")
    headers = Headers()
    headers["Content-Type"] = "application/json"
    headers["Content-Length"] = str(len(payload))
    headers["Cache-Control"] = "no-store"
    return Response(status.value, status.phrase, headers, payload)
