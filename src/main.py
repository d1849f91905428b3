import logging
import signal
import threading
from typing import Optional

from app_config import (
    AppConfig,
    AppConfigurationError,
    load_app_config,
    log_level,
    resolve_config_path,
)
from board import InMemoryBoardRegistry
from contracts.ui_protocol import ACTION_SYNC
from runtime import (
    BoardChangePublisher,
    CommandDispatcher,
    NoticePublisher,
    TimerEventBridge,
    TimerRuntime,
    WebsocketInterruptPrompt,
)
from server import EventServer, EventServerConfig, ServerConfigurationError
from session_log import SessionLogStore
from sound import SoundError
from timer import TimerManager


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("focus_timer")


def setup_signal_handlers(shutdown: threading.Event, logger: logging.Logger) -> None:
    """Set up graceful shutdown on SIGTERM and SIGINT."""

    def signal_handler(signum: int, frame) -> None:
        del frame
        logger.info("%s received, stopping...", signal.Signals(signum).name)
        shutdown.set()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def create_registry(event_server: Optional[EventServer]) -> InMemoryBoardRegistry:
    persist = None
    if event_server is not None:
        persist = BoardChangePublisher(event_server, logger=logging.getLogger("runtime")).persist
    return InMemoryBoardRegistry(persist=persist, logger=logging.getLogger("board"))


def create_sound_sink(app_config: AppConfig, logger: logging.Logger):
    if not app_config.timer.enable_sounds:
        return None
    try:
        from sound.output import SoundDeviceChime

        return SoundDeviceChime(
            output_device_index=app_config.sound.output_device,
            logger=logging.getLogger("sound"),
        )
    except (ImportError, OSError, SoundError) as error:
        logger.warning("End-of-session sounds disabled: %s", error)
        return None


def create_event_server(app_config: AppConfig, logger: logging.Logger) -> Optional[EventServer]:
    try:
        server_config = EventServerConfig.from_settings(app_config.server)
    except ServerConfigurationError as error:
        logger.error("Event server configuration error: %s", error)
        logger.warning("Continuing without event server.")
        return None
    if not server_config.enabled:
        logger.info("Event server disabled via server.enabled=false")
        return None

    event_server = EventServer(config=server_config, logger=logging.getLogger("server"))
    try:
        event_server.start(timeout_seconds=5.0)
    except RuntimeError as error:
        logger.error("Event server startup failed: %s", error)
        logger.warning("Continuing without event server.")
        return None
    return event_server


def main(config_path: Optional[str] = None) -> int:
    """Run the focus timer service until interrupted."""
    logger = setup_logging()

    try:
        resolved_path = resolve_config_path(config_path)
        app_config = load_app_config(str(resolved_path))
        logger.info("Loaded runtime config: %s", resolved_path)
    except AppConfigurationError as error:
        logger.error("App configuration error: %s", error)
        return 1
    logging.getLogger().setLevel(log_level(app_config.logging))

    event_server = create_event_server(app_config, logger)
    registry = create_registry(event_server)
    runtime = TimerRuntime(logger=logging.getLogger("runtime"))
    notices = NoticePublisher(event_server, logger=logging.getLogger("runtime"))
    prompt = (
        WebsocketInterruptPrompt(event_server, logger=logging.getLogger("runtime"))
        if event_server is not None
        else None
    )

    manager = TimerManager(
        registry,
        global_settings=app_config.timer.as_setting_map(),
        log_store=SessionLogStore(registry, logger=logging.getLogger("session_log")),
        notifier=notices,
        sound=create_sound_sink(app_config, logger),
        prompt=prompt,
        scheduler=runtime,
        auto_start_delay_seconds=app_config.timer.auto_start_delay_seconds,
        logger=logging.getLogger("timer"),
    )
    runtime.set_tick_handler(manager.tick)

    bridge: Optional[TimerEventBridge] = None
    if event_server is not None:
        bridge = TimerEventBridge(manager, event_server, logger=logging.getLogger("runtime"))
        bridge.attach()
        dispatcher = CommandDispatcher(
            manager=manager,
            runtime=runtime,
            publisher=event_server,
            registry=registry,
            prompt=prompt,
            logger=logging.getLogger("runtime"),
        )
        event_server.set_command_handler(dispatcher.handle_message)

    shutdown = threading.Event()
    setup_signal_handlers(shutdown, logger)

    try:
        runtime.start()
        if bridge is not None:
            runtime.submit(bridge.publish_snapshot, ACTION_SYNC)
        logger.info("Focus timer ready")
        while not shutdown.wait(timeout=0.5):
            if not runtime.is_running:
                logger.error("Timer runtime stopped unexpectedly")
                return 1
        return 0
    except Exception as error:
        logger.error("Unexpected error: %s", error, exc_info=True)
        return 1
    finally:
        _shutdown(runtime, manager, bridge, event_server, logger)


def _shutdown(
    runtime: TimerRuntime,
    manager: TimerManager,
    bridge: Optional[TimerEventBridge],
    event_server: Optional[EventServer],
    logger: logging.Logger,
) -> None:
    if runtime.is_running:
        logger.info("Stopping running session...")
        try:
            runtime.submit(manager.stop, ask_reason=False).result(timeout=5.0)
        except Exception as error:
            logger.error("Error stopping session: %s", error, exc_info=True)

    logger.info("Stopping timer runtime...")
    runtime.stop(timeout_seconds=5.0)
    if bridge is not None:
        bridge.detach()
    manager.close()

    if event_server is not None:
        logger.info("Stopping event server...")
        try:
            event_server.stop(timeout_seconds=5.0)
        except Exception as error:
            logger.error("Error stopping event server: %s", error, exc_info=True)


if __name__ == "__main__":
    raise SystemExit(main())
