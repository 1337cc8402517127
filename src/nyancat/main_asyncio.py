"""
main_asyncio.py - Application entry point for nyancat
-----------------------------------------------------

Responsible for:
- loading configuration and applying command line overrides
- starting the selected transport (terminal, telnet or HTTP/websocket)
- graceful shutdown on Ctrl+C, SIGTERM, exit key or frame limit
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from nyancat import __version__
from nyancat.animation import FRAMES
from nyancat.api.main import create_app
from nyancat.cli import parse_args, transport_mode
from nyancat.engine.frame_streamer import StreamOptions
from nyancat.lifecycle import ShutdownCoordinator
from nyancat.lifecycle.api_server_wrapper import APIServerWrapper
from nyancat.lifecycle.handlers import (
    APIServerShutdownHandler,
    SessionCancellationHandler,
    TaskCancellationHandler,
    TelnetServerShutdownHandler,
)
from nyancat.lifecycle.task_registry import TaskCategory, TaskRegistry, create_tracked_task
from nyancat.managers import ConfigManager
from nyancat.models.config import AppConfig
from nyancat.models.enums import LogCategory, LogLevel, TransportMode
from nyancat.telnet import TelnetServer
from nyancat.terminal import ExitKeyListener, run_terminal, terminal_options
from nyancat.utils.logger import configure_logger, get_logger, level_from_env, parse_log_level

# ---------------------------------------------------------------------------
# LOGGER SETUP
# ---------------------------------------------------------------------------

log = get_logger().for_category(LogCategory.SYSTEM)

# Browsers (xterm.js) do not translate bare LF
WEBSOCKET_LINE_ENDING = "\r\n"


# ---------------------------------------------------------------------------
# CONFIGURATION
# ---------------------------------------------------------------------------

def load_config(args: argparse.Namespace, mode: TransportMode) -> AppConfig:
    """Load YAML configuration, then apply command line flags on top."""
    config = ConfigManager(args.config).load()
    return config.with_overrides(
        frame_limit=args.frames,
        show_counter=False if args.no_counter else None,
        clear_screen=False if args.no_clear else None,
        telnet_host=args.host if mode == TransportMode.TELNET else None,
        telnet_port=args.port,
        http_host=args.host if mode == TransportMode.HTTP else None,
        http_port=args.http_port,
    )


def resolve_log_level(config: AppConfig, cli_level: Optional[str], mode: TransportMode) -> LogLevel:
    """
    config < NYANCAT_LOG < --log-level.

    In terminal mode the log shares the screen with the animation, so unless
    a level was asked for explicitly only warnings and errors are shown.
    """
    explicit = parse_log_level(cli_level)
    if explicit is not None:
        return explicit

    configured = parse_log_level(config.logging.level) or LogLevel.INFO
    if mode == TransportMode.TERMINAL:
        configured = max(configured, LogLevel.WARN, key=lambda level: level.value)
    return level_from_env(configured)


def stream_options(config: AppConfig, line_ending: str) -> StreamOptions:
    return StreamOptions(
        tick_interval=config.animation.tick_interval,
        clear_screen=config.display.clear_screen,
        show_counter=config.display.show_counter,
        line_ending=line_ending,
    )


# ---------------------------------------------------------------------------
# TRANSPORTS
# ---------------------------------------------------------------------------

async def start_telnet(config: AppConfig, coordinator: ShutdownCoordinator) -> bool:
    """Bind the telnet listener and register its shutdown handlers."""
    server = TelnetServer(
        FRAMES,
        config.telnet,
        stream_options(config, config.telnet.line_ending),
        frame_limit=config.animation.frame_limit,
    )

    try:
        await server.start()
    except OSError as e:
        log.error("Cannot start telnet server", host=config.telnet.host,
                  port=config.telnet.port, error=str(e))
        return False

    serve_task = create_tracked_task(
        server.serve_forever(),
        category=TaskCategory.SERVER,
        description="Telnet server"
    )

    coordinator.register(TelnetServerShutdownHandler(server))
    coordinator.register(SessionCancellationHandler())
    coordinator.register(TaskCancellationHandler([serve_task]))
    return True


async def start_http(config: AppConfig, coordinator: ShutdownCoordinator) -> bool:
    """Launch uvicorn with the xterm.js page and the /ws endpoint."""
    app = create_app(
        FRAMES,
        stream_options(config, WEBSOCKET_LINE_ENDING),
        frame_limit=config.animation.frame_limit,
    )
    api_wrapper = APIServerWrapper(app, host=config.http.host, port=config.http.port)

    api_task = create_tracked_task(
        api_wrapper.start(),
        category=TaskCategory.SERVER,
        description="FastAPI/Uvicorn Server"
    )

    coordinator.register(APIServerShutdownHandler(api_wrapper))
    coordinator.register(SessionCancellationHandler())
    coordinator.register(TaskCancellationHandler([api_task]))
    return True


async def start_terminal(config: AppConfig, coordinator: ShutdownCoordinator) -> bool:
    """Play in the local terminal; exit key or frame limit ends the process."""
    stop_event = asyncio.Event()

    keyboard_task = create_tracked_task(
        ExitKeyListener(on_exit=stop_event.set).run(),
        category=TaskCategory.INPUT,
        description="Exit key listener"
    )

    render_task = create_tracked_task(
        run_terminal(
            FRAMES,
            terminal_options(config.animation.tick_interval, config.display.show_counter),
            clear_screen=config.display.clear_screen,
            frame_limit=config.animation.frame_limit,
            stop_event=stop_event,
        ),
        category=TaskCategory.RENDER,
        description="Terminal animation"
    )

    def on_render_done(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        if task.exception() is not None:
            # Leave it to the coordinator's critical task check
            return
        coordinator.request_shutdown("Animation finished")

    render_task.add_done_callback(on_render_done)

    coordinator.register(TaskCancellationHandler([render_task, keyboard_task]))
    return True


TRANSPORTS = {
    TransportMode.TELNET: start_telnet,
    TransportMode.HTTP: start_http,
    TransportMode.TERMINAL: start_terminal,
}


# ---------------------------------------------------------------------------
# Application Entry
# ---------------------------------------------------------------------------

async def main(argv: Optional[List[str]] = None) -> int:
    """
    Main async entry point.

    Returns:
        Process exit status: 0 on a clean shutdown, 1 when a server could not
        start or a critical task failed
    """
    args = parse_args(argv)
    mode = transport_mode(args)

    # Honour NYANCAT_LOG / --log-level while the config itself is loading
    configure_logger(parse_log_level(args.log_level) or level_from_env())
    config = load_config(args, mode)
    configure_logger(
        resolve_log_level(config, args.log_level, mode),
        use_colors=config.logging.use_colors and sys.stderr.isatty(),
    )

    log.info(f"Starting nyancat {__version__}", mode=mode.name.lower(), frames=len(FRAMES))

    coordinator = ShutdownCoordinator()
    coordinator.setup_signal_handlers(asyncio.get_running_loop())

    if not await TRANSPORTS[mode](config, coordinator):
        await coordinator.shutdown_all()
        return 1

    log.info("🏁 Running. Waiting for exit signal...")

    await coordinator.wait_for_shutdown()
    await coordinator.shutdown_all()

    log.debug(TaskRegistry.instance().summary())

    if coordinator.failed:
        log.error(f"Exiting after failure: {coordinator.reason}")
        return 1

    log.info("👋 nyancat shut down cleanly.")
    return 0


def run(argv: Optional[List[str]] = None) -> None:
    """Console script entry point."""
    try:
        status = asyncio.run(main(argv))
    except KeyboardInterrupt:
        log.info("Keyboard interrupt received")
        status = 130
    sys.exit(status)


# ---------------------------------------------------------------------------
# ENTRY POINT
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    run()
