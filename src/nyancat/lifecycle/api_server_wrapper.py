from __future__ import annotations
import asyncio
import uvicorn
from fastapi import FastAPI
from typing import Optional
from nyancat.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.API)


class APIServerWrapper:
    """
    Runs uvicorn inside an asyncio task without uvicorn's signal handlers
    interfering with the shutdown coordinator.

    Behaviour:
      - start() launches uvicorn.Server.serve() as a background task and
        waits until stop() is called. If uvicorn exits on its own (bind
        failure) start() raises RuntimeError.
      - stop() asks uvicorn to exit, forces it if necessary and releases the
        port. Safe to call more than once.
    """

    def __init__(
        self,
        app: FastAPI,
        host: str = "127.0.0.1",
        port: int = 3000,
    ):
        self.app = app
        self.host = host
        self.port = port
        self._server: Optional[uvicorn.Server] = None
        self._serve_task: Optional[asyncio.Task] = None
        self._stop_event: asyncio.Event = asyncio.Event()

    # ----------------------------------------------------------------------
    # INTERNAL
    # ----------------------------------------------------------------------
    def _create_server(self) -> uvicorn.Server:
        """Create a uvicorn.Server instance with disabled signal handlers."""
        config = uvicorn.Config(
            app=self.app,
            host=self.host,
            port=self.port,
            loop="asyncio",
            log_level="warning",
            access_log=False,
            server_header=False,
        )

        server = uvicorn.Server(config)
        server.install_signal_handlers = lambda: None  # type: ignore

        return server

    # ----------------------------------------------------------------------
    # PUBLIC API
    # ----------------------------------------------------------------------
    async def start(self) -> None:
        """
        Start uvicorn in background and wait until stop() is called.

        Raises:
            RuntimeError: already started, or uvicorn exited without stop()
        """
        if self._serve_task is not None and not self._serve_task.done():
            raise RuntimeError("API server already started")

        self._server = self._create_server()
        self._stop_event.clear()

        log.info(f"🌐 Launching HTTP server on http://{self.host}:{self.port}")

        self._serve_task = asyncio.create_task(
            self._server.serve(), name="UvicornServeInternal"
        )
        stop_waiter = asyncio.create_task(self._stop_event.wait())

        try:
            done, _ = await asyncio.wait(
                {self._serve_task, stop_waiter},
                return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            log.debug("start() cancelled externally, invoking stop()")
            stop_waiter.cancel()
            await self.stop()
            raise

        if self._serve_task in done and not self._stop_event.is_set():
            # uvicorn calls sys.exit(1) when it cannot bind
            stop_waiter.cancel()
            serve_task = self._serve_task
            self._server = None
            self._serve_task = None
            exc = None if serve_task.cancelled() else serve_task.exception()
            raise RuntimeError(
                f"HTTP server on {self.host}:{self.port} exited unexpectedly: {exc!r}"
            )

        log.debug("APIServerWrapper.start() exiting (stop_event set)")

    async def stop(self, *, shutdown_timeout: float = 2.0) -> None:
        """
        Stop the API server and release the port.
        """
        self._stop_event.set()

        if self._server is None:
            log.debug("API server stop() called but server was not running")
            return

        log.info("🌐 Stopping HTTP server...")

        self._server.should_exit = True
        self._server.force_exit = True

        if self._serve_task and not self._serve_task.done():
            try:
                await asyncio.wait_for(asyncio.shield(self._serve_task), timeout=shutdown_timeout)
            except asyncio.TimeoutError:
                log.warn("🌐 HTTP server shutdown timeout; cancelling serve task")
                self._serve_task.cancel()
                try:
                    await self._serve_task
                except asyncio.CancelledError:
                    log.debug("Uvicorn serve task cancelled cleanly")

        self._server = None
        self._serve_task = None

        log.info("🌐 HTTP server stopped and port released")

    # ----------------------------------------------------------------------
    # PROPERTIES
    # ----------------------------------------------------------------------
    @property
    def is_running(self) -> bool:
        """Return whether a uvicorn serve task is active."""
        return self._serve_task is not None and not self._serve_task.done()

    @property
    def server(self) -> Optional[uvicorn.Server]:
        return self._server
