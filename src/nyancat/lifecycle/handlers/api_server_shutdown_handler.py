from __future__ import annotations
from typing import TYPE_CHECKING

from nyancat.lifecycle.shutdown_protocol import IShutdownHandler
from nyancat.utils.logger import get_logger, LogCategory

if TYPE_CHECKING:
    from nyancat.lifecycle.api_server_wrapper import APIServerWrapper

log = get_logger().for_category(LogCategory.SHUTDOWN)


class APIServerShutdownHandler(IShutdownHandler):
    """
    Shutdown handler for the HTTP server (FastAPI + Uvicorn).

    Stops accepting connections and releases the port. Open websocket
    sessions are closed by uvicorn's own shutdown.

    Priority: 100 (stop accepting first)
    """

    def __init__(self, api_wrapper: "APIServerWrapper"):
        self.api_wrapper = api_wrapper

    @property
    def shutdown_priority(self) -> int:
        return 100

    async def shutdown(self) -> None:
        log.info("Stopping HTTP server...")

        if not self.api_wrapper.is_running:
            log.debug("HTTP server not running")
            return

        await self.api_wrapper.stop()
