from __future__ import annotations
from typing import TYPE_CHECKING

from nyancat.lifecycle.shutdown_protocol import IShutdownHandler
from nyancat.utils.logger import get_logger, LogCategory

if TYPE_CHECKING:
    from nyancat.telnet.server import TelnetServer

log = get_logger().for_category(LogCategory.SHUTDOWN)


class TelnetServerShutdownHandler(IShutdownHandler):
    """
    Shutdown handler for the telnet listener.

    Closes the listening socket so no new sessions start while the existing
    ones are being cancelled.

    Priority: 100 (stop accepting first)
    """

    def __init__(self, server: "TelnetServer"):
        self.server = server

    @property
    def shutdown_priority(self) -> int:
        return 100

    async def shutdown(self) -> None:
        log.info("Closing telnet listener...")
        await self.server.stop()
