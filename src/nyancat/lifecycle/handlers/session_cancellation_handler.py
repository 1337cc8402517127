from __future__ import annotations
import asyncio

from nyancat.lifecycle.shutdown_protocol import IShutdownHandler
from nyancat.lifecycle.task_registry import TaskCategory, TaskRegistry
from nyancat.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SHUTDOWN)


class SessionCancellationHandler(IShutdownHandler):
    """
    Cancels every streaming session still tracked by the TaskRegistry.

    Sessions close their own connection when cancelled.

    Priority: 60 (after listeners are closed)
    """

    @property
    def shutdown_priority(self) -> int:
        return 60

    async def shutdown(self) -> None:
        tasks = [r.task for r in TaskRegistry.instance().active(TaskCategory.SESSION)]
        if not tasks:
            log.debug("No active sessions")
            return

        log.info(f"Cancelling {len(tasks)} active session(s)...")
        for task in tasks:
            task.cancel()

        await asyncio.gather(*tasks, return_exceptions=True)
        log.debug("All sessions cancelled")
