import asyncio
import codecs
import os
import select
import sys
import termios
import tty
from typing import Callable, Optional, TextIO

from nyancat.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.TERMINAL)

READ_SIZE = 32
ESCAPE_TIMEOUT = 0.05
ESCAPE = "\x1b"
EXIT_KEYS = frozenset({"q", "Q", ESCAPE})


class ExitKeyListener:
    """
    Watches stdin for an exit key (q, Q or a lone ESC) while the animation
    plays in the same terminal.

    Features:
    - Async-friendly (non-blocking select + asyncio.sleep)
    - Arrow keys and other ESC [ sequences are not mistaken for ESC
    - Terminal switched to cbreak mode, restored on exit

    Calls on_exit() once when an exit key is read, then returns.
    """

    def __init__(
        self,
        on_exit: Callable[[], None],
        stream: Optional[TextIO] = None,
        poll_interval: float = 0.02
    ):
        self.on_exit = on_exit
        self.stream = stream or sys.stdin
        self.poll_interval = poll_interval
        self._old_settings = None
        self._buffer = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    async def run(self) -> None:
        """
        Read keys until an exit key arrives or the task is cancelled.

        Returns immediately (exit key disabled) when stdin is not a TTY.
        """
        if not self.stream.isatty():
            log.warn("STDIN is not a TTY, exit key disabled (use Ctrl+C)")
            return

        fd = self.stream.fileno()

        # Save current terminal settings and switch to cbreak mode
        self._old_settings = termios.tcgetattr(fd)
        tty.setcbreak(fd)
        log.debug("Exit key listener active (cbreak mode enabled)")

        try:
            while True:
                # A lone ESC gets a short grace period to become ESC [ X
                timeout = ESCAPE_TIMEOUT if self._buffer == ESCAPE else 0
                ready, _, _ = select.select([fd], [], [], timeout)
                if not ready:
                    if self.flush_pending_escape():
                        log.info("Exit key pressed")
                        self.on_exit()
                        return
                    await asyncio.sleep(self.poll_interval)
                    continue

                # Raw fd read: nothing may sit in a Python buffer unseen by select
                chunk = os.read(fd, READ_SIZE)
                if not chunk:
                    # EOF on stdin: nothing more will ever arrive
                    log.debug("STDIN closed, exit key listener stopping")
                    return

                self._buffer += self._decoder.decode(chunk)
                if self.process_buffer():
                    log.info("Exit key pressed")
                    self.on_exit()
                    return

        except asyncio.CancelledError:
            log.debug("Exit key listener cancelled")
            raise

        finally:
            # Restore terminal settings (always runs, even on cancellation)
            if self._old_settings:
                termios.tcsetattr(fd, termios.TCSADRAIN, self._old_settings)
                self._old_settings = None
                log.debug("Terminal settings restored")

    def process_buffer(self) -> bool:
        """
        Consume buffered input; True when an exit key was found.

        A trailing lone ESC is kept until the next read: it may be the start
        of an escape sequence.
        """
        while self._buffer:
            # ESC [ X: arrow keys and friends
            if self._buffer.startswith(ESCAPE + "["):
                if len(self._buffer) < 3:
                    return False
                self._buffer = self._buffer[3:]
                continue

            if self._buffer == ESCAPE:
                return False

            if self._buffer.startswith(ESCAPE):
                # ESC followed by something other than '[': a real ESC press
                self._buffer = self._buffer[1:]
                return True

            char = self._buffer[0]
            self._buffer = self._buffer[1:]
            if char in EXIT_KEYS:
                return True

        return False

    def flush_pending_escape(self) -> bool:
        """A lone ESC left in the buffer after a quiet poll counts as ESC."""
        if self._buffer == ESCAPE:
            self._buffer = ""
            return True
        return False
