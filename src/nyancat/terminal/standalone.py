"""
Local terminal mode

Plays the animation on the process's own terminal: the screen is cleared
once, then every frame is drawn from the home position, clipped to the
current terminal size (polled each tick).
"""

import asyncio
import os
import sys
from typing import Optional, Sequence, TextIO

from nyancat.engine.color_encoder import RESET
from nyancat.engine.frame_streamer import CLEAR_SCREEN, FrameStreamer, StreamOptions
from nyancat.models.frame import ClientSize, StreamSession
from nyancat.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.TERMINAL)

HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
DEFAULT_SIZE = ClientSize(80, 24)


def get_terminal_size(stream: Optional[TextIO] = None) -> ClientSize:
    """Size of the terminal behind stream, or 80x24 if it is not a tty."""
    stream = stream or sys.stdout
    if not stream.isatty():
        return DEFAULT_SIZE
    try:
        size = os.get_terminal_size(stream.fileno())
    except OSError:
        return DEFAULT_SIZE
    return ClientSize(width=size.columns, height=size.lines)


class TerminalSink:
    """FrameSink over a text stream (stdout)"""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout
        self.closed = False

    async def write(self, data: str) -> None:
        self.stream.write(data)
        self.stream.flush()

    async def close(self) -> None:
        self.closed = True


def terminal_options(tick_interval: float, show_counter: bool) -> StreamOptions:
    """Frames are homed, not cleared: the screen is cleared once up front."""
    return StreamOptions(
        tick_interval=tick_interval,
        clear_screen=False,
        home_cursor=True,
        show_counter=show_counter,
        line_ending="\n",
    )


async def run_terminal(
    animation: Sequence[Sequence[str]],
    options: StreamOptions,
    clear_screen: bool = True,
    frame_limit: Optional[int] = None,
    stop_event: Optional[asyncio.Event] = None,
    stream: Optional[TextIO] = None,
) -> int:
    """
    Play the animation until stop_event is set, the frame limit is reached
    or the task is cancelled. The cursor is restored in every case.

    Returns:
        Number of frames drawn
    """
    sink = TerminalSink(stream)
    session = StreamSession(
        client_size=get_terminal_size(sink.stream),
        peer="terminal",
        frame_limit=frame_limit,
    )
    log.info("Playing in terminal", size=str(session.client_size), limit=frame_limit)

    await sink.write(HIDE_CURSOR + (CLEAR_SCREEN if clear_screen else ""))
    try:
        streamer = FrameStreamer(animation, sink, options)
        return await streamer.run(
            session,
            stop_event=stop_event,
            resize=lambda: get_terminal_size(sink.stream),
        )
    finally:
        await sink.write(RESET + SHOW_CURSOR + "\n")
        await sink.close()
