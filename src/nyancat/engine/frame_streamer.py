"""
Fixed-rate frame streaming for one connection

FrameStreamer knows nothing about sockets or terminals: it renders frames
for a StreamSession and hands text to a FrameSink. Each transport supplies
its own sink.
"""

import asyncio
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence

from nyancat.engine.color_encoder import RESET, background, encode_row
from nyancat.engine.viewport import viewport_for
from nyancat.models.frame import ClientSize, StreamSession
from nyancat.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.STREAM)

CLEAR_SCREEN = "\x1b[2J\x1b[1;1H"
CURSOR_HOME = "\x1b[H"
ERASE_TO_EOL = "\x1b[K"
COUNTER_BACKGROUND = background(0, 0, 91)


class FrameSink(Protocol):
    """
    Output side of a transport.

    write() may block (backpressure) and raises ConnectionError/OSError when
    the peer is gone; close() must be safe to call more than once.
    """

    async def write(self, data: str) -> None:
        ...

    async def close(self) -> None:
        ...


@dataclass(frozen=True)
class StreamOptions:
    """Per-transport rendering options"""
    tick_interval: float = 0.1
    clear_screen: bool = True      # clear + home before every frame
    home_cursor: bool = False      # home only (used when clear_screen is off)
    show_counter: bool = False
    line_ending: str = "\n"


class FrameStreamer:
    """
    Drives the animation loop of a single session.

    Per tick:
    - stop if the stop event is set or the frame limit is reached
    - refresh the client size (optional resize callback)
    - render the current frame clipped to the viewport, write it, flush
    - sleep one tick, advance the frame index (cyclic)

    Example:
        session = StreamSession(client_size=ClientSize(80, 24), frame_limit=50)
        streamer = FrameStreamer(FRAMES, sink, StreamOptions(show_counter=True))
        ticks = await streamer.run(session)
    """

    def __init__(
        self,
        animation: Sequence[Sequence[str]],
        sink: FrameSink,
        options: Optional[StreamOptions] = None
    ):
        if not animation:
            raise ValueError("animation must contain at least one frame")
        self.animation = animation
        self.sink = sink
        self.options = options or StreamOptions()
        self.frame_height = len(animation[0])
        self.frame_width = len(animation[0][0]) if self.frame_height else 0

    # === Rendering ===

    def render(self, session: StreamSession) -> str:
        """Assemble the escape text of the session's current frame."""
        frame = self.animation[session.frame_index]
        viewport = viewport_for(self.frame_width, self.frame_height, session.client_size)

        parts = []
        if self.options.clear_screen:
            parts.append(CLEAR_SCREEN)
        elif self.options.home_cursor:
            parts.append(CURSOR_HOME)

        if not viewport.is_empty:
            for row in frame[viewport.min_row:viewport.max_row]:
                parts.append(encode_row(row[viewport.min_col:viewport.max_col]))
                parts.append(RESET + self.options.line_ending)

        if self.options.show_counter:
            parts.append(self.render_counter(session))

        return "".join(parts)

    @staticmethod
    def render_counter(session: StreamSession) -> str:
        """Status line for the reserved last client row"""
        text = f"You have nyaned for {session.elapsed:.1f} seconds!"
        return f"{COUNTER_BACKGROUND}{text}{RESET}{ERASE_TO_EOL}"

    # === Loop ===

    async def run(
        self,
        session: StreamSession,
        stop_event: Optional[asyncio.Event] = None,
        resize: Optional[Callable[[], ClientSize]] = None
    ) -> int:
        """
        Stream until stopped, cancelled or the session's frame limit is hit.

        Sink errors propagate to the caller, which owns the connection.

        Returns:
            Number of ticks streamed
        """
        log.debug("Streaming started", peer=session.peer, size=str(session.client_size),
                  limit=session.frame_limit)

        while not session.limit_reached:
            if stop_event is not None and stop_event.is_set():
                break

            if resize is not None:
                session.client_size = resize()

            await self.sink.write(self.render(session))
            stopped = await self._sleep_tick(stop_event)

            session.frame_index = (session.frame_index + 1) % len(self.animation)
            session.ticks += 1
            if stopped:
                break

        log.debug("Streaming finished", peer=session.peer, ticks=session.ticks)
        return session.ticks

    async def _sleep_tick(self, stop_event: Optional[asyncio.Event]) -> bool:
        """Sleep one tick; True if the stop event fired meanwhile."""
        if stop_event is None:
            await asyncio.sleep(self.options.tick_interval)
            return False
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=self.options.tick_interval)
            return True
        except asyncio.TimeoutError:
            return False
