"""
Frame domain models - client dimensions, viewport clip, per-connection session
"""

import time
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class ClientSize:
    """Client terminal dimensions in character cells"""
    width: int
    height: int

    def clamped(self) -> "ClientSize":
        """Return a size whose height is at least 1 row (the status line)."""
        if self.height >= 1:
            return self
        return ClientSize(width=self.width, height=1)

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class Viewport:
    """
    Visible window of a frame, half-open ranges [min, max)

    Rows and columns index into the frame's own grid, not the client's screen.
    """
    min_row: int
    max_row: int
    min_col: int
    max_col: int

    @property
    def rows(self) -> int:
        return self.max_row - self.min_row

    @property
    def cols(self) -> int:
        return self.max_col - self.min_col

    @property
    def is_empty(self) -> bool:
        return self.rows == 0 or self.cols == 0


@dataclass
class StreamSession:
    """
    State owned by exactly one connection's streaming task.

    client_size may be replaced at any time by the transport (telnet resize,
    terminal poll); the streamer reads it once per tick.
    """
    client_size: ClientSize
    peer: str = "local"
    frame_index: int = 0
    ticks: int = 0
    start_time: float = field(default_factory=time.monotonic)
    frame_limit: Optional[int] = None

    @property
    def elapsed(self) -> float:
        """Seconds since the session started"""
        return time.monotonic() - self.start_time

    @property
    def limit_reached(self) -> bool:
        return self.frame_limit is not None and self.ticks >= self.frame_limit
