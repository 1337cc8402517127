import pytest
from typing import List, Optional

from nyancat.engine.frame_streamer import StreamOptions
from nyancat.lifecycle.task_registry import TaskRegistry
from nyancat.utils.logger import get_logger


# Three 6x4 frames, each filled with a different art character so that the
# frame a render came from is visible in its escape text.
TINY_ANIMATION = tuple(
    tuple(char * 6 for _ in range(4))
    for char in (",", ".", "@")
)


class ListSink:
    """
    FrameSink that records writes.

    fail_after: raise ConnectionResetError on the write following this many
    successful ones (None = never).
    """

    def __init__(self, fail_after: Optional[int] = None, on_write=None):
        self.writes: List[str] = []
        self.closed = False
        self.fail_after = fail_after
        self.on_write = on_write

    async def write(self, data: str) -> None:
        if self.fail_after is not None and len(self.writes) >= self.fail_after:
            raise ConnectionResetError("peer went away")
        self.writes.append(data)
        if self.on_write is not None:
            self.on_write(self)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def tiny_animation():
    return TINY_ANIMATION


@pytest.fixture
def sink():
    return ListSink()


@pytest.fixture
def fast_options():
    """No tick delay so streaming tests finish immediately"""
    return StreamOptions(tick_interval=0, clear_screen=True, show_counter=False)


@pytest.fixture(autouse=True)
def reset_task_registry():
    TaskRegistry.reset()
    yield
    TaskRegistry.reset()


@pytest.fixture(autouse=True)
def restore_logger():
    """Tests may reconfigure the logger singleton; put it back afterwards."""
    logger = get_logger()
    saved = (logger.min_level, logger.use_colors, logger.stream)
    yield
    logger.min_level, logger.use_colors, logger.stream = saved
