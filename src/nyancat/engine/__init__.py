"""
Streaming engine: color encoding, viewport clipping, the per-session frame loop.
"""

from . import color_encoder
from .viewport import compute_viewport, viewport_for
from .frame_streamer import FrameStreamer, FrameSink, StreamOptions

__all__ = [
    "color_encoder",
    "compute_viewport",
    "viewport_for",
    "FrameStreamer",
    "FrameSink",
    "StreamOptions",
]
