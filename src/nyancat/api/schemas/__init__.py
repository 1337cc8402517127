from .message import FrameMessage

__all__ = ["FrameMessage"]
