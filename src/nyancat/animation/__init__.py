"""
The Animation asset
-------------------

FRAMES is built and validated once, when this package is first imported,
and shared read-only by every session afterwards.

    from nyancat.animation import FRAMES, FRAME_WIDTH, FRAME_HEIGHT
"""

from typing import Sequence, Tuple

from nyancat.engine.color_encoder import ALPHABET
from nyancat.exceptions import AnimationAssetError
from nyancat.utils.logger import get_logger, LogCategory
from .art import FRAME_WIDTH, FRAME_HEIGHT, build_animation

log = get_logger().for_category(LogCategory.ANIMATION)

Frame = Tuple[str, ...]
Animation = Tuple[Frame, ...]


def validate_animation(frames: Sequence[Sequence[str]], width: int, height: int) -> None:
    """
    Check every frame is width x height and drawn only from the art alphabet.

    Raises:
        AnimationAssetError: on the first offending frame
    """
    if not frames:
        raise AnimationAssetError("Animation has no frames")

    for index, frame in enumerate(frames):
        if len(frame) != height:
            raise AnimationAssetError(
                f"Frame {index} has {len(frame)} rows, expected {height}"
            )
        for row_index, row in enumerate(frame):
            if len(row) != width:
                raise AnimationAssetError(
                    f"Frame {index} row {row_index} has {len(row)} columns, expected {width}"
                )
            unknown = set(row) - ALPHABET
            if unknown:
                raise AnimationAssetError(
                    f"Frame {index} row {row_index} uses unknown characters {sorted(unknown)!r}"
                )


FRAMES: Animation = build_animation()
validate_animation(FRAMES, FRAME_WIDTH, FRAME_HEIGHT)

log.debug("Animation loaded", frames=len(FRAMES), size=f"{FRAME_WIDTH}x{FRAME_HEIGHT}")

__all__ = [
    "FRAMES",
    "FRAME_WIDTH",
    "FRAME_HEIGHT",
    "Frame",
    "Animation",
    "validate_animation",
]
