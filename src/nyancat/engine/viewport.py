"""
Centered viewport clip of a fixed size frame against a client terminal
"""

from nyancat.models.frame import ClientSize, Viewport

# Each art character is drawn two terminal columns wide
CELL_WIDTH = 2


def compute_viewport(
    frame_width: int,
    frame_height: int,
    client_width: int,
    client_height: int
) -> Viewport:
    """
    Compute the visible window of a frame for a client size.

    Columns: floor(client_width / 2) art characters fit; an oversized frame is
    centered by trimming floor(excess / 2) from the left.
    Rows: an oversized frame is centered the same way, and one row fewer than
    the client height is shown so the last client row stays free for the
    status line.

    Assumes client_height >= 1 (callers clamp, see ClientSize.clamped()).
    Both ranges are clamped to the frame, so the result always satisfies
    0 <= min <= max <= frame dimension.

    Example:
        compute_viewport(64, 64, 80, 24)
        # Viewport(min_row=20, max_row=43, min_col=12, max_col=52)
    """
    visible_cols = client_width // CELL_WIDTH
    min_col = max(frame_width - visible_cols, 0) // 2
    max_col = min(min_col + visible_cols, frame_width)

    visible_rows = max(client_height - 1, 0)
    min_row = max(frame_height - client_height, 0) // 2
    max_row = min(min_row + visible_rows, frame_height)

    return Viewport(min_row=min_row, max_row=max_row, min_col=min_col, max_col=max_col)


def viewport_for(frame_width: int, frame_height: int, size: ClientSize) -> Viewport:
    """compute_viewport() for a ClientSize, clamping a zero height."""
    size = size.clamped()
    return compute_viewport(frame_width, frame_height, size.width, size.height)
