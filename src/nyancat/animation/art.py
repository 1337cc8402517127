"""
Procedural construction of the poptart cat animation

The frames are assembled once at import time from a few hand drawn sprites
composited over a starfield and a waving rainbow. Spaces in a sprite are
transparent. The result is plain data: a tuple of frames, each a tuple of
row strings over the art alphabet.
"""

from typing import Iterable, List, Sequence, Tuple

FRAME_WIDTH = 64
FRAME_HEIGHT = 64
FRAME_COUNT = 12

SKY = ","
STAR = "."
RAINBOW_BANDS = (">", "&", "+", "#", "=", ";")
RAINBOW_BAND_HEIGHT = 3
RAINBOW_SEGMENT = 8

BODY_WIDTH = 21
BODY_HEIGHT = 18
BODY_X = 25
BODY_Y = 22

SPRINKLES = (
    (4, 5), (3, 10), (5, 15), (7, 8), (8, 4),
    (9, 13), (11, 6), (12, 16), (13, 10), (10, 17),
)

HEAD = (
    "  ''        ''  ",
    " '**'      '**' ",
    " '***'    '***' ",
    " '****''''****' ",
    "'**************'",
    "'***.''***.''**'",
    "'***'''***'''**'",
    "'*%%********%%*'",
    "'*%%*'*''*'*%%*'",
    "'***''''''''***'",
    " '************' ",
    "  ''''''''''''  ",
)

LEG = (
    "'**'",
    "'**'",
    " '' ",
)

TAIL = (
    "''''   ",
    "'***'' ",
    " ''****",
    "   ''''",
)

# (x, y, phase offset) of each star before scrolling
STARS = (
    (3, 4, 0), (40, 2, 3), (58, 12, 1), (18, 14, 4),
    (50, 48, 2), (9, 52, 5), (30, 58, 0), (60, 33, 3),
    (14, 44, 1), (44, 8, 5),
)

# Twinkle shapes, offsets from the star center
STAR_PHASES: Tuple[Tuple[Tuple[int, int], ...], ...] = (
    ((0, 0),),
    ((0, -1), (0, 1), (-1, 0), (1, 0)),
    ((0, -2), (0, 2), (-2, 0), (2, 0), (0, -1), (0, 1), (-1, 0), (1, 0)),
    ((0, -3), (0, 3), (-3, 0), (3, 0), (0, -2), (0, 2), (-2, 0), (2, 0), (0, 0)),
    ((0, -3), (0, 3), (-3, 0), (3, 0), (-2, -2), (2, 2), (-2, 2), (2, -2)),
    ((0, -3), (0, 3), (-3, 0), (3, 0)),
)

BOB = (0, 0, 1, 1)
LEG_SHIFT = (0, 1, 0, -1)
TAIL_SHIFT = (0, 1, 2, 1)

Grid = List[List[str]]


def _blank() -> Grid:
    return [[SKY] * FRAME_WIDTH for _ in range(FRAME_HEIGHT)]


def _plot(grid: Grid, x: int, y: int, char: str) -> None:
    if 0 <= x < FRAME_WIDTH and 0 <= y < FRAME_HEIGHT:
        grid[y][x] = char


def _stamp(grid: Grid, sprite: Sequence[str], x: int, y: int) -> None:
    for dy, row in enumerate(sprite):
        for dx, char in enumerate(row):
            if char != " ":
                _plot(grid, x + dx, y + dy, char)


def _body_char(row: int, col: int) -> str:
    last_row, last_col = BODY_HEIGHT - 1, BODY_WIDTH - 1
    if row in (0, last_row) and col in (0, last_col):
        return " "
    if row in (0, last_row) or col in (0, last_col):
        return "'"
    if row in (1, 2, last_row - 2, last_row - 1) or col in (1, 2, last_col - 2, last_col - 1):
        return "@"
    if (row, col) in SPRINKLES:
        return "-"
    return "$"


BODY = tuple(
    "".join(_body_char(r, c) for c in range(BODY_WIDTH))
    for r in range(BODY_HEIGHT)
)


def _draw_stars(grid: Grid, index: int) -> None:
    scroll = (index * FRAME_WIDTH) // FRAME_COUNT
    for x, y, offset in STARS:
        cx = (x - scroll) % FRAME_WIDTH
        for dx, dy in STAR_PHASES[(index + offset) % len(STAR_PHASES)]:
            _plot(grid, cx + dx, y + dy, STAR)


def _draw_rainbow(grid: Grid, index: int, top: int) -> None:
    for x in range(BODY_X + 2):
        wave = 1 if ((x // RAINBOW_SEGMENT) + index // 2) % 2 == 0 else 0
        for band, char in enumerate(RAINBOW_BANDS):
            for line in range(RAINBOW_BAND_HEIGHT):
                _plot(grid, x, top + wave + band * RAINBOW_BAND_HEIGHT + line, char)


def build_frame(index: int) -> Tuple[str, ...]:
    """Render frame number index (0 <= index < FRAME_COUNT) as row strings."""
    grid = _blank()
    phase = index % 4
    body_y = BODY_Y + BOB[phase]

    _draw_stars(grid, index)
    _draw_rainbow(grid, index, BODY_Y + 2)
    _stamp(grid, TAIL, BODY_X - 5, body_y + 9 + TAIL_SHIFT[phase])
    for leg_x in (1, 5, 12, 16):
        _stamp(grid, LEG, BODY_X + leg_x + LEG_SHIFT[phase], body_y + BODY_HEIGHT - 1)
    _stamp(grid, BODY, BODY_X, body_y)
    _stamp(grid, HEAD, BODY_X + 12, body_y + 5)

    return tuple("".join(row) for row in grid)


def build_animation(count: int = FRAME_COUNT) -> Tuple[Tuple[str, ...], ...]:
    return tuple(build_frame(i) for i in range(count))


def used_characters(frames: Iterable[Sequence[str]]) -> set:
    """Every distinct character appearing in frames"""
    return {char for frame in frames for row in frame for char in row}
