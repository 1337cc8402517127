"""
Art character to terminal escape sequence mapping

Every art character is drawn as one color "pixel": two blank cells on a
truecolor background. The table is fixed, so identical input always yields
byte-identical output regardless of transport.
"""

from typing import Dict, Tuple

from nyancat.exceptions import UnknownArtCharacter

RESET = "\x1b[0m"
PIXEL = "  "

# Art alphabet -> (r, g, b) background
PALETTE: Dict[str, Tuple[int, int, int]] = {
    ",": (0, 49, 105),      # night sky
    ".": (255, 255, 255),   # stars
    "'": (0, 0, 0),         # outline
    "@": (255, 205, 152),   # poptart crust
    "$": (255, 169, 255),   # frosting
    "-": (255, 0, 153),     # sprinkles
    ">": (255, 0, 0),       # rainbow red
    "&": (255, 153, 0),     # rainbow orange
    "+": (255, 255, 0),     # rainbow yellow
    "#": (51, 255, 0),      # rainbow green
    "=": (0, 153, 255),     # rainbow blue
    ";": (102, 51, 255),    # rainbow purple
    "*": (153, 153, 153),   # cat fur
    "%": (255, 163, 177),   # cheeks
}

ALPHABET = frozenset(PALETTE)


def background(r: int, g: int, b: int) -> str:
    """Truecolor background escape sequence"""
    return f"\x1b[48;2;{r};{g};{b}m"


_SEQUENCES: Dict[str, str] = {
    char: background(*rgb) + PIXEL for char, rgb in PALETTE.items()
}


def encode(char: str) -> str:
    """
    Escape sequence for one art character.

    Raises:
        UnknownArtCharacter: char is not part of the art alphabet
    """
    try:
        return _SEQUENCES[char]
    except KeyError:
        raise UnknownArtCharacter(char) from None


def encode_row(chars: str) -> str:
    """Encode a run of art characters (one clipped frame row)."""
    return "".join(encode(c) for c in chars)
