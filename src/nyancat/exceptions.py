"""
Application exceptions.

Every error raised on purpose by nyancat derives from NyancatError so callers
can separate expected failures from bugs.
"""


class NyancatError(Exception):
    """Base class for all application errors"""


class ConfigError(NyancatError):
    """Configuration file is unreadable or contains invalid values"""


class AnimationAssetError(NyancatError):
    """Animation frames failed startup validation"""


class ProtocolError(NyancatError):
    """Peer sent a message that does not follow the websocket schema"""


class UnknownArtCharacter(NyancatError, KeyError):
    """Art character has no color mapping"""

    def __init__(self, char: str):
        super().__init__(char)
        self.char = char

    def __str__(self) -> str:
        return f"No color mapping for art character {self.char!r}"
