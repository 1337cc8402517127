"""
Enums shared across the streaming engine, transports and logging
"""

from enum import Enum, IntEnum, auto


class LogLevel(Enum):
    """Log severity levels"""
    DEBUG = auto()
    INFO = auto()
    WARN = auto()
    ERROR = auto()


class LogCategory(Enum):
    """Log categories for grouping related events"""
    CONFIG = auto()      # Configuration loading, validation
    SYSTEM = auto()      # Startup, shutdown, errors
    ANIMATION = auto()   # Animation asset loading/validation
    STREAM = auto()      # Frame streaming loop

    TELNET = auto()
    WEBSOCKET = auto()
    TERMINAL = auto()
    API = auto()

    SHUTDOWN = auto()
    TASK = auto()

    GENERAL = auto()    # Default general category


class TransportMode(Enum):
    """Which transport the process serves frames over"""
    TERMINAL = auto()   # Local terminal (stdout)
    TELNET = auto()     # Raw TCP telnet server
    HTTP = auto()       # FastAPI + websocket


class MessageCode(IntEnum):
    """
    Websocket message codes

    INIT: server asks the client for its size
    OK: client reports size / server delivers a frame
    ERROR: either side aborts the session
    """
    INIT = 0
    OK = 1
    ERROR = 2
