from .enums import LogLevel, LogCategory, TransportMode, MessageCode
from .frame import ClientSize, Viewport, StreamSession
from .config import AppConfig, AnimationSettings, DisplaySettings, TelnetSettings, HttpSettings, LoggingSettings

__all__ = [
    "LogLevel",
    "LogCategory",
    "TransportMode",
    "MessageCode",
    "ClientSize",
    "Viewport",
    "StreamSession",
    "AppConfig",
    "AnimationSettings",
    "DisplaySettings",
    "TelnetSettings",
    "HttpSettings",
    "LoggingSettings",
]
