from .main import create_app
from .websocket import WebSocketFrameSession, WebSocketSink, SessionState

__all__ = ["create_app", "WebSocketFrameSession", "WebSocketSink", "SessionState"]
