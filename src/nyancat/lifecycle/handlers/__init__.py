from .api_server_shutdown_handler import APIServerShutdownHandler
from .telnet_server_shutdown_handler import TelnetServerShutdownHandler
from .session_cancellation_handler import SessionCancellationHandler
from .task_cancellation_handler import TaskCancellationHandler

__all__ = [
    "APIServerShutdownHandler",
    "TelnetServerShutdownHandler",
    "SessionCancellationHandler",
    "TaskCancellationHandler",
]
