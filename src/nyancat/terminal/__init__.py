from .keyboard import ExitKeyListener
from .standalone import run_terminal, terminal_options, get_terminal_size, TerminalSink

__all__ = ["ExitKeyListener", "run_terminal", "terminal_options", "get_terminal_size", "TerminalSink"]
