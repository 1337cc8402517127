from .negotiator import TelnetNegotiator, parse_window_size, encode_naws, HANDSHAKE
from .server import TelnetServer, TelnetSink

__all__ = [
    "TelnetNegotiator",
    "parse_window_size",
    "encode_naws",
    "HANDSHAKE",
    "TelnetServer",
    "TelnetSink",
]
