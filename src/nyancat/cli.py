"""
Command line interface
"""

import argparse
from typing import List, Optional

from nyancat import __version__
from nyancat.models.enums import TransportMode


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nyancat",
        description="Nyancat !!! - in your terminal, over telnet or in a browser",
    )
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-t", "--telnet", action="store_true", help="Run as a telnet server")
    parser.add_argument("-H", "--http", action="store_true", help="Run as an HTTP/websocket server")
    parser.add_argument("-n", "--no-counter", action="store_true", help="Do not show the counter")
    parser.add_argument("-e", "--no-clear", action="store_true", help="Do not clear the screen")
    parser.add_argument(
        "-f", "--frames", type=_non_negative, default=None,
        help="Exit (or close each session) after this many frames"
    )
    parser.add_argument("-p", "--port", type=_port, default=None, help="Telnet server port (default: 23)")
    parser.add_argument("--host", default=None, help="Listen address for telnet/HTTP mode")
    parser.add_argument("--http-port", type=_port, default=None, help="HTTP server port (default: 3000)")
    parser.add_argument("-c", "--config", default=None, help="Path to a YAML config file")
    parser.add_argument(
        "--log-level", default=None, choices=["DEBUG", "INFO", "WARN", "ERROR"],
        type=str.upper, help="Minimum log level (default: INFO, or $NYANCAT_LOG)"
    )
    return parser


def _non_negative(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError("must be >= 0")
    return number


def _port(value: str) -> int:
    number = int(value)
    if not 0 <= number <= 65535:
        raise argparse.ArgumentTypeError("must be between 0 and 65535")
    return number


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def transport_mode(args: argparse.Namespace) -> TransportMode:
    """Telnet wins over HTTP; neither means the local terminal."""
    if args.telnet:
        return TransportMode.TELNET
    if args.http:
        return TransportMode.HTTP
    return TransportMode.TERMINAL
