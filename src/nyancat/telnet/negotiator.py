"""
Telnet option negotiation

Only what is needed to learn the client's window size: the server announces
WILL SGA, DO TTYPE, DO NAWS and then scans client bytes for a NAWS
sub-negotiation (RFC 1073). Everything else is skipped.
"""

from typing import Optional, Tuple

from nyancat.models.frame import ClientSize

# Commands
IAC = 255   # Interpret As Command
DONT = 254
DO = 253
WONT = 252
WILL = 251
SB = 250    # Sub-negotiation begin
SE = 240    # Sub-negotiation end

# Options
SGA = 3     # Suppress Go Ahead
TTYPE = 24  # Terminal type
NAWS = 31   # Negotiate About Window Size

HANDSHAKE = bytes([
    IAC, WILL, SGA,
    IAC, DO, TTYPE,
    IAC, DO, NAWS,
])

NAWS_PAYLOAD_LENGTH = 4


class TelnetNegotiator:
    """
    Scans one read's worth of client bytes for a window size report.

    Rules, left to right:
    - IAC SB NAWS w1 w0 h1 h0: window size found, reported immediately
      without waiting for the IAC SE terminator. A 255 payload byte counts
      once whether it arrives doubled (IAC IAC) or as a single IAC.
    - IAC SB <other option> ...: payload skipped up to and including IAC SE,
      or to the end of the buffer when the terminator is not in this read.
    - IAC <command> <option>: skipped as a 3-byte unit.
    - Anything else: skipped one byte at a time.

    A sequence truncated by the end of the buffer ends the scan; nothing is
    ever read past the buffer and no partial size is reported.

    Example:
        negotiator = TelnetNegotiator()
        negotiator.parse(bytes([IAC, SB, NAWS, 0, 120, 0, 40, IAC, SE]))
        # ClientSize(width=120, height=40)
    """

    def __init__(self) -> None:
        self._data = b""
        self._pos = 0
        self.width: Optional[int] = None
        self.height: Optional[int] = None

    def parse(self, data: bytes) -> Optional[ClientSize]:
        """
        Look for a NAWS report in data.

        Returns:
            ClientSize when a complete NAWS payload was found, None otherwise
        """
        self._data = data
        self._pos = 0
        self.width = None
        self.height = None

        size = len(data)
        while self._pos < size:
            if data[self._pos] != IAC:
                self._pos += 1
                continue

            if self._pos + 1 >= size:
                break
            command = data[self._pos + 1]

            if command != SB:
                self._pos += 3
                continue

            if self._pos + 2 >= size:
                break
            option = data[self._pos + 2]
            self._pos += 3

            if option == NAWS:
                values = self._read_payload(NAWS_PAYLOAD_LENGTH)
                if values is None:
                    break
                self.width = (values[0] << 8) | values[1]
                self.height = (values[2] << 8) | values[3]
                return ClientSize(width=self.width, height=self.height)

            self._skip_subnegotiation()

        return None

    def _read_payload(self, count: int) -> Optional[Tuple[int, ...]]:
        """
        Read count payload bytes; None if truncated.

        IAC IAC counts as one 255 byte. Clients that send 255 undoubled are
        accepted too: a lone IAC is taken as the raw value.
        """
        data = self._data
        values = []
        pos = self._pos
        while len(values) < count:
            if pos >= len(data):
                return None
            value = data[pos]
            if value == IAC and pos + 1 < len(data) and data[pos + 1] == IAC:
                pos += 1
            values.append(value)
            pos += 1
        self._pos = pos
        return tuple(values)

    def _skip_subnegotiation(self) -> None:
        """Move past the next IAC SE, or to the end of the buffer."""
        data = self._data
        while self._pos + 1 < len(data):
            if data[self._pos] == IAC and data[self._pos + 1] == SE:
                self._pos += 2
                return
            self._pos += 1
        self._pos = len(data)


def parse_window_size(data: bytes) -> Optional[ClientSize]:
    """Convenience wrapper: TelnetNegotiator().parse(data)"""
    return TelnetNegotiator().parse(data)


def encode_naws(width: int, height: int) -> bytes:
    """Client side NAWS report, as a telnet client would send it."""
    payload = bytearray()
    for value in (width >> 8, width & 0xFF, height >> 8, height & 0xFF):
        payload.append(value)
        if value == IAC:
            payload.append(IAC)
    return bytes([IAC, SB, NAWS]) + bytes(payload) + bytes([IAC, SE])
