"""
Window size detection from raw client bytes.
"""

from nyancat.models.frame import ClientSize
from nyancat.telnet.negotiator import (
    DO,
    HANDSHAKE,
    IAC,
    NAWS,
    SB,
    SE,
    SGA,
    TTYPE,
    WILL,
    TelnetNegotiator,
    encode_naws,
    parse_window_size,
)


def naws(w1, w0, h1, h0, terminated=True) -> bytes:
    data = bytes([IAC, SB, NAWS, w1, w0, h1, h0])
    return data + bytes([IAC, SE]) if terminated else data


def test_handshake_bytes():
    assert HANDSHAKE == bytes([IAC, WILL, SGA, IAC, DO, TTYPE, IAC, DO, NAWS])
    assert HANDSHAKE == b"\xff\xfb\x03\xff\xfd\x18\xff\xfd\x1f"


def test_simple_report():
    assert parse_window_size(naws(0, 120, 0, 40)) == ClientSize(120, 40)


def test_big_endian_16_bit_values():
    assert parse_window_size(naws(1, 44, 0, 200)) == ClientSize(300, 200)


def test_report_after_option_replies():
    data = bytes([IAC, WILL, NAWS, IAC, WILL, TTYPE]) + naws(0, 100, 0, 30)
    assert parse_window_size(data) == ClientSize(100, 30)


def test_report_without_terminator():
    assert parse_window_size(naws(0, 80, 0, 24, terminated=False)) == ClientSize(80, 24)


def test_other_subnegotiation_is_skipped():
    ttype = bytes([IAC, SB, TTYPE, 0]) + b"xterm" + bytes([IAC, SE])
    assert parse_window_size(ttype + naws(0, 90, 0, 50)) == ClientSize(90, 50)


def test_unterminated_other_subnegotiation_hides_rest_of_buffer():
    ttype = bytes([IAC, SB, TTYPE, 0]) + b"xterm"
    assert parse_window_size(ttype) is None


def test_doubled_iac_in_payload():
    # Width 255 arrives as IAC IAC
    data = bytes([IAC, SB, NAWS, 0, IAC, IAC, 0, 24, IAC, SE])
    assert parse_window_size(data) == ClientSize(255, 24)


def test_undoubled_iac_in_payload():
    # Some clients send 255 as a single byte
    assert parse_window_size(naws(0, IAC, 0, 24)) == ClientSize(255, 24)
    assert parse_window_size(naws(0, 80, 0, IAC)) == ClientSize(80, 255)
    assert parse_window_size(naws(0, 80, 0, IAC, terminated=False)) == ClientSize(80, 255)


def test_truncated_payload_reports_nothing():
    assert parse_window_size(bytes([IAC, SB, NAWS, 0, 80, 0])) is None


def test_truncated_after_iac():
    assert parse_window_size(bytes([IAC])) is None
    assert parse_window_size(bytes([IAC, SB])) is None
    assert parse_window_size(bytes([IAC, SB, NAWS, 0, IAC])) is None


def test_plain_text_is_ignored():
    assert parse_window_size(b"hello\r\n") is None
    assert parse_window_size(b"") is None


def test_negotiator_keeps_last_values():
    negotiator = TelnetNegotiator()

    size = negotiator.parse(naws(0, 132, 0, 43))

    assert size == ClientSize(132, 43)
    assert (negotiator.width, negotiator.height) == (132, 43)

    assert negotiator.parse(b"no report") is None
    assert negotiator.width is None


def test_first_report_wins():
    data = naws(0, 100, 0, 30) + naws(0, 50, 0, 20)
    assert parse_window_size(data) == ClientSize(100, 30)


def test_encode_naws_doubles_iac():
    assert encode_naws(80, 24) == bytes([IAC, SB, NAWS, 0, 80, 0, 24, IAC, SE])
    assert encode_naws(255, 24) == bytes([IAC, SB, NAWS, 0, IAC, IAC, 0, 24, IAC, SE])


def test_encoded_report_parses_back():
    for width, height in [(80, 24), (255, 255), (65535, 1), (0, 0)]:
        assert parse_window_size(encode_naws(width, height)) == ClientSize(width, height)
