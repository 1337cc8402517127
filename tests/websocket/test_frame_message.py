import json

import pytest

from nyancat.api.schemas import FrameMessage
from nyancat.exceptions import ProtocolError
from nyancat.models.enums import MessageCode


def test_wire_codes():
    assert int(MessageCode.INIT) == 0
    assert int(MessageCode.OK) == 1
    assert int(MessageCode.ERROR) == 2


def test_init_message_has_code_only():
    assert json.loads(FrameMessage.init().to_wire()) == {"code": 0}


def test_error_message_has_code_only():
    assert json.loads(FrameMessage.error().to_wire()) == {"code": 2}


def test_frame_message_keeps_escape_text():
    frame = "\x1b[2J\x1b[1;1H\x1b[48;2;0;49;105m  \x1b[0m\r\n"

    wire = FrameMessage.ok_frame(frame).to_wire()

    assert json.loads(wire) == {"code": 1, "frame": frame}


def test_size_reply_parses():
    message = FrameMessage.from_wire('{"code": 1, "width": 100, "height": 30}')

    assert message.code == MessageCode.OK
    assert message.has_size
    assert (message.width, message.height) == (100, 30)
    assert message.frame is None


def test_ok_without_size_has_no_size():
    assert not FrameMessage.from_wire('{"code": 1}').has_size
    assert not FrameMessage.from_wire('{"code": 1, "width": 80}').has_size


@pytest.mark.parametrize("raw", [
    "",
    "[]",
    '{"code": 3}',
    '{"code": "ok"}',
    '{"code": 1, "width": 70000, "height": 1}',
    '{"code": 1, "height": -5, "width": 1}',
    '{"code": 1, "unknown": 1}',
])
def test_invalid_messages_raise_protocol_error(raw):
    with pytest.raises(ProtocolError):
        FrameMessage.from_wire(raw)
