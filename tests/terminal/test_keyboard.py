import asyncio
import io
import os
import pty
import termios

import pytest

from nyancat.terminal.keyboard import ExitKeyListener


def listener_with(buffer: str) -> ExitKeyListener:
    listener = ExitKeyListener(on_exit=lambda: None, stream=io.StringIO())
    listener._buffer = buffer
    return listener


@pytest.mark.parametrize("key", ["q", "Q"])
def test_quit_keys(key):
    assert listener_with(key).process_buffer()


def test_other_keys_are_consumed():
    listener = listener_with("abc ")

    assert not listener.process_buffer()
    assert listener._buffer == ""


def test_key_after_noise_still_exits():
    assert listener_with("xyzq").process_buffer()


@pytest.mark.parametrize("sequence", ["\x1b[A", "\x1b[B", "\x1b[C", "\x1b[D"])
def test_arrow_keys_are_not_escape(sequence):
    listener = listener_with(sequence)

    assert not listener.process_buffer()
    assert not listener.flush_pending_escape()


def test_incomplete_sequence_waits_for_more_input():
    listener = listener_with("\x1b[")

    assert not listener.process_buffer()
    assert listener._buffer == "\x1b["

    listener._buffer += "A"
    assert not listener.process_buffer()
    assert listener._buffer == ""


def test_lone_escape_exits_after_quiet_poll():
    listener = listener_with("\x1b")

    # Could still become ESC [ X
    assert not listener.process_buffer()
    assert listener.flush_pending_escape()
    assert listener._buffer == ""


def test_escape_followed_by_other_key_exits():
    assert listener_with("\x1bx").process_buffer()


def test_flush_without_escape():
    assert not listener_with("").flush_pending_escape()


@pytest.mark.asyncio
async def test_run_returns_when_stdin_is_not_a_tty():
    calls = []
    listener = ExitKeyListener(on_exit=lambda: calls.append(True), stream=io.StringIO("q"))

    await listener.run()

    assert calls == []


# ---------------------------------------------------------------------------
# run() on a pseudo terminal
# ---------------------------------------------------------------------------

@pytest.fixture
def pty_pair():
    """(master fd, slave stream): writes to master arrive as typed keys."""
    master, slave = pty.openpty()
    stream = os.fdopen(slave, "r")
    yield master, stream
    stream.close()
    os.close(master)


async def start_listener(stream):
    exits = []
    listener = ExitKeyListener(on_exit=lambda: exits.append(True), stream=stream,
                               poll_interval=0.01)
    task = asyncio.create_task(listener.run())
    await asyncio.sleep(0.05)
    return exits, task


@pytest.mark.asyncio
async def test_arrow_key_on_tty_does_not_exit(pty_pair):
    master, stream = pty_pair
    exits, task = await start_listener(stream)

    os.write(master, b"\x1b[A")
    await asyncio.sleep(0.3)

    assert exits == []
    assert not task.done()

    os.write(master, b"q")
    await asyncio.wait_for(task, timeout=2)

    assert exits == [True]


@pytest.mark.asyncio
async def test_pasted_keys_on_tty_exit(pty_pair):
    master, stream = pty_pair
    exits, task = await start_listener(stream)

    os.write(master, b"xq")
    await asyncio.wait_for(task, timeout=2)

    assert exits == [True]


@pytest.mark.asyncio
async def test_lone_escape_on_tty_exits(pty_pair):
    master, stream = pty_pair
    exits, task = await start_listener(stream)

    os.write(master, b"\x1b")
    await asyncio.wait_for(task, timeout=2)

    assert exits == [True]


@pytest.mark.asyncio
async def test_cancel_restores_tty_settings(pty_pair):
    master, stream = pty_pair
    before = termios.tcgetattr(stream.fileno())
    exits, task = await start_listener(stream)

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert exits == []
    assert termios.tcgetattr(stream.fileno()) == before
