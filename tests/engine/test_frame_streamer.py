import asyncio

import pytest

from conftest import ListSink, TINY_ANIMATION
from nyancat.engine.color_encoder import RESET, encode_row
from nyancat.engine.frame_streamer import (
    CLEAR_SCREEN,
    COUNTER_BACKGROUND,
    CURSOR_HOME,
    ERASE_TO_EOL,
    FrameStreamer,
    StreamOptions,
)
from nyancat.models.frame import ClientSize, StreamSession


def expected_frame(char: str, rows: int, cols: int, line_ending: str = "\n") -> str:
    return "".join(encode_row(char * cols) + RESET + line_ending for _ in range(rows))


# ---------------------------------------------------------------------------
# render()
# ---------------------------------------------------------------------------

def test_render_clears_then_draws_viewport(sink, fast_options):
    streamer = FrameStreamer(TINY_ANIMATION, sink, fast_options)
    session = StreamSession(client_size=ClientSize(12, 3))

    # 12 columns show all 6 art columns; 3 rows leave 2 for the frame
    assert streamer.render(session) == CLEAR_SCREEN + expected_frame(",", 2, 6)


def test_render_uses_current_frame_index(sink, fast_options):
    streamer = FrameStreamer(TINY_ANIMATION, sink, fast_options)
    session = StreamSession(client_size=ClientSize(12, 3), frame_index=2)

    assert streamer.render(session) == CLEAR_SCREEN + expected_frame("@", 2, 6)


def test_render_homes_cursor_when_not_clearing(sink):
    options = StreamOptions(tick_interval=0, clear_screen=False, home_cursor=True)
    streamer = FrameStreamer(TINY_ANIMATION, sink, options)

    output = streamer.render(StreamSession(client_size=ClientSize(12, 3)))

    assert output.startswith(CURSOR_HOME)
    assert CLEAR_SCREEN not in output


def test_render_no_prefix(sink):
    options = StreamOptions(tick_interval=0, clear_screen=False)
    streamer = FrameStreamer(TINY_ANIMATION, sink, options)

    output = streamer.render(StreamSession(client_size=ClientSize(12, 3)))

    assert output == expected_frame(",", 2, 6)


def test_render_telnet_line_ending(sink):
    options = StreamOptions(tick_interval=0, line_ending="\r\n")
    streamer = FrameStreamer(TINY_ANIMATION, sink, options)

    output = streamer.render(StreamSession(client_size=ClientSize(12, 3)))

    assert output == CLEAR_SCREEN + expected_frame(",", 2, 6, "\r\n")


def test_render_clips_small_client(sink, fast_options):
    streamer = FrameStreamer(TINY_ANIMATION, sink, fast_options)

    # 4 columns -> 2 art columns, 2 rows -> 1 frame row
    output = streamer.render(StreamSession(client_size=ClientSize(4, 2)))

    assert output == CLEAR_SCREEN + expected_frame(",", 1, 2)


def test_render_zero_size_client_sends_no_rows(sink, fast_options):
    streamer = FrameStreamer(TINY_ANIMATION, sink, fast_options)

    output = streamer.render(StreamSession(client_size=ClientSize(0, 0)))

    assert output == CLEAR_SCREEN


def test_render_counter_on_last_row(sink):
    options = StreamOptions(tick_interval=0, show_counter=True)
    streamer = FrameStreamer(TINY_ANIMATION, sink, options)

    output = streamer.render(StreamSession(client_size=ClientSize(12, 3)))

    frame = CLEAR_SCREEN + expected_frame(",", 2, 6)
    assert output.startswith(frame)
    counter = output[len(frame):]
    assert counter.startswith(COUNTER_BACKGROUND + "You have nyaned for ")
    assert counter.endswith(" seconds!" + RESET + ERASE_TO_EOL)


def test_counter_shows_one_decimal():
    session = StreamSession(client_size=ClientSize(80, 24))
    session.start_time -= 12.34

    assert "You have nyaned for 12.3 seconds!" in FrameStreamer.render_counter(session)


def test_empty_animation_rejected(sink):
    with pytest.raises(ValueError):
        FrameStreamer((), sink)


# ---------------------------------------------------------------------------
# run()
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_frame_limit_is_exact(sink, fast_options):
    streamer = FrameStreamer(TINY_ANIMATION, sink, fast_options)
    session = StreamSession(client_size=ClientSize(12, 3), frame_limit=5)

    ticks = await streamer.run(session)

    assert ticks == 5
    assert len(sink.writes) == 5
    assert session.frame_index == 5 % len(TINY_ANIMATION)


@pytest.mark.asyncio
async def test_frame_limit_zero_sends_nothing(sink, fast_options):
    streamer = FrameStreamer(TINY_ANIMATION, sink, fast_options)
    session = StreamSession(client_size=ClientSize(12, 3), frame_limit=0)

    assert await streamer.run(session) == 0
    assert sink.writes == []


@pytest.mark.asyncio
async def test_frames_cycle(sink, fast_options):
    streamer = FrameStreamer(TINY_ANIMATION, sink, fast_options)
    session = StreamSession(client_size=ClientSize(12, 3), frame_limit=4)

    await streamer.run(session)

    first, second, third, fourth = sink.writes
    assert len({first, second, third}) == 3
    assert fourth == first
    assert first == CLEAR_SCREEN + expected_frame(",", 2, 6)
    assert second == CLEAR_SCREEN + expected_frame(".", 2, 6)


@pytest.mark.asyncio
async def test_stop_event_ends_loop(fast_options):
    stop_event = asyncio.Event()

    def stop_after_two(s):
        if len(s.writes) == 2:
            stop_event.set()

    sink = ListSink(on_write=stop_after_two)
    streamer = FrameStreamer(TINY_ANIMATION, sink, fast_options)
    session = StreamSession(client_size=ClientSize(12, 3))

    ticks = await asyncio.wait_for(streamer.run(session, stop_event=stop_event), timeout=2)

    assert ticks == 2
    assert len(sink.writes) == 2


@pytest.mark.asyncio
async def test_stop_event_set_before_start(sink, fast_options):
    stop_event = asyncio.Event()
    stop_event.set()
    streamer = FrameStreamer(TINY_ANIMATION, sink, fast_options)

    ticks = await streamer.run(StreamSession(client_size=ClientSize(12, 3)), stop_event=stop_event)

    assert ticks == 0
    assert sink.writes == []


@pytest.mark.asyncio
async def test_sink_error_propagates(fast_options):
    sink = ListSink(fail_after=2)
    streamer = FrameStreamer(TINY_ANIMATION, sink, fast_options)
    session = StreamSession(client_size=ClientSize(12, 3))

    with pytest.raises(ConnectionResetError):
        await asyncio.wait_for(streamer.run(session), timeout=2)

    assert len(sink.writes) == 2
    assert session.ticks == 2


@pytest.mark.asyncio
async def test_resize_applied_each_tick(sink, fast_options):
    sizes = iter([ClientSize(12, 3), ClientSize(4, 2)])
    streamer = FrameStreamer(TINY_ANIMATION, sink, fast_options)
    session = StreamSession(client_size=ClientSize(80, 24), frame_limit=2)

    await streamer.run(session, resize=lambda: next(sizes))

    assert sink.writes[0] == CLEAR_SCREEN + expected_frame(",", 2, 6)
    assert sink.writes[1] == CLEAR_SCREEN + expected_frame(".", 1, 2)
    assert session.client_size == ClientSize(4, 2)


@pytest.mark.asyncio
async def test_cancellation_stops_streaming(sink):
    options = StreamOptions(tick_interval=0.01)
    streamer = FrameStreamer(TINY_ANIMATION, sink, options)
    task = asyncio.create_task(streamer.run(StreamSession(client_size=ClientSize(12, 3))))

    await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert sink.writes


@pytest.mark.asyncio
async def test_full_cycle_returns_to_first_frame(sink, fast_options):
    streamer = FrameStreamer(TINY_ANIMATION, sink, fast_options)
    session = StreamSession(client_size=ClientSize(12, 3), frame_limit=len(TINY_ANIMATION))

    await streamer.run(session)

    assert session.frame_index == 0
