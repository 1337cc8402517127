"""
Telnet transport

One asyncio task per connection: handshake, window size negotiation, then
the frame loop. A second task keeps reading the client so EOF ends the
session and later NAWS reports resize it.
"""

import asyncio
from typing import Optional, Sequence, Tuple

from nyancat.engine.frame_streamer import FrameStreamer, StreamOptions
from nyancat.lifecycle.task_registry import TaskCategory, create_tracked_task
from nyancat.models.config import TelnetSettings
from nyancat.models.frame import ClientSize, StreamSession
from nyancat.telnet.negotiator import HANDSHAKE, TelnetNegotiator
from nyancat.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.TELNET)

READ_SIZE = 1024


def format_peer(peername) -> str:
    if isinstance(peername, tuple) and len(peername) >= 2:
        return f"{peername[0]}:{peername[1]}"
    return str(peername) if peername else "unknown"


class TelnetSink:
    """FrameSink over an asyncio StreamWriter"""

    def __init__(self, writer: asyncio.StreamWriter):
        self.writer = writer

    async def write(self, data: str) -> None:
        self.writer.write(data.encode("utf-8"))
        await self.writer.drain()

    async def close(self) -> None:
        if self.writer.is_closing():
            return
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except (ConnectionError, OSError) as e:
            log.debug("Error while closing connection", error=str(e))


class TelnetServer:
    """
    Raw TCP telnet server streaming the animation.

    Example:
        server = TelnetServer(FRAMES, config.telnet, StreamOptions(line_ending="\\r\\n"))
        await server.start()
        await server.serve_forever()
    """

    def __init__(
        self,
        animation: Sequence[Sequence[str]],
        settings: TelnetSettings,
        options: Optional[StreamOptions] = None,
        frame_limit: Optional[int] = None
    ):
        self.animation = animation
        self.settings = settings
        self.options = options or StreamOptions(line_ending=settings.line_ending)
        self.frame_limit = frame_limit
        self._server: Optional[asyncio.AbstractServer] = None

    @property
    def default_size(self) -> ClientSize:
        return ClientSize(self.settings.default_width, self.settings.default_height)

    @property
    def address(self) -> Tuple[str, int]:
        """(host, port) actually bound - port 0 resolves to the real port."""
        if self._server is None or not self._server.sockets:
            return (self.settings.host, self.settings.port)
        sockname = self._server.sockets[0].getsockname()
        return (sockname[0], sockname[1])

    # === Lifecycle ===

    async def start(self) -> None:
        """
        Bind the listening socket.

        Raises:
            OSError: address in use, permission denied (port 23 needs root)...
        """
        self._server = await asyncio.start_server(
            self._on_connect, self.settings.host, self.settings.port
        )
        host, port = self.address
        log.info(f"Telnet server running on {host}:{port}")

    async def serve_forever(self) -> None:
        if self._server is None:
            await self.start()
        await self._server.serve_forever()

    async def stop(self) -> None:
        """
        Close the listening socket. Open sessions are left running; they are
        cancelled separately (SessionCancellationHandler).
        """
        if self._server is None:
            return
        # close() releases the port immediately; wait_closed() would also
        # wait for every open session on Python 3.12+
        self._server.close()
        self._server = None
        log.info("Telnet server stopped")

    # === Sessions ===

    def _on_connect(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        peer = format_peer(writer.get_extra_info("peername"))
        create_tracked_task(
            self.handle_client(reader, writer),
            category=TaskCategory.SESSION,
            description=f"Telnet session {peer}"
        )

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> int:
        """
        Serve one connection until it closes, is cancelled or hits the frame limit.

        Connection errors end this session only; they are logged, never raised.

        Returns:
            Number of frames sent
        """
        peer = format_peer(writer.get_extra_info("peername"))
        sink = TelnetSink(writer)
        session: Optional[StreamSession] = None
        log.info("New telnet connection", peer=peer)

        try:
            writer.write(HANDSHAKE)
            await writer.drain()

            size = await self.negotiate(reader, peer)
            session = StreamSession(client_size=size, peer=peer, frame_limit=self.frame_limit)
            await self._stream(reader, sink, session)

        except (ConnectionError, OSError) as e:
            log.warn("Telnet connection lost", peer=peer, error=f"{type(e).__name__}: {e}")
        except asyncio.CancelledError:
            log.debug("Telnet session cancelled", peer=peer)
            raise
        finally:
            await sink.close()
            log.info("Telnet client disconnected", peer=peer,
                     frames=session.ticks if session else 0)

        return session.ticks if session else 0

    async def negotiate(self, reader: asyncio.StreamReader, peer: str) -> ClientSize:
        """
        Read client replies until a NAWS report arrives.

        Gives up after negotiation_attempts reads, or when a read times out,
        and falls back to the default size.

        Raises:
            ConnectionResetError: client closed the connection
        """
        negotiator = TelnetNegotiator()

        for attempt in range(self.settings.negotiation_attempts):
            try:
                data = await asyncio.wait_for(
                    reader.read(READ_SIZE), timeout=self.settings.negotiation_timeout
                )
            except asyncio.TimeoutError:
                log.debug("Negotiation read timed out", peer=peer, attempt=attempt + 1)
                break

            if not data:
                raise ConnectionResetError("client closed during negotiation")

            size = negotiator.parse(data)
            if size is not None:
                log.info("Client window size negotiated", peer=peer, size=str(size))
                return size

        log.info("No window size reported, using default", peer=peer, size=str(self.default_size))
        return self.default_size

    async def _stream(self, reader: asyncio.StreamReader, sink: TelnetSink, session: StreamSession) -> None:
        streamer = FrameStreamer(self.animation, sink, self.options)
        stream_task = asyncio.create_task(streamer.run(session))
        watch_task = asyncio.create_task(self._watch_client(reader, session))

        try:
            done, pending = await asyncio.wait(
                {stream_task, watch_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (stream_task, watch_task):
                if not task.done():
                    task.cancel()
            await asyncio.gather(stream_task, watch_task, return_exceptions=True)

        # Surface connection errors from whichever side finished first
        for task in done:
            if not task.cancelled():
                task.result()

    async def _watch_client(self, reader: asyncio.StreamReader, session: StreamSession) -> None:
        """Read until EOF, applying any later window size report."""
        negotiator = TelnetNegotiator()
        while True:
            data = await reader.read(READ_SIZE)
            if not data:
                log.debug("Client closed connection", peer=session.peer)
                return

            size = negotiator.parse(data)
            if size is not None and size != session.client_size:
                log.debug("Client resized", peer=session.peer, size=str(size))
                session.client_size = size
