"""
WebSocket frame streaming session.

Protocol (one JSON object per message, see api.schemas.message):

    server                          client
    {"code":0}            ───────►
                          ◄───────  {"code":1,"width":100,"height":30}
    {"code":1,"frame":…}  ───────►
    {"code":1,"frame":…}  ───────►  (every tick until either side closes)

States: INIT → STREAMING → CLOSED. In INIT anything but Ok-with-size or
Error is ignored. An Error message from the client, a message that is not
the schema, or a disconnect closes the session. A protocol violation is
answered with an Error message before the 1008 close.
"""

import asyncio
from enum import Enum, auto
from typing import Optional, Sequence

from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from nyancat.api.schemas.message import FrameMessage
from nyancat.engine.frame_streamer import FrameStreamer, StreamOptions
from nyancat.exceptions import ProtocolError
from nyancat.models.enums import MessageCode
from nyancat.models.frame import ClientSize, StreamSession
from nyancat.utils.logger import get_category_logger, LogCategory

log = get_category_logger(LogCategory.WEBSOCKET)

CLOSE_NORMAL = 1000
CLOSE_POLICY_VIOLATION = 1008


class SessionState(Enum):
    INIT = auto()
    STREAMING = auto()
    CLOSED = auto()


class WebSocketSink:
    """FrameSink sending each frame as an Ok message"""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket

    async def write(self, data: str) -> None:
        await self.websocket.send_text(FrameMessage.ok_frame(data).to_wire())

    @property
    def connected(self) -> bool:
        return (self.websocket.application_state == WebSocketState.CONNECTED
                and self.websocket.client_state != WebSocketState.DISCONNECTED)

    async def send_error(self) -> None:
        """Tell the client the session is being aborted."""
        if not self.connected:
            return
        try:
            await self.websocket.send_text(FrameMessage.error().to_wire())
        except (RuntimeError, OSError, WebSocketDisconnect) as e:
            log.debug("Could not send Error message", error=str(e))

    async def close(self, code: int = CLOSE_NORMAL) -> None:
        if not self.connected:
            return
        try:
            await self.websocket.close(code=code)
        except (RuntimeError, OSError) as e:
            # Peer vanished between the state check and the close frame
            log.debug("WebSocket already closed", error=str(e))


class WebSocketFrameSession:
    """
    One websocket connection: size handshake, then frame streaming.

    Two tasks run while streaming: the streamer (send side) and a receive
    loop. Whichever finishes first cancels the other.
    """

    def __init__(
        self,
        websocket: WebSocket,
        animation: Sequence[Sequence[str]],
        options: StreamOptions,
        frame_limit: Optional[int] = None
    ):
        self.websocket = websocket
        self.animation = animation
        self.options = options
        self.frame_limit = frame_limit
        self.sink = WebSocketSink(websocket)
        self.state = SessionState.INIT
        self.session: Optional[StreamSession] = None
        self.peer = "unknown"

    async def run(self) -> None:
        """Serve the connection until it is closed. Never raises connection errors."""
        await self.websocket.accept()
        if self.websocket.client:
            self.peer = f"{self.websocket.client.host}:{self.websocket.client.port}"
        log.info("WebSocket connection accepted", peer=self.peer)

        close_code = CLOSE_NORMAL
        try:
            await self.websocket.send_text(FrameMessage.init().to_wire())

            size = await self._await_size()
            if size is None:
                return

            self.state = SessionState.STREAMING
            self.session = StreamSession(client_size=size.clamped(), peer=self.peer,
                                         frame_limit=self.frame_limit)
            log.info("Streaming frames", peer=self.peer, size=str(size))
            await self._stream(self.session)

        except WebSocketDisconnect as e:
            log.info("WebSocket client disconnected", peer=self.peer, code=e.code)
        except ProtocolError as e:
            log.warn("Protocol error, closing session", peer=self.peer, error=str(e))
            close_code = CLOSE_POLICY_VIOLATION
            await self.sink.send_error()
        except (ConnectionError, OSError) as e:
            log.warn("WebSocket connection lost", peer=self.peer, error=f"{type(e).__name__}: {e}")
        finally:
            self.state = SessionState.CLOSED
            await self.sink.close(close_code)
            log.info("WebSocket session closed", peer=self.peer,
                     frames=self.session.ticks if self.session else 0)

    async def _receive_message(self) -> FrameMessage:
        """
        Receive and parse one client message.

        Raises:
            WebSocketDisconnect: client went away
            ProtocolError: binary frame or schema violation
        """
        message = await self.websocket.receive()
        if message["type"] == "websocket.disconnect":
            raise WebSocketDisconnect(code=message.get("code", CLOSE_NORMAL))

        text = message.get("text")
        if text is None:
            raise ProtocolError("Binary messages are not part of the protocol")
        return FrameMessage.from_wire(text)

    async def _await_size(self) -> Optional[ClientSize]:
        """INIT state: wait for Ok with width/height. None if the client sent Error."""
        while True:
            message = await self._receive_message()

            if message.code == MessageCode.ERROR:
                log.info("Client aborted session", peer=self.peer)
                return None

            if message.code == MessageCode.OK and message.has_size:
                return ClientSize(width=message.width, height=message.height)

            log.debug("Ignoring message while waiting for size", peer=self.peer,
                      code=message.code.name)

    async def _receive_loop(self) -> None:
        """STREAMING state: returns when the client sends Error."""
        while True:
            message = await self._receive_message()
            if message.code == MessageCode.ERROR:
                log.info("Client sent Error, closing session", peer=self.peer)
                return
            # Mid-session resize is not part of the protocol
            log.debug("Ignoring message while streaming", peer=self.peer,
                      code=message.code.name)

    async def _stream(self, session: StreamSession) -> None:
        streamer = FrameStreamer(self.animation, self.sink, self.options)
        send_task = asyncio.create_task(streamer.run(session))
        receive_task = asyncio.create_task(self._receive_loop())

        try:
            done, _ = await asyncio.wait(
                {send_task, receive_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (send_task, receive_task):
                if not task.done():
                    task.cancel()
            await asyncio.gather(send_task, receive_task, return_exceptions=True)

        for task in done:
            if not task.cancelled():
                task.result()
