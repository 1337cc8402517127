"""
FastAPI Application Factory

Assembles the HTTP transport:
- GET /            single page xterm.js client (static/index.html)
- GET /api/health  health check
- WS  /ws          frame streaming session (api.websocket)

The animation and stream options are stored on app.state so tests can build
an app around a tiny animation and a zero tick interval.
"""

from pathlib import Path
from typing import Optional, Sequence

from fastapi import FastAPI, WebSocket
from fastapi.responses import HTMLResponse

from nyancat import __version__
from nyancat.api.websocket import WebSocketFrameSession
from nyancat.engine.frame_streamer import StreamOptions
from nyancat.lifecycle.task_registry import TaskCategory, create_tracked_task
from nyancat.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.API)

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"


def create_app(
    animation: Sequence[Sequence[str]],
    options: Optional[StreamOptions] = None,
    frame_limit: Optional[int] = None,
    title: str = "nyancat",
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        animation: Frames to stream
        options: Rendering options shared by every websocket session
        frame_limit: Stop each session after this many frames (None = never)
        title: API title (shown in docs)

    Returns:
        Configured FastAPI application ready to run
    """
    app = FastAPI(title=title, version=__version__, docs_url=None, redoc_url=None)
    app.state.animation = animation
    app.state.stream_options = options or StreamOptions()
    app.state.frame_limit = frame_limit

    log.debug(f"Creating FastAPI app: {title} v{__version__}")

    # =========================================================================
    # Pages
    # =========================================================================

    @app.get("/", response_class=HTMLResponse, include_in_schema=False)
    async def index() -> HTMLResponse:
        """xterm.js client that connects back to /ws"""
        return HTMLResponse((STATIC_DIR / "index.html").read_text(encoding="utf-8"))

    @app.get("/api/health", tags=["System"], summary="Health check")
    async def health_check():
        """Simple health check endpoint for monitoring"""
        return {
            "status": "healthy",
            "service": "nyancat",
            "version": __version__,
            "frames": len(app.state.animation),
        }

    # =========================================================================
    # WebSocket Endpoints
    # =========================================================================

    # The WebSocket annotation is required, FastAPI answers 403 without it
    @app.websocket("/ws")
    async def websocket_frames(websocket: WebSocket):
        """Frame streaming session"""
        session = WebSocketFrameSession(
            websocket,
            app.state.animation,
            app.state.stream_options,
            frame_limit=app.state.frame_limit,
        )
        client = websocket.client
        peer = f"{client.host}:{client.port}" if client else "unknown"
        task = create_tracked_task(
            session.run(),
            category=TaskCategory.SESSION,
            description=f"WebSocket session {peer}"
        )
        await task

    log.debug("Routes registered: / , /api/health, /ws")

    return app
