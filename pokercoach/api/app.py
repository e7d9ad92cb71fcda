"""
FastAPI Application - HTTP and WebSocket surface.

Endpoints:
    GET  /api/photo/{request_id}        Raw bytes of a cached photo (fetched by the classifier)
    GET  /api/latest-photo              Metadata of the most recent capture
    GET  /webview                       Browser preview of the latest capture
    GET  /api/v1/health                 Liveness and session count
    GET  /api/v1/sessions               Active sessions with their stage
    WS   /api/v1/sessions/{user_id}/ws  Device bridge (button presses, photos, audio)

Run with:
    uvicorn pokercoach.api.app:create_app --factory
"""

from __future__ import annotations
from typing import Optional, Union
import asyncio
import json
import logging
import uuid
from pathlib import Path

from fastapi import FastAPI, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.templating import Jinja2Templates

from .. import __version__
from ..config import Settings
from ..host.websocket import WebSocketHostSession
from .schemas import (
    ErrorResponse,
    HealthResponse,
    LatestPhotoResponse,
    SessionListResponse,
)
from .service import CoachService, press_result_message

logger = logging.getLogger(__name__)


TEMPLATES_DIR = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

WEBVIEW_POLL_MS = 1500


def create_app(
    service: CoachService | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional CoachService instance (built from settings if not provided)
        settings: Optional settings (read from the environment if not provided)

    Raises:
        ConfigurationError: No service given and the environment is incomplete
    """
    if service is None:
        service = CoachService(settings=settings or Settings.from_env())

    app = FastAPI(
        title="Poker Coach API",
        description="Photo-driven Texas Hold'em coaching with spoken feedback.",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )
    app.state.service = service

    def make_error_response(message: str, status_code: int = 404) -> JSONResponse:
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(error=message).model_dump(),
        )

    # =========================================================================
    # Photo routes
    # =========================================================================

    @app.get(
        "/api/photo/{request_id}",
        responses={404: {"model": ErrorResponse}},
        tags=["Photos"],
        summary="Raw bytes of a cached photo",
    )
    async def get_photo(
        request_id: str,
        user_id: Optional[str] = Query(default=None, description="Restrict to one owner"),
    ) -> Response:
        photo = service.photo(request_id, user_id=user_id)
        if photo is None:
            return make_error_response("Photo not found")
        return Response(
            content=photo.data,
            media_type=photo.mime_type,
            headers={"Cache-Control": "no-cache"},
        )

    @app.get(
        "/api/latest-photo",
        response_model=LatestPhotoResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Photos"],
        summary="Metadata of the most recent capture",
    )
    async def latest_photo(
        user_id: Optional[str] = Query(default=None, description="Restrict to one owner"),
    ) -> Union[LatestPhotoResponse, JSONResponse]:
        photo = service.latest_photo(user_id=user_id)
        if photo is None:
            return make_error_response("No photo available")
        return LatestPhotoResponse(
            requestId=photo.request_id,
            timestamp=photo.timestamp_ms,
            hasPhoto=True,
        )

    @app.get("/webview", response_class=HTMLResponse, tags=["Photos"])
    async def webview(request: Request) -> HTMLResponse:
        return templates.TemplateResponse(request, "webview.html", {
            "title": "Poker Coach",
            "latest_url": "/api/latest-photo",
            "photo_base": "/api/photo/",
            "poll_ms": WEBVIEW_POLL_MS,
        })

    # =========================================================================
    # v1 routes
    # =========================================================================

    @app.get("/api/v1/health", response_model=HealthResponse, tags=["System"])
    async def health() -> HealthResponse:
        return HealthResponse(
            version=__version__,
            package_name=service.settings.package_name,
            active_sessions=len(service.registry),
        )

    @app.get("/api/v1/sessions", response_model=SessionListResponse, tags=["Sessions"])
    async def list_sessions() -> SessionListResponse:
        sessions = service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    # =========================================================================
    # Device bridge
    # =========================================================================

    @app.websocket("/api/v1/sessions/{user_id}/ws")
    async def device_socket(websocket: WebSocket, user_id: str):
        """
        One connection is one session: connect starts it, disconnect ends it.

        Button presses run as background tasks so photos can keep arriving
        on the same socket while a pipeline waits for them.
        """
        await websocket.accept()
        session_id = str(uuid.uuid4())
        host = WebSocketHostSession(websocket)
        service.on_session(host, session_id, user_id)
        await websocket.send_json({"type": "session_started", "session_id": session_id})

        tasks: set[asyncio.Task] = set()

        async def handle_press(press_type: str):
            result = await service.on_button_press(session_id, press_type)
            if result is None:
                return
            try:
                await websocket.send_json(press_result_message(result).model_dump())
            except (WebSocketDisconnect, RuntimeError):
                logger.debug("Device gone before press result could be sent")

        async def send_error(message: str):
            await websocket.send_json({"type": "error", "error": message})

        try:
            while True:
                raw = await websocket.receive_text()
                try:
                    message = json.loads(raw)
                except json.JSONDecodeError:
                    await send_error("Invalid JSON")
                    continue
                if not isinstance(message, dict):
                    await send_error("Messages must be JSON objects")
                    continue

                kind = message.get("type")
                if kind == "button_press":
                    press_type = message.get("press_type", "short")
                    if press_type not in ("short", "long"):
                        await send_error(f"Unknown press_type: {press_type}")
                        continue
                    task = asyncio.create_task(handle_press(press_type))
                    tasks.add(task)
                    task.add_done_callback(tasks.discard)
                elif kind == "photo":
                    if not host.deliver_photo(message):
                        await send_error("No capture pending for this request_id")
                elif kind == "photo_error":
                    if not host.deliver_error(message):
                        await send_error("No capture pending for this request_id")
                else:
                    await send_error(f"Unknown message type: {kind}")
        except WebSocketDisconnect:
            pass
        finally:
            host.close()
            service.on_stop(session_id, reason="disconnected")
            for task in tasks:
                task.cancel()

    return app
