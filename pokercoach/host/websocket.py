"""
WebSocket Host - A device driving a session over the API WebSocket.

Server -> device:
    {"type": "speak", "text": "...", "voice": {...}}
    {"type": "stop_audio"}
    {"type": "play_audio", "url": "...", "volume": 0.8}
    {"type": "request_photo", "request_id": "..."}

Device -> server (routed here by the API layer):
    {"type": "photo", "request_id": "...", "mime_type": "image/jpeg", "data": "<base64>"}
    {"type": "photo_error", "request_id": "...", "error": "..."}
"""

from __future__ import annotations
from typing import Any
import asyncio
import base64
import binascii
import logging
import uuid

from ..errors import CaptureError
from .base import HostSession, PhotoData

logger = logging.getLogger(__name__)


class WebSocketHostSession(HostSession):
    """
    Host session backed by a connected WebSocket.

    Capture is a round trip: a request_photo message goes out and the
    call waits until the device answers with the matching request id.
    """

    def __init__(self, websocket: Any):
        self.websocket = websocket
        self._pending: dict[str, asyncio.Future] = {}

    async def request_photo(self) -> PhotoData:
        request_id = str(uuid.uuid4())
        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        try:
            await self.websocket.send_json({"type": "request_photo", "request_id": request_id})
            return await future
        finally:
            self._pending.pop(request_id, None)

    async def speak(self, text: str, options: dict[str, Any] | None = None):
        await self.websocket.send_json({"type": "speak", "text": text, "voice": options or {}})

    async def stop_audio(self):
        await self.websocket.send_json({"type": "stop_audio"})

    async def play_audio(self, url: str, volume: float = 1.0):
        await self.websocket.send_json({"type": "play_audio", "url": url, "volume": volume})

    def _pending_for(self, message: dict[str, Any]) -> asyncio.Future | None:
        """The capture still waiting on this message, if any."""
        request_id = message.get("request_id")
        if not isinstance(request_id, str):
            return None
        future = self._pending.get(request_id)
        if future is None or future.done():
            return None
        return future

    def deliver_photo(self, message: dict[str, Any]) -> bool:
        """
        Resolve a pending capture with a photo message.

        Returns False when no capture is waiting for that request id.
        """
        future = self._pending_for(message)
        if future is None:
            logger.warning("Unexpected photo for request %s", message.get("request_id"))
            return False

        try:
            data = base64.b64decode(message["data"], validate=True)
        except (KeyError, TypeError, binascii.Error) as e:
            future.set_exception(CaptureError(f"Invalid photo payload: {e}"))
            return True

        mime_type = message.get("mime_type")
        filename = message.get("filename")
        future.set_result(PhotoData(
            data=data,
            mime_type=mime_type if isinstance(mime_type, str) and mime_type else "image/jpeg",
            request_id=message["request_id"],
            filename=filename if isinstance(filename, str) else "",
        ))
        return True

    def deliver_error(self, message: dict[str, Any]) -> bool:
        future = self._pending_for(message)
        if future is None:
            return False
        error = message.get("error") or "Device failed to capture photo"
        future.set_exception(CaptureError(str(error)))
        return True

    def close(self):
        """Fail any capture still waiting; the device is gone."""
        for future in self._pending.values():
            if not future.done():
                future.set_exception(CaptureError("Host disconnected"))
        self._pending.clear()
