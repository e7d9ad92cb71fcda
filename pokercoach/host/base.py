"""
Host Session - The device primitives the coach runs on.

The host platform (smart glasses, a phone, a test double) provides:
- Photo capture
- Voice output and audio playback
- A way to stop whatever is currently playing

The coach never talks to hardware directly; everything goes through
this interface.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
import uuid


@dataclass(frozen=True)
class PhotoData:
    """
    A photo as delivered by the host camera.

    request_id is opaque and unique per capture.
    """
    data: bytes
    mime_type: str = "image/jpeg"
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    filename: str = ""

    @property
    def size(self) -> int:
        return len(self.data)


class HostSession(ABC):
    """
    Abstract base class for host device sessions.

    Implementations:
    - MockHostSession: Scripted photos, records audio calls
    - WebSocketHostSession: Device connected over the API WebSocket
    """

    @abstractmethod
    async def request_photo(self) -> PhotoData:
        """Capture a photo. Raises on failure."""
        pass

    @abstractmethod
    async def speak(self, text: str, options: dict[str, Any] | None = None):
        """Speak text, returning once the host accepted it."""
        pass

    @abstractmethod
    async def stop_audio(self):
        """Halt any in-progress playback."""
        pass

    async def play_audio(self, url: str, volume: float = 1.0):
        """Play a sound by URL. Hosts without playback may ignore this."""
        return None
