"""
Mock Host - Scripted host session for tests and dry runs.

Photos are served from a queue; every audio call is recorded in order so
tests can assert on what was said and when audio was stopped.
"""

from __future__ import annotations
from typing import Any

from .base import HostSession, PhotoData


class MockHostSession(HostSession):
    """
    Host double.

    Usage:
        host = MockHostSession(photos=[PhotoData(data=b"...")])
        await host.request_photo()
        host.spoken  # ["Stay still.", ...]
    """

    def __init__(
        self,
        photos: list[PhotoData] | None = None,
        capture_error: Exception | None = None,
        speak_error: Exception | None = None,
    ):
        self.photos = list(photos or [])
        self.capture_error = capture_error
        self.speak_error = speak_error

        # Every audio call, in order: ("speak", text) / ("stop", None) / ("play", url)
        self.calls: list[tuple[str, Any]] = []
        self.captured: list[PhotoData] = []

    @property
    def spoken(self) -> list[str]:
        return [arg for kind, arg in self.calls if kind == "speak"]

    def queue_photo(self, photo: PhotoData | None = None):
        self.photos.append(photo or PhotoData(data=b"\xff\xd8mock-jpeg\xff\xd9"))

    async def request_photo(self) -> PhotoData:
        if self.capture_error is not None:
            raise self.capture_error
        photo = self.photos.pop(0) if self.photos else PhotoData(data=b"\xff\xd8mock-jpeg\xff\xd9")
        self.captured.append(photo)
        return photo

    async def speak(self, text: str, options: dict[str, Any] | None = None):
        if self.speak_error is not None:
            raise self.speak_error
        self.calls.append(("speak", text))

    async def stop_audio(self):
        self.calls.append(("stop", None))

    async def play_audio(self, url: str, volume: float = 1.0):
        self.calls.append(("play", url))
