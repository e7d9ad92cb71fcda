"""
Photo Cache - Most recent capture per owner.

The classifier is given a URL, not the bytes, so the latest photo has to
stay addressable until it fetches it. One slot per owner: storing a new
photo replaces the old one, there is no history and no expiry.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
import logging

from ..host.base import PhotoData

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredPhoto:
    """A cached photo. Immutable once stored."""
    request_id: str
    data: bytes
    mime_type: str
    timestamp: datetime
    owner_id: str
    filename: str = ""

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def timestamp_ms(self) -> int:
        return int(self.timestamp.timestamp() * 1000)


class PhotoCache:
    """
    In-memory single-slot photo store keyed by owner.

    Replacing the slot is a single dict assignment, so readers always see
    either the old photo or the new one.
    """

    def __init__(self):
        self._photos: dict[str, StoredPhoto] = {}

    def put(self, owner_id: str, photo: PhotoData) -> StoredPhoto:
        """Store a photo for an owner, replacing any previous one."""
        stored = StoredPhoto(
            request_id=photo.request_id,
            data=photo.data,
            mime_type=photo.mime_type,
            timestamp=photo.timestamp,
            owner_id=owner_id,
            filename=photo.filename,
        )
        self._photos[owner_id] = stored
        logger.debug("Photo cached. owner=%s ts=%s", owner_id, stored.timestamp)
        return stored

    def get(self, owner_id: str) -> StoredPhoto | None:
        return self._photos.get(owner_id)

    def get_by_request_id(self, owner_id: str, request_id: str) -> StoredPhoto | None:
        """The owner's photo, only if it is the one with this request id."""
        photo = self._photos.get(owner_id)
        if photo is None or photo.request_id != request_id:
            return None
        return photo

    def find_by_request_id(self, request_id: str) -> StoredPhoto | None:
        """Look a request id up across all owners."""
        for photo in list(self._photos.values()):
            if photo.request_id == request_id:
                return photo
        return None

    def latest(self) -> StoredPhoto | None:
        """Most recent capture across all owners."""
        photos = list(self._photos.values())
        if not photos:
            return None
        return max(photos, key=lambda p: p.timestamp)

    def discard(self, owner_id: str):
        self._photos.pop(owner_id, None)

    def __len__(self) -> int:
        return len(self._photos)
