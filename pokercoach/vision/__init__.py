"""
Vision Layer - Photo storage and card recognition.

Architecture:
    Host camera -> PhotoCache -> photo URL -> CardDetector -> card labels

The cache keeps the latest photo per owner addressable by request id so
the hosted classifier can fetch it back over HTTP.
"""

from .photo_cache import PhotoCache, StoredPhoto
from .detector import CardDetector, Prediction, DetectionResponse, unique_labels

__all__ = [
    "PhotoCache",
    "StoredPhoto",
    "CardDetector",
    "Prediction",
    "DetectionResponse",
    "unique_labels",
]
