"""
Host Boundary - Camera and audio primitives provided by the device.
"""

from .base import HostSession, PhotoData
from .mock import MockHostSession
from .websocket import WebSocketHostSession

__all__ = [
    "HostSession",
    "PhotoData",
    "MockHostSession",
    "WebSocketHostSession",
]
