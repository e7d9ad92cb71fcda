"""
API Module - Device and browser interface.

Exposes the coach over HTTP:
1. Serves cached photos so the hosted classifier can fetch them
2. Shows the latest capture in a browser preview
3. Bridges devices over a WebSocket (button presses in, speech out)

All state is session-scoped. No accounts, no persistence.
"""

from .schemas import (
    LatestPhotoResponse,
    ErrorResponse,
    HealthResponse,
    SessionInfo,
    SessionListResponse,
    PressResultMessage,
)
from .service import CoachService, press_result_message
from .app import create_app

__all__ = [
    "LatestPhotoResponse",
    "ErrorResponse",
    "HealthResponse",
    "SessionInfo",
    "SessionListResponse",
    "PressResultMessage",
    "CoachService",
    "press_result_message",
    "create_app",
]
