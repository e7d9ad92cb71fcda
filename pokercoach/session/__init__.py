"""
Session Module - Manages ephemeral coaching sessions.

A session represents one connected device:
- Created when the host connects
- Holds the current hand (PlayerState) and the conversation context
- Destroyed when the host disconnects

Sessions are EPHEMERAL. Nothing is persisted.
"""

from .registry import SessionRegistry, Session

__all__ = [
    "SessionRegistry",
    "Session",
]
