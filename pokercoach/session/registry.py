"""
Session Registry - Per-connection coaching sessions.

LIFECYCLE:
1. Host connects -> session created with a fresh hand and context
2. Button presses drive the StageController against that session
3. Host disconnects -> any running pipeline is cancelled, session removed

Sessions are EPHEMERAL:
- In memory only, lost on restart
- Keyed by session id, never shared between users
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import asyncio
import logging
import time

from ..engine.state import PlayerState
from ..engine.context import ConversationContext
from ..host.base import HostSession

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """
    One connected host and the hand it is playing.

    pipeline_task is set while a capture pipeline runs; a session with a
    live pipeline is busy.
    """
    session_id: str
    user_id: str
    host: HostSession
    created_at: float = field(default_factory=time.time)

    player_state: PlayerState = field(default_factory=PlayerState)
    context: ConversationContext = field(default_factory=ConversationContext)

    pipeline_task: asyncio.Task | None = None

    # Free-form metadata (device info, etc.)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_busy(self) -> bool:
        return self.pipeline_task is not None and not self.pipeline_task.done()

    def reset_hand(self):
        """Start over from the hole cards with a fresh context."""
        self.player_state.reset()
        self.context.reset()

    def cancel_pipeline(self) -> bool:
        """Cancel the in-flight pipeline, if any. Returns True if one was cancelled."""
        if self.is_busy:
            self.pipeline_task.cancel()
            return True
        return False


class SessionRegistry:
    """
    Maps session ids to sessions.

    No persistence - sessions are in-memory only.
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def start(self, session_id: str, user_id: str, host: HostSession) -> Session:
        """
        Create a session. An existing session with the same id is ended
        and replaced.
        """
        if session_id in self._sessions:
            self.end(session_id, reason="replaced")

        session = Session(session_id=session_id, user_id=user_id, host=host)
        self._sessions[session_id] = session
        logger.info("Session started: %s (user %s)", session_id, user_id)
        return session

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def get_by_user(self, user_id: str) -> Session | None:
        """Most recently started session for a user."""
        matches = [s for s in self._sessions.values() if s.user_id == user_id]
        if not matches:
            return None
        return max(matches, key=lambda s: s.created_at)

    def end(self, session_id: str, reason: str = "stopped") -> Session | None:
        """
        Remove a session, cancelling its pipeline and clearing its hand.

        Returns the removed session, or None if it did not exist.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return None

        session.cancel_pipeline()
        session.reset_hand()
        logger.info(
            "Session stopped: %s (user %s). Reason: %s",
            session_id, session.user_id, reason,
        )
        return session

    def list_active(self) -> list[str]:
        return list(self._sessions.keys())

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions
