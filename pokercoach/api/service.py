"""
Coach Service - Wiring between the HTTP surface and the engine.

The service:
1. Builds the detector, analyzer and controller from settings
2. Starts and stops sessions as hosts connect and disconnect
3. Routes button presses to the controller
4. Answers photo lookups for the classifier and the preview page

This layer is framework-agnostic (FastAPI only lives in app.py).
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

import httpx

from ..config import Settings
from ..engine.controller import PressResult, StageController
from ..analysis.analyzer import HandAnalyzer
from ..host.base import HostSession
from ..narration.narrator import VoiceSettings
from ..session.registry import Session, SessionRegistry
from ..vision.detector import CardDetector
from ..vision.photo_cache import PhotoCache, StoredPhoto
from .schemas import PressResultMessage, SessionInfo

logger = logging.getLogger(__name__)


@dataclass
class CoachService:
    """
    Main service object, one per process.

    Usage:
        service = CoachService(settings=Settings.from_env())
        session = service.on_session(host, session_id, user_id)
        result = await service.on_button_press(session_id, "short")
    """
    settings: Settings
    photo_cache: PhotoCache = field(default_factory=PhotoCache)
    registry: SessionRegistry = field(default_factory=SessionRegistry)
    controller: StageController | None = None

    # Shared HTTP client for outbound calls (None: one client per request)
    http_client: httpx.AsyncClient | None = None

    def __post_init__(self):
        if self.controller is None:
            self.controller = self._build_controller()

    def _build_controller(self) -> StageController:
        s = self.settings
        detector = CardDetector(
            api_key=s.roboflow_api_key,
            public_url=s.public_url,
            model_url=s.roboflow_model_url,
            client=self.http_client,
            timeout=s.detect_timeout,
        )
        analyzer = HandAnalyzer(
            api_key=s.openai_api_key,
            model=s.analysis_model,
            url=s.analysis_url,
            client=self.http_client,
            timeout=s.analyze_timeout,
        )
        return StageController(
            detector=detector,
            analyzer=analyzer,
            photo_cache=self.photo_cache,
            voice=VoiceSettings(voice_id=s.voice_id, model_id=s.voice_model_id),
            chime_url=s.chime_url,
            capture_timeout=s.capture_timeout,
            detect_timeout=s.detect_timeout,
            analyze_timeout=s.analyze_timeout,
            speak_timeout=s.speak_timeout,
        )

    # =========================================================================
    # Session lifecycle
    # =========================================================================

    def on_session(self, host: HostSession, session_id: str, user_id: str) -> Session:
        return self.registry.start(session_id, user_id, host)

    def on_stop(self, session_id: str, reason: str = "stopped") -> bool:
        """
        End a session. The user's cached photo goes with their last session.
        """
        session = self.registry.end(session_id, reason=reason)
        if session is None:
            return False
        if self.registry.get_by_user(session.user_id) is None:
            self.photo_cache.discard(session.user_id)
        return True

    async def on_button_press(self, session_id: str, press_type: str) -> PressResult | None:
        """Handle a press for a session. None if the session does not exist."""
        session = self.registry.get(session_id)
        if session is None:
            logger.warning("Button press for unknown session %s", session_id)
            return None
        return await self.controller.on_button_press(session, press_type)

    # =========================================================================
    # Queries
    # =========================================================================

    def photo(self, request_id: str, user_id: str | None = None) -> StoredPhoto | None:
        if user_id is not None:
            return self.photo_cache.get_by_request_id(user_id, request_id)
        return self.photo_cache.find_by_request_id(request_id)

    def latest_photo(self, user_id: str | None = None) -> StoredPhoto | None:
        if user_id is not None:
            return self.photo_cache.get(user_id)
        return self.photo_cache.latest()

    def session_info(self, session: Session) -> SessionInfo:
        state = session.player_state
        return SessionInfo(
            session_id=session.session_id,
            user_id=session.user_id,
            stage=state.stage.value,
            hole=list(state.hole),
            board=list(state.board),
            busy=session.is_busy,
            context_length=len(session.context),
            created_at=session.created_at,
        )

    def list_sessions(self) -> list[SessionInfo]:
        return [
            self.session_info(self.registry.get(sid))
            for sid in self.registry.list_active()
        ]


def press_result_message(result: PressResult) -> PressResultMessage:
    return PressResultMessage(
        outcome=result.outcome.value,
        stage=result.stage.value,
        detected=result.detected,
        win_probability=result.analysis.win_probability if result.analysis else None,
        tip=result.analysis.tip if result.analysis else None,
        error=result.error,
    )
