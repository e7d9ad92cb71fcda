"""
Stage Controller - The button-driven state machine for one hand.

A short press either speaks the prompt for the next street (prompt
stages) or runs the capture pipeline (await-photo stages):

    cue -> capture -> cache -> detect -> validate -> record ->
    analyze -> narrate -> advance (-> reset after the river)

A long press resets the hand from any stage, cancelling a pipeline that
is still running.

Failure handling:
- Wrong card count: retry prompt, only that street's cards are cleared,
  the stage stays put.
- Anything else: one spoken apology, hand and context reset.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING
import asyncio
import logging

from ..analysis.analyzer import HandAnalysis, HandAnalyzer
from ..errors import (
    AnalysisError,
    CaptureError,
    CoachError,
    DetectionError,
    NarrationError,
    ValidationMismatch,
)
from ..host.base import PhotoData
from ..narration.narrator import Narrator, VoiceSettings
from ..vision.detector import CardDetector
from ..vision.photo_cache import PhotoCache
from .state import Stage, Street

if TYPE_CHECKING:
    from ..session.registry import Session

logger = logging.getLogger(__name__)


PROMPTS: dict[Street, str] = {
    Street.HOLE: "Ready. Show me your hand and press the button again to take a photo.",
    Street.FLOP: "Show me the flop. Press again to take a photo.",
    Street.TURN: "Show me the turn. Press again to take a photo.",
    Street.RIVER: "Show me the river. Press again to take a photo.",
}
HOLD_STILL = "Stay still."
RETRY_PROMPT = (
    "I couldn't detect the expected number of cards. Please try taking the "
    "photo again, making sure all cards are clearly visible."
)
FAILURE_MESSAGE = "Sorry, there was an error analyzing your hand."


def probability_sentence(win_probability: float) -> str:
    return f"Your win probability is {int(win_probability + 0.5)} percent."


class PressKind(Enum):
    SHORT = "short"
    LONG = "long"


class PressOutcome(Enum):
    """What a button press ended up doing."""
    PROMPTED = "prompted"  # Spoke the street prompt, now awaiting a photo
    ADVANCED = "advanced"  # Street accepted and analyzed
    HAND_COMPLETE = "hand_complete"  # River analyzed, hand reset
    RETRY = "retry"  # Wrong card count, same stage
    FAILED = "failed"  # Pipeline error, hand reset
    RESET = "reset"  # Long press
    IGNORED = "ignored"  # Short press while a pipeline was running
    CANCELLED = "cancelled"  # Pipeline cancelled before it finished


@dataclass
class PressResult:
    """Result of handling one button press."""
    outcome: PressOutcome
    stage: Stage

    detected: list[str] = field(default_factory=list)
    analysis: HandAnalysis | None = None
    error: str | None = None


class StageController:
    """
    Drives sessions through the stage cycle.

    The controller is stateless across sessions; all hand state lives on
    the Session it is given.

    Usage:
        controller = StageController(detector, analyzer, photo_cache)
        result = await controller.on_button_press(session, "short")
    """

    def __init__(
        self,
        detector: CardDetector,
        analyzer: HandAnalyzer,
        photo_cache: PhotoCache,
        voice: VoiceSettings | None = None,
        chime_url: str = "",
        capture_timeout: float = 15.0,
        detect_timeout: float = 20.0,
        analyze_timeout: float = 60.0,
        speak_timeout: float = 30.0,
    ):
        self.detector = detector
        self.analyzer = analyzer
        self.photo_cache = photo_cache
        self.voice = voice or VoiceSettings()
        self.chime_url = chime_url
        self.capture_timeout = capture_timeout
        self.detect_timeout = detect_timeout
        self.analyze_timeout = analyze_timeout
        self.speak_timeout = speak_timeout

    def narrator_for(self, session: Session) -> Narrator:
        return Narrator(host=session.host, voice=self.voice, timeout=self.speak_timeout)

    # =========================================================================
    # Entry point
    # =========================================================================

    async def on_button_press(
        self,
        session: Session,
        press_kind: PressKind | str,
    ) -> PressResult:
        """
        Handle one button press for a session.

        Short presses are serialized per session: a press that arrives
        while a pipeline is running is ignored.
        """
        kind = PressKind(press_kind)

        if kind is PressKind.LONG:
            if session.cancel_pipeline():
                logger.warning("Long press detected - cancelling pipeline and resetting state.")
            else:
                logger.warning("Long press detected - resetting state.")
            session.reset_hand()
            return PressResult(PressOutcome.RESET, session.player_state.stage)

        if session.is_busy:
            logger.warning(
                "Button press ignored, pipeline still running at stage %s",
                session.player_state.stage.value,
            )
            return PressResult(PressOutcome.IGNORED, session.player_state.stage)

        task = asyncio.create_task(self._handle_short_press(session))
        session.pipeline_task = task
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            if session.pipeline_task is task:
                session.pipeline_task = None

        if task.cancelled():
            logger.info("Pipeline cancelled at stage %s", session.player_state.stage.value)
            return PressResult(PressOutcome.CANCELLED, session.player_state.stage)
        return task.result()

    async def _handle_short_press(self, session: Session) -> PressResult:
        state = session.player_state
        narrator = self.narrator_for(session)
        logger.info("Button pressed. Current stage: %s", state.stage.value)

        try:
            if not state.stage.is_awaiting_photo:
                await narrator.speak(PROMPTS[state.stage.street])
                state.advance()
                return PressResult(PressOutcome.PROMPTED, state.stage)

            return await self._run_pipeline(session, narrator, state.stage.street)

        except CoachError as e:
            logger.error("Error during stage %s: %s", state.stage.value, e)
            return await self._fail(session, narrator, e)
        except Exception as e:
            logger.exception("Unexpected error during stage %s", state.stage.value)
            return await self._fail(session, narrator, e)

    # =========================================================================
    # Capture pipeline
    # =========================================================================

    async def _run_pipeline(
        self,
        session: Session,
        narrator: Narrator,
        street: Street,
    ) -> PressResult:
        state = session.player_state

        await narrator.speak(HOLD_STILL)
        photo = await self._capture(session)
        stored = self.photo_cache.put(session.user_id, photo)
        logger.info("Photo captured for stage %s. ts=%s", street.value, stored.timestamp)

        if self.chime_url:
            await narrator.play(self.chime_url)

        detected = await self._detect(stored.request_id)
        logger.info("Detected %s cards: %s", street.value, detected)

        try:
            self._validate(street, detected)
        except ValidationMismatch as e:
            logger.warning(str(e))
            state.clear_street(street)
            await narrator.speak(RETRY_PROMPT)
            return PressResult(
                PressOutcome.RETRY, state.stage, detected=detected, error=str(e)
            )

        state.record(street, detected)

        analysis = await self._analyze(session)
        await narrator.speak(probability_sentence(analysis.win_probability))
        await narrator.speak(analysis.tip)

        previous = state.stage
        state.advance()
        logger.info("Advancing stage from %s to %s", previous.value, state.stage.value)

        if street is Street.RIVER:
            logger.info("Hand complete. Resetting state for session %s", session.session_id)
            session.reset_hand()
            return PressResult(
                PressOutcome.HAND_COMPLETE, state.stage, detected=detected, analysis=analysis
            )

        return PressResult(
            PressOutcome.ADVANCED, state.stage, detected=detected, analysis=analysis
        )

    def _validate(self, street: Street, detected: list[str]):
        if len(detected) != street.expected_cards:
            raise ValidationMismatch(street.value, street.expected_cards, len(detected))

    async def _capture(self, session: Session) -> PhotoData:
        try:
            return await asyncio.wait_for(session.host.request_photo(), self.capture_timeout)
        except asyncio.TimeoutError as e:
            raise CaptureError("Timed out waiting for photo") from e
        except CoachError:
            raise
        except Exception as e:
            raise CaptureError(f"Photo capture failed: {e}") from e

    async def _detect(self, request_id: str) -> list[str]:
        url = self.detector.photo_url(request_id)
        try:
            return await asyncio.wait_for(self.detector.detect(url), self.detect_timeout)
        except asyncio.TimeoutError as e:
            raise DetectionError("Timed out waiting for card detection") from e

    async def _analyze(self, session: Session) -> HandAnalysis:
        state = session.player_state
        try:
            return await asyncio.wait_for(
                self.analyzer.analyze(state.hole, state.board, session.context),
                self.analyze_timeout,
            )
        except asyncio.TimeoutError as e:
            raise AnalysisError("Timed out waiting for hand analysis") from e

    async def _fail(
        self,
        session: Session,
        narrator: Narrator,
        error: Exception,
    ) -> PressResult:
        """Abandon the hand and apologize."""
        session.reset_hand()
        try:
            await narrator.speak(FAILURE_MESSAGE)
        except NarrationError as e:
            logger.error("Could not speak failure message: %s", e)
        return PressResult(
            PressOutcome.FAILED, session.player_state.stage, error=str(error)
        )
