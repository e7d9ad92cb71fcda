"""
Narrator - Voice output with stop-then-speak ordering.

Every line is preceded by a stop of whatever is playing, so at most one
stream is audible and stale prompts are never queued behind new ones.
"""

from __future__ import annotations
from dataclasses import asdict, dataclass, field
from typing import Any
import asyncio
import logging

from ..errors import NarrationError
from ..host.base import HostSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoiceSettings:
    """Voice options forwarded to the host's speech primitive."""
    voice_id: str = "WdZjiN0nNcik2LBjOHiv"
    model_id: str = "eleven_flash_v2_5"
    stability: float = 0.4
    similarity_boost: float = 0.85
    style: float = 0.6
    speed: float = 0.95

    def to_options(self) -> dict[str, Any]:
        options = asdict(self)
        return {
            "voice_id": options.pop("voice_id"),
            "model_id": options.pop("model_id"),
            "voice_settings": options,
        }


@dataclass
class Narrator:
    """
    Speaks through a host session.

    Both primitives are bounded by `timeout`; a timeout or a host failure
    becomes NarrationError.
    """
    host: HostSession
    voice: VoiceSettings = field(default_factory=VoiceSettings)
    timeout: float = 30.0

    async def speak(self, text: str):
        """Stop current audio, then speak."""
        await self.stop_audio()
        logger.debug("Speaking: %s", text)
        await self._bounded(self.host.speak(text, self.voice.to_options()), "speak")

    async def stop_audio(self):
        await self._bounded(self.host.stop_audio(), "stop audio")

    async def play(self, url: str, volume: float = 0.8):
        """Play a sound effect without interrupting anything."""
        await self._bounded(self.host.play_audio(url, volume), "play audio")

    async def _bounded(self, call, what: str):
        try:
            return await asyncio.wait_for(call, self.timeout)
        except asyncio.TimeoutError as e:
            raise NarrationError(f"Timed out trying to {what}") from e
        except NarrationError:
            raise
        except Exception as e:
            raise NarrationError(f"Failed to {what}: {e}") from e
