"""
Tests for Narrator.
"""

import asyncio

import pytest

from ..errors import NarrationError
from ..host.mock import MockHostSession
from ..narration.narrator import Narrator, VoiceSettings


class RecordingHost(MockHostSession):
    """Keeps the options passed with each line."""

    def __init__(self):
        super().__init__()
        self.options = []

    async def speak(self, text, options=None):
        self.options.append(options)
        await super().speak(text, options)


class SlowHost(MockHostSession):
    async def speak(self, text, options=None):
        await asyncio.sleep(1)


class TestVoiceSettings:
    """Tests for the voice option payload."""

    def test_defaults(self):
        options = VoiceSettings().to_options()
        assert options["voice_id"] == "WdZjiN0nNcik2LBjOHiv"
        assert options["model_id"] == "eleven_flash_v2_5"
        assert options["voice_settings"] == {
            "stability": 0.4,
            "similarity_boost": 0.85,
            "style": 0.6,
            "speed": 0.95,
        }

    def test_custom_voice(self):
        options = VoiceSettings(voice_id="v1", model_id="m1").to_options()
        assert options["voice_id"] == "v1"
        assert options["model_id"] == "m1"
        assert "voice_id" not in options["voice_settings"]


class TestNarrator:
    """Tests for stop-then-speak and error wrapping."""

    def test_stop_before_speak(self):
        host = MockHostSession()
        narrator = Narrator(host=host)

        async def scenario():
            await narrator.speak("one")
            await narrator.speak("two")

        asyncio.run(scenario())
        assert host.calls == [
            ("stop", None), ("speak", "one"),
            ("stop", None), ("speak", "two"),
        ]

    def test_voice_options_forwarded(self):
        host = RecordingHost()
        narrator = Narrator(host=host, voice=VoiceSettings(voice_id="v1"))
        asyncio.run(narrator.speak("hello"))
        assert host.options[0]["voice_id"] == "v1"

    def test_play_does_not_stop(self):
        host = MockHostSession()
        narrator = Narrator(host=host)
        asyncio.run(narrator.play("https://sounds.test/chime.mp3"))
        assert host.calls == [("play", "https://sounds.test/chime.mp3")]

    def test_timeout_raises_narration_error(self):
        narrator = Narrator(host=SlowHost(), timeout=0.05)
        with pytest.raises(NarrationError, match="Timed out"):
            asyncio.run(narrator.speak("hello"))

    def test_host_error_raises_narration_error(self):
        host = MockHostSession(speak_error=ConnectionError("socket closed"))
        narrator = Narrator(host=host)
        with pytest.raises(NarrationError, match="socket closed"):
            asyncio.run(narrator.speak("hello"))
