"""
Narration - Spoken prompts and results.
"""

from .narrator import Narrator, VoiceSettings

__all__ = [
    "Narrator",
    "VoiceSettings",
]
