"""
Analysis - Win probability and coaching tips.

The analysis model sees the whole hand so far (the conversation context),
so later-street tips build on earlier ones.
"""

from .prompts import SYSTEM_PROMPT, hand_summary, stage_label
from .analyzer import HandAnalyzer, HandAnalysis, clamp_probability

__all__ = [
    "SYSTEM_PROMPT",
    "hand_summary",
    "stage_label",
    "HandAnalyzer",
    "HandAnalysis",
    "clamp_probability",
]
