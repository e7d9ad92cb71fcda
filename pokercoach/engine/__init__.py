"""
Engine - Stage progression for a coached hand.

The engine:
1. Tracks where the hand is (Stage) and what has been seen (PlayerState)
2. Accumulates the analysis conversation for the hand
3. Turns button presses into prompts, captures and analyses
"""

from .state import Stage, Street, PlayerState, NEXT_STAGE, EXPECTED_CARDS
from .context import ConversationContext, Message, Role
from .controller import StageController, PressKind, PressOutcome, PressResult

__all__ = [
    "Stage",
    "Street",
    "PlayerState",
    "NEXT_STAGE",
    "EXPECTED_CARDS",
    "ConversationContext",
    "Message",
    "Role",
    "StageController",
    "PressKind",
    "PressOutcome",
    "PressResult",
]
