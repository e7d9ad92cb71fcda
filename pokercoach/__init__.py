"""
Poker Coach - Photo-driven Texas Hold'em coaching engine.

At each street of a hand the player photographs the cards, a vision
classifier identifies them, an analysis model estimates the win
probability and writes a short tip, and the result is read aloud.

The package provides:
- Stage progression (one state machine per session)
- Card detection and hand analysis clients
- Narration with stop-then-speak ordering
- A FastAPI surface for photo serving and device sessions
"""

__version__ = "0.1.0"
