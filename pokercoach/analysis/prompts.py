"""
Analysis Prompts - Text sent to the analysis model.

The system prompt fixes the task and the reply format. The per-street
user message summarizes the hand so far.
"""

SYSTEM_PROMPT = (
    "You are a intelligent poker assistant for new players. "
    "The user will give you a Texas Hold'em hand and optionally the flop, turn, or river, "
    "depending on the phase of the game. "
    "You will analyze the hand and return a JSON object with the win probability "
    "and a one-sentence tip. "
    "The win probability should be a number between 0 and 100, inclusive. "
    "The tip should be easy to understand for a beginner poker player. "
    "Format the tip for a beginner, and seek to teach in addition to provide advice. "
    "Do not simply repeat the Win Probability. "
    "There are always 4 players at the table. "
    "Return only a raw JSON object. Do not include any markdown, code block, or explanation. "
    "Do not use emojis or special characters."
)

REPLY_FORMAT = (
    'Return a JSON object in the format: '
    '{win_probability: number (0-100), tip: "A one-sentence tip to be read aloud to the player."}'
)

# Board size -> stage label
STAGE_LABELS = {
    0: "pre-flop",
    3: "flop",
    4: "turn",
    5: "river",
}


def stage_label(board: list[str]) -> str | None:
    """Stage name for a board, or None for an impossible board size."""
    return STAGE_LABELS.get(len(board))


def hand_summary(hole: list[str], board: list[str]) -> str:
    """User message describing the hand at the current stage."""
    text = f"Stage: {stage_label(board)}. My hand is {' and '.join(hole)}."
    if board:
        text += f" Community cards: {', '.join(board)}."
    return f"{text} {REPLY_FORMAT}"
