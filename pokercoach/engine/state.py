"""
Player State - Stages, streets and the per-session hand record.

The stage cycle alternates between a prompt stage and its paired
await-photo stage:

    HOLE -> AWAIT_HOLE_PHOTO -> FLOP -> AWAIT_FLOP_PHOTO ->
    TURN -> AWAIT_TURN_PHOTO -> RIVER -> AWAIT_RIVER_PHOTO -> HOLE

Hole cards are only ever overwritten. The board is overwritten at the
flop and only grows afterwards (3, then 4, then 5 cards).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum


class Street(Enum):
    """One betting stage of the hand."""
    HOLE = "hole"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"

    @property
    def expected_cards(self) -> int:
        """Cards a photo must show at this street (cumulative for the board)."""
        return EXPECTED_CARDS[self]

    @property
    def is_board(self) -> bool:
        return self is not Street.HOLE


EXPECTED_CARDS: dict[Street, int] = {
    Street.HOLE: 2,
    Street.FLOP: 3,
    Street.TURN: 4,
    Street.RIVER: 5,
}


class Stage(Enum):
    """Position in the stage cycle."""
    HOLE = "hole"
    AWAIT_HOLE_PHOTO = "await_hole_photo"
    FLOP = "flop"
    AWAIT_FLOP_PHOTO = "await_flop_photo"
    TURN = "turn"
    AWAIT_TURN_PHOTO = "await_turn_photo"
    RIVER = "river"
    AWAIT_RIVER_PHOTO = "await_river_photo"

    @property
    def street(self) -> Street:
        """The street this stage belongs to."""
        return Street(self.value.removeprefix("await_").removesuffix("_photo"))

    @property
    def is_awaiting_photo(self) -> bool:
        return self.value.startswith("await_")

    @property
    def next(self) -> Stage:
        return NEXT_STAGE[self]


NEXT_STAGE: dict[Stage, Stage] = {
    Stage.HOLE: Stage.AWAIT_HOLE_PHOTO,
    Stage.AWAIT_HOLE_PHOTO: Stage.FLOP,
    Stage.FLOP: Stage.AWAIT_FLOP_PHOTO,
    Stage.AWAIT_FLOP_PHOTO: Stage.TURN,
    Stage.TURN: Stage.AWAIT_TURN_PHOTO,
    Stage.AWAIT_TURN_PHOTO: Stage.RIVER,
    Stage.RIVER: Stage.AWAIT_RIVER_PHOTO,
    Stage.AWAIT_RIVER_PHOTO: Stage.HOLE,
}


@dataclass
class PlayerState:
    """
    The hand as the coach currently knows it.

    Mutated only by the StageController.
    """
    stage: Stage = Stage.HOLE
    hole: list[str] = field(default_factory=list)
    board: list[str] = field(default_factory=list)

    def reset(self):
        """Back to the start of a fresh hand."""
        self.stage = Stage.HOLE
        self.hole = []
        self.board = []

    def clear_street(self, street: Street):
        """Drop partial data for a street after a failed read."""
        if street is Street.HOLE:
            self.hole = []
        else:
            self.board = []

    def record(self, street: Street, detected: list[str]):
        """
        Store a validated detection for a street.

        Hole and flop overwrite. Turn and river append the labels not yet
        on the board; if that does not yield the cumulative count the
        photo is taken as the whole board.
        """
        if street is Street.HOLE:
            self.hole = list(detected)
        elif street is Street.FLOP:
            self.board = list(detected)
        else:
            merged = self.board + [c for c in detected if c not in self.board]
            if len(merged) != street.expected_cards:
                merged = list(detected)
            self.board = merged

    def advance(self):
        self.stage = self.stage.next

    def snapshot(self) -> dict:
        return {
            "stage": self.stage.value,
            "hole": list(self.hole),
            "board": list(self.board),
        }
