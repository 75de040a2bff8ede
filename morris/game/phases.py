"""
Game phases and the transitions between them.

The table here is the contract the rules engine is checked against: every
state it emits must be reachable from the previous state's phase.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Sequence

from .board import PLAYERS


class Phase(str, Enum):
    PLACING = "placing"
    MOVING = "moving"
    FLYING = "flying"
    REMOVING = "removing"
    GAME_OVER = "gameOver"


PHASE_TRANSITIONS: Dict[Phase, FrozenSet[Phase]] = {
    Phase.PLACING: frozenset({Phase.PLACING, Phase.MOVING, Phase.FLYING, Phase.REMOVING, Phase.GAME_OVER}),
    Phase.MOVING: frozenset({Phase.MOVING, Phase.FLYING, Phase.REMOVING, Phase.GAME_OVER}),
    Phase.FLYING: frozenset({Phase.FLYING, Phase.MOVING, Phase.REMOVING, Phase.GAME_OVER}),
    Phase.REMOVING: frozenset({Phase.PLACING, Phase.MOVING, Phase.FLYING, Phase.GAME_OVER}),
    # Terminal; only a fresh game leaves it.
    Phase.GAME_OVER: frozenset(),
}

ALLOWED_ACTIONS: Dict[Phase, FrozenSet[str]] = {
    Phase.PLACING: frozenset({"place"}),
    Phase.MOVING: frozenset({"select", "move"}),
    Phase.FLYING: frozenset({"select", "move"}),
    Phase.REMOVING: frozenset({"remove"}),
    Phase.GAME_OVER: frozenset({"reset"}),
}

_DESCRIPTIONS: Dict[Phase, str] = {
    Phase.PLACING: "Place a piece",
    Phase.MOVING: "Move a piece",
    Phase.FLYING: "Fly to any position",
    Phase.REMOVING: "Remove an opponent's piece",
    Phase.GAME_OVER: "Game over",
}


def can_transition(current: Phase, target: Phase) -> bool:
    return target in PHASE_TRANSITIONS[current]


def is_action_allowed(phase: Phase, action: str) -> bool:
    return action in ALLOWED_ACTIONS[phase]


def phase_description(phase: Phase) -> str:
    return _DESCRIPTIONS[phase]


def derive_phase(pieces_remaining: Sequence[int], pieces_on_board: Sequence[int], player: int) -> Phase:
    """Phase for ``player`` to act in, from the piece counts alone.

    Placing while either side still holds pieces, then Flying for a player
    down to exactly three pieces, Moving otherwise.
    """
    if any(pieces_remaining[p] > 0 for p in PLAYERS):
        return Phase.PLACING
    if pieces_on_board[player] == 3:
        return Phase.FLYING
    return Phase.MOVING
