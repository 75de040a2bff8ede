"""
Move hints for the player to move.

The search engine picks the action; the explanation comes from replaying
that action on the current state without keeping the result.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

from morris.config import get_config
from morris.game.actions import Action, Move, Place, Remove
from morris.game.board import check_mill
from morris.game.morris import GameState

from .minimax import MinimaxAI


@dataclass(frozen=True)
class Hint:
    action: Action
    reason: str
    priority: float = 0.0


def simulate_action(state: GameState, action: Action) -> GameState:
    """State after ``action``; ``state`` itself is left untouched."""
    return state.apply_action(action)


def forms_mill(state: GameState, action: Action) -> bool:
    if isinstance(action, Remove):
        return False
    after = simulate_action(state, action)
    if after == state:
        return False
    return check_mill(after.board, action.to, state.current_player)


def explain(state: GameState, action: Action) -> str:
    if isinstance(action, Place):
        if forms_mill(state, action):
            return "Place here to form a mill! You'll get to remove an opponent piece."
        return "Strategic position that keeps your options open."
    if isinstance(action, Move):
        if forms_mill(state, action):
            return f"Move from position {action.src} to {action.to} to form a mill!"
        return f"Move from {action.src} to {action.to} for better position control."
    return f"Remove the piece at position {action.pos} to weaken your opponent's position."


def generate_hint(
    state: GameState,
    difficulty: str = "medium",
    rng: Optional[random.Random] = None,
) -> Optional[Hint]:
    if state.current_player is None:
        return None
    result = MinimaxAI.from_config(get_config(difficulty), rng=rng).choose_action(state)
    if result.action is None:
        return None
    return Hint(
        action=result.action,
        reason=explain(state, result.action),
        priority=result.score or 0.0,
    )


def get_hint_options(
    state: GameState,
    count: int = 3,
    difficulties: Sequence[str] = ("hard", "medium", "easy"),
    rng: Optional[random.Random] = None,
) -> List[Hint]:
    """Up to ``count`` distinct hints, one per difficulty, best first."""
    hints: List[Hint] = []
    for difficulty in list(difficulties)[:count]:
        hint = generate_hint(state, difficulty, rng=rng)
        if hint is not None and all(h.action != hint.action for h in hints):
            hints.append(hint)
    return sorted(hints, key=lambda h: h.priority, reverse=True)
