"""
Static evaluation of Nine Men's Morris positions.

Each player gets a feature vector; the score is the weighted difference of
the two vectors plus terminal bonuses. Swapping the perspective swaps the
vectors, so ``evaluate(s, p) == -evaluate(s, opponent_of(p))`` for every
state.
"""

from __future__ import annotations

import numpy as np

from morris.game.board import CROSS_POSITIONS, MILLS, opponent_of
from morris.game.morris import GameState
from morris.game.movegen import blocked_pieces, mobility


FEATURE_NAMES = (
    "pieces_on_board",
    "pieces_remaining",
    "mills",
    "potential_mills",
    "mobility",
    "blocked",
    "cross_control",
)

# Each blocked piece scores -15 for its owner's opponent, hence +15 on the
# owner's side of the difference.
WEIGHTS = np.array([100, 50, 50, 20, 10, 15, 5], dtype=np.int64)

WIN_SCORE = 10_000


def count_mills(board, player: int) -> int:
    return sum(1 for mill in MILLS if all(board[p] == player for p in mill))


def count_potential_mills(board, player: int) -> int:
    """Mills with two of ``player``'s pieces and the third point empty."""
    count = 0
    for mill in MILLS:
        owned = sum(1 for p in mill if board[p] == player)
        empty = sum(1 for p in mill if board[p] is None)
        if owned == 2 and empty == 1:
            count += 1
    return count


def player_features(state: GameState, player: int) -> np.ndarray:
    board = state.board
    flying = state.is_flying(player)
    movement = not state.in_placement_stage
    return np.array(
        [
            state.pieces_on_board[player],
            state.pieces_remaining[player],
            count_mills(board, player),
            count_potential_mills(board, player),
            mobility(board, player, flying) if movement else 0,
            blocked_pieces(board, player, False),
            sum(1 for p in CROSS_POSITIONS if board[p] == player),
        ],
        dtype=np.int64,
    )


def evaluate(state: GameState, player: int) -> int:
    """Score ``state`` from ``player``'s point of view; higher is better."""
    opp = opponent_of(player)
    diff = player_features(state, player) - player_features(state, opp)
    score = int(WEIGHTS @ diff)

    if state.has_lost(opp):
        score += WIN_SCORE
    if state.has_lost(player):
        score -= WIN_SCORE
    return score
