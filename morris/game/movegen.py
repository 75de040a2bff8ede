"""
Legal action enumeration.

Orderings are deterministic (ascending positions, then ascending
destinations) so that searches over the same position are reproducible.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from .actions import Action, Move, Place, Remove
from .board import ADJACENCY, NUM_POSITIONS, Board, is_removable, opponent_of
from .phases import Phase

if TYPE_CHECKING:
    from .morris import GameState


def legal_destinations(board: Board, pos: int, is_flying: bool) -> List[int]:
    if board[pos] is None:
        return []
    if is_flying:
        return [p for p in range(NUM_POSITIONS) if board[p] is None]
    return [p for p in ADJACENCY[pos] if board[p] is None]


def has_any_legal_move(board: Board, player: int, is_flying: bool) -> bool:
    return any(
        legal_destinations(board, pos, is_flying)
        for pos in range(NUM_POSITIONS)
        if board[pos] == player
    )


def mobility(board: Board, player: int, is_flying: bool) -> int:
    """Total number of destinations over all of ``player``'s pieces."""
    return sum(
        len(legal_destinations(board, pos, is_flying))
        for pos in range(NUM_POSITIONS)
        if board[pos] == player
    )


def blocked_pieces(board: Board, player: int, is_flying: bool) -> int:
    return sum(
        1
        for pos in range(NUM_POSITIONS)
        if board[pos] == player and not legal_destinations(board, pos, is_flying)
    )


def generate_actions(state: "GameState", player: int) -> List[Action]:
    """Every action ``player`` could take in the state's current phase."""
    board = state.board
    phase = state.phase

    if phase == Phase.PLACING:
        return [Place(p) for p in range(NUM_POSITIONS) if board[p] is None]

    if phase in (Phase.MOVING, Phase.FLYING):
        flying = state.pieces_on_board[player] == 3
        actions: List[Action] = []
        for src in range(NUM_POSITIONS):
            if board[src] != player:
                continue
            for dst in legal_destinations(board, src, flying):
                actions.append(Move(src, dst))
        return actions

    if phase == Phase.REMOVING:
        opp = opponent_of(player)
        return [Remove(p) for p in range(NUM_POSITIONS) if is_removable(board, p, opp)]

    return []
