"""
Static board topology for Nine Men's Morris.

The 24 points sit on three concentric squares joined at their midpoints:

     0-----------1-----------2
     |           |           |
     |     3-----4-----5     |
     |     |     |     |     |
     |     |  6--7--8  |     |
     |     |  |     |  |     |
     9----10-11    12-13----14
     |     |  |     |  |     |
     |     | 15-16-17  |     |
     |     |     |     |     |
     |    18----19----20     |
     |           |           |
    21----------22----------23

Besides the graph itself this module holds the board-only predicates (mill
detection and the capture protection rule) shared by the rules engine, the
move generator and the evaluator. Nothing here mutates after import.
"""

from __future__ import annotations

from typing import FrozenSet, Optional, Set, Tuple


NUM_POSITIONS: int = 24
PIECES_PER_PLAYER: int = 9

Position = int
Mill = Tuple[int, int, int]

ADJACENCY: Tuple[Tuple[int, ...], ...] = (
    (1, 9),          # 0
    (0, 2, 4),       # 1
    (1, 14),         # 2
    (4, 10),         # 3
    (1, 3, 5, 7),    # 4
    (4, 13),         # 5
    (7, 11),         # 6
    (4, 6, 8),       # 7
    (7, 12),         # 8
    (0, 10, 21),     # 9
    (3, 9, 11, 18),  # 10
    (6, 10, 15),     # 11
    (8, 13, 17),     # 12
    (5, 12, 14, 20), # 13
    (2, 13, 23),     # 14
    (11, 16),        # 15
    (15, 17, 19),    # 16
    (12, 16),        # 17
    (10, 19),        # 18
    (16, 18, 20, 22),# 19
    (13, 19),        # 20
    (9, 22),         # 21
    (19, 21, 23),    # 22
    (14, 22),        # 23
)

MILLS: Tuple[Mill, ...] = (
    # Outer square
    (0, 1, 2), (2, 14, 23), (21, 22, 23), (0, 9, 21),
    # Middle square
    (3, 4, 5), (5, 13, 20), (18, 19, 20), (3, 10, 18),
    # Inner square
    (6, 7, 8), (8, 12, 17), (15, 16, 17), (6, 11, 15),
    # Spokes joining the squares
    (1, 4, 7), (16, 19, 22), (9, 10, 11), (12, 13, 14),
)

# Mills indexed by the positions they contain (each point is in exactly two).
MILLS_BY_POSITION: Tuple[Tuple[Mill, ...], ...] = tuple(
    tuple(mill for mill in MILLS if pos in mill) for pos in range(NUM_POSITIONS)
)

# Degree-4 points where the spokes cross the middle square.
CROSS_POSITIONS: Tuple[int, ...] = tuple(
    pos for pos, neighbours in enumerate(ADJACENCY) if len(neighbours) == 4
)


def is_valid_position(n: object) -> bool:
    return isinstance(n, int) and not isinstance(n, bool) and 0 <= n < NUM_POSITIONS


def adjacency(pos: Position) -> FrozenSet[Position]:
    """Return the neighbours of ``pos``. Raises ``ValueError`` for an off-board index."""
    if not is_valid_position(pos):
        raise ValueError(f"Invalid board position: {pos!r}")
    return frozenset(ADJACENCY[pos])


def mills() -> Tuple[Mill, ...]:
    return MILLS


def mills_containing(pos: Position) -> Tuple[Mill, ...]:
    return MILLS_BY_POSITION[pos]


# ----------------------------- Cell contents ----------------------------- #
WHITE: int = 0
BLACK: int = 1
PLAYERS: Tuple[int, int] = (WHITE, BLACK)
PLAYER_NAMES: Tuple[str, str] = ("white", "black")

Board = Tuple[Optional[int], ...]


def opponent_of(player: int) -> int:
    return BLACK if player == WHITE else WHITE


def player_name(player: Optional[int]) -> str:
    return "nobody" if player is None else PLAYER_NAMES[player]


def empty_board() -> Board:
    return (None,) * NUM_POSITIONS


def count_pieces(board: Board, player: int) -> int:
    return sum(1 for cell in board if cell == player)


def check_mill(board: Board, pos: Position, player: Optional[int]) -> bool:
    """True iff one of the mills through ``pos`` is fully owned by ``player``."""
    if player is None:
        return False
    return any(all(board[p] == player for p in mill) for mill in MILLS_BY_POSITION[pos])


def positions_in_mills(board: Board, player: int) -> Set[Position]:
    in_mill: Set[Position] = set()
    for mill in MILLS:
        if all(board[p] == player for p in mill):
            in_mill.update(mill)
    return in_mill


def is_removable(board: Board, pos: Position, owner: int) -> bool:
    """Return True if the piece of ``owner`` at ``pos`` may be captured.

    A piece standing in a mill is protected unless every piece ``owner`` has
    on the board is in some mill.
    """
    if board[pos] != owner:
        return False
    in_mill = positions_in_mills(board, owner)
    if pos not in in_mill:
        return True
    return all(p in in_mill for p, cell in enumerate(board) if cell == owner)
