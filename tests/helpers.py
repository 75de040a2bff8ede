from typing import Iterable, Optional, Tuple

from morris.game import BLACK, WHITE, GameState, Phase, derive_phase


def make_state(
    white: Iterable[int] = (),
    black: Iterable[int] = (),
    to_move: int = WHITE,
    remaining: Tuple[int, int] = (0, 0),
    phase: Optional[Phase] = None,
    selected: Optional[int] = None,
) -> GameState:
    board = [None] * 24
    for p in white:
        board[p] = WHITE
    for p in black:
        board[p] = BLACK
    on_board = (board.count(WHITE), board.count(BLACK))
    if phase is None:
        phase = derive_phase(remaining, on_board, to_move)
    return GameState(
        board=tuple(board),
        current_player=to_move,
        phase=phase,
        pieces_remaining=remaining,
        pieces_on_board=on_board,
        selected_position=selected,
        mill_formed=phase == Phase.REMOVING,
    )
