import random

import pytest

from morris.config import settings
from morris.game import (
    BLACK,
    WHITE,
    GameState,
    InvariantViolation,
    Move,
    Phase,
    Place,
    Remove,
    Select,
    check_invariants,
)
from morris.game.morris import (
    initialize_game,
    move_piece,
    place_piece,
    remove_piece,
    select_piece,
)

from helpers import make_state


def place_all(state, positions):
    for pos in positions:
        nxt = state.place(pos)
        assert nxt != state, nxt.message
        state = nxt
    return state


def test_initial_state():
    s = GameState.initial()
    assert s.board == (None,) * 24
    assert s.current_player == WHITE
    assert s.phase == Phase.PLACING
    assert s.pieces_remaining == (9, 9)
    assert s.pieces_on_board == (0, 0)
    assert s.selected_position is None
    assert s.winner is None
    assert len(s.legal_actions()) == 24


def test_place_updates_counts_and_switches_turn():
    s = GameState.initial().place(4)
    assert s.board[4] == WHITE
    assert s.pieces_remaining == (8, 9)
    assert s.pieces_on_board == (1, 0)
    assert s.current_player == BLACK
    assert s.phase == Phase.PLACING


def test_place_on_occupied_position_is_refused():
    s = GameState.initial().place(4)
    again = s.place(4)
    assert again == s
    assert again.message == "Position already occupied"


def test_place_outside_placing_phase_is_refused():
    s = make_state(white=[0, 4, 9, 13], black=[1, 3, 5, 20])
    assert s.phase == Phase.MOVING
    assert s.place(22) == s


def test_invalid_position_is_refused():
    s = GameState.initial()
    assert s.place(24) == s
    assert s.place(-1) == s


def test_nine_placements_each_without_mill_reach_moving():
    white = [0, 2, 4, 9, 13, 15, 17, 19, 22]
    black = [1, 3, 6, 10, 12, 14, 16, 20, 23]
    order = [p for pair in zip(white, black) for p in pair]
    s = place_all(GameState.initial(), order)
    assert s.phase == Phase.MOVING
    assert s.pieces_remaining == (0, 0)
    assert s.pieces_on_board == (9, 9)
    assert s.current_player == WHITE


def test_placing_third_in_row_enters_removing():
    s = place_all(GameState.initial(), [0, 3, 1, 5])
    s = s.place(2)
    assert s.phase == Phase.REMOVING
    assert s.mill_formed
    assert s.current_player == WHITE
    assert s.pieces_remaining == (6, 7)


def test_remove_hands_turn_back_to_placing():
    s = place_all(GameState.initial(), [0, 3, 1, 5, 2])
    s = s.remove(3)
    assert s.board[3] is None
    assert s.pieces_on_board == (3, 1)
    assert s.pieces_remaining == (6, 7)
    assert s.current_player == BLACK
    assert s.phase == Phase.PLACING
    assert not s.mill_formed


def test_remove_own_or_empty_piece_is_refused():
    s = place_all(GameState.initial(), [0, 3, 1, 5, 2])
    assert s.remove(0) == s
    assert s.remove(22) == s
    assert s.remove(3).message != s.remove(0).message


def test_mill_piece_protected_while_free_pieces_exist():
    s = make_state(white=[0, 1, 2, 9], black=[3, 4, 5, 20], phase=Phase.REMOVING)
    refused = s.remove(4)
    assert refused == s
    assert "mill" in refused.message
    assert s.remove(20).board[20] is None


def test_mill_piece_removable_when_all_pieces_in_mills():
    s = make_state(white=[0, 1, 2, 9], black=[3, 4, 5, 13, 20], phase=Phase.REMOVING)
    after = s.remove(4)
    assert after.board[4] is None
    assert after.pieces_on_board[BLACK] == 4


def test_removing_down_to_two_pieces_ends_game():
    s = make_state(white=[0, 1, 2, 9], black=[3, 20, 23], phase=Phase.REMOVING)
    s = s.remove(3)
    assert s.phase == Phase.GAME_OVER
    assert s.winner == WHITE
    assert s.current_player is None
    assert s.pieces_on_board == (4, 2)


def test_two_pieces_with_pieces_left_to_place_is_not_a_loss():
    s = make_state(white=[0, 1, 2], black=[3, 20, 23], remaining=(4, 4), phase=Phase.REMOVING)
    s = s.remove(3)
    assert s.phase == Phase.PLACING
    assert s.current_player == BLACK


def test_select_then_move():
    s = make_state(white=[0, 4, 9, 13], black=[1, 3, 5, 20])
    s = s.select_or_move(9)
    assert s.selected_position == 9
    assert s.board[9] == WHITE
    s = s.select_or_move(21)
    assert s.board[9] is None
    assert s.board[21] == WHITE
    assert s.selected_position is None
    assert s.current_player == BLACK


def test_select_same_position_deselects():
    s = make_state(white=[0, 4, 9, 13], black=[1, 3, 5, 20])
    s = s.select_or_move(9).select_or_move(9)
    assert s.selected_position is None
    assert s.current_player == WHITE


def test_select_opponent_piece_is_refused():
    s = make_state(white=[0, 4, 9, 13], black=[1, 3, 5, 20])
    assert s.select_or_move(1) == s
    assert s.select_or_move(22) == s


def test_move_to_non_adjacent_point_is_refused():
    s = make_state(white=[0, 4, 9, 13], black=[1, 3, 5, 20])
    selected = s.select_or_move(9)
    after = selected.select_or_move(23)
    assert after == selected
    assert after.selected_position == 9
    assert s.move(9, 23) == s


def test_move_forming_mill_enters_removing():
    s = make_state(white=[0, 1, 14, 10], black=[21, 22, 6, 18])
    s = s.move(14, 2)
    assert s.phase == Phase.REMOVING
    assert s.current_player == WHITE
    assert s.mill_formed


def test_three_pieces_fly():
    s = make_state(white=[9, 4, 14, 19], black=[0, 2, 21])
    s = s.move(19, 18)
    assert s.phase == Phase.FLYING
    assert s.current_player == BLACK
    s = s.move(0, 23)
    assert s.board[23] == BLACK
    assert s.phase == Phase.MOVING
    assert s.current_player == WHITE


def test_four_pieces_cannot_fly():
    s = make_state(white=[9, 4, 14, 19], black=[0, 2, 21, 5], to_move=BLACK)
    assert s.phase == Phase.MOVING
    assert s.move(0, 23) == s


def test_blocking_every_piece_wins():
    s = make_state(white=[9, 4, 14, 19], black=[0, 1, 2, 21])
    s = s.move(19, 22)
    assert s.phase == Phase.GAME_OVER
    assert s.winner == WHITE


def test_game_over_refuses_actions():
    s = make_state(white=[0, 1, 2, 9], black=[3, 20, 23], phase=Phase.REMOVING).remove(3)
    assert s.is_terminal()
    for action in (Place(4), Move(0, 21), Remove(20), Select(0)):
        after = s.apply_action(action)
        assert after == s
        assert "over" in after.message
    assert s.reset() == GameState.initial()


def test_function_spellings_match_methods():
    s = initialize_game()
    assert s == GameState.initial()
    assert place_piece(s, 0) == s.place(0)

    m = make_state(white=[0, 4, 9, 13], black=[1, 3, 5, 20])
    assert select_piece(m, 9).selected_position == 9
    assert move_piece(m, 9, 21) == m.move(9, 21)
    assert move_piece(m, 9, 21).board[21] == WHITE

    r = make_state(white=[0, 1, 2, 9], black=[3, 4, 5, 20], phase=Phase.REMOVING)
    assert remove_piece(r, 20) == r.remove(20)
    assert remove_piece(r, 20).board[20] is None


def test_apply_action_rejects_unknown_types():
    with pytest.raises(TypeError):
        GameState.initial().apply_action("place 4")


def test_check_invariants_catches_bad_counts():
    s = GameState.initial()
    broken = GameState(board=s.board, pieces_on_board=(1, 0))
    with pytest.raises(InvariantViolation):
        check_invariants(broken)


def test_corrupt_state_raises_in_strict_mode():
    s = GameState.initial()
    broken = GameState(board=s.board, pieces_on_board=(1, 0))
    with pytest.raises(InvariantViolation):
        broken.place(0)


def test_corrupt_state_is_refused_outside_strict_mode(monkeypatch):
    monkeypatch.setattr(settings, "strict_invariants", False)
    s = GameState.initial()
    broken = GameState(board=s.board, pieces_on_board=(1, 0))
    after = broken.place(0)
    assert after == broken
    assert "refused" in after.message


def test_random_playouts_keep_counts_consistent():
    rng = random.Random(7)
    for _ in range(5):
        s = GameState.initial()
        for _ in range(150):
            if s.is_terminal():
                break
            actions = s.legal_actions()
            assert actions
            nxt = s.apply_action(rng.choice(actions))
            assert nxt != s
            s = nxt
            non_empty = sum(1 for cell in s.board if cell is not None)
            assert s.pieces_on_board[WHITE] + s.pieces_on_board[BLACK] == non_empty
            check_invariants(s)
