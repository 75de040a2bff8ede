import random

from morris.arena.eval import ArenaConfig, GameRecord, arena, elo_update, expected_score, play_game
from morris.config import get_config
from morris.game import WHITE, GameState
from morris.search.minimax import MinimaxAI


def test_play_game_stops_at_move_cap():
    rng = random.Random(0)
    ai = MinimaxAI.from_config(get_config("easy"), rng=rng)
    record = play_game(ai, ai, max_moves=20)
    assert isinstance(record, GameRecord)
    assert record.moves == 20
    assert record.winner is None
    assert not record.loser_lost_piece
    assert sum(record.final_state.pieces_on_board) + sum(record.pieces_lost) + sum(
        record.final_state.pieces_remaining
    ) == 18


def test_arena_smoke():
    cfg = ArenaConfig(games=2, max_moves=12, seed=1)
    wins, draws, losses, wr = arena(get_config("easy"), get_config("easy"), cfg)
    assert wins + draws + losses == 2
    assert 0.0 <= wr <= 1.0


def test_loser_lost_piece():
    record = GameRecord(
        winner=WHITE, moves=40, pieces_lost=(1, 7), blocked=False, final_state=GameState.initial()
    )
    assert record.loser_lost_piece


def test_elo_update():
    assert expected_score(1500, 1500) == 0.5
    assert elo_update(1500, 1.0, 0.5) == 1510.0
    assert elo_update(1500, 0.0, 0.5, k=32) == 1484.0
    assert expected_score(1600, 1400) > 0.5
