from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Tuple

from loguru import logger

from morris.config import SearchConfig
from morris.game.board import BLACK, PIECES_PER_PLAYER, WHITE, opponent_of, player_name
from morris.game.morris import GameState
from morris.search.minimax import MinimaxAI


@dataclass
class ArenaConfig:
    games: int = 10
    max_moves: int = 200  # games still running after this many actions are draws
    seed: Optional[int] = None


@dataclass
class GameRecord:
    winner: Optional[int]
    moves: int
    pieces_lost: Tuple[int, int]
    blocked: bool
    final_state: GameState

    @property
    def loser_lost_piece(self) -> bool:
        if self.winner is None:
            return False
        return self.pieces_lost[opponent_of(self.winner)] > 0


def _pieces_lost(state: GameState) -> Tuple[int, int]:
    return tuple(
        PIECES_PER_PLAYER - state.pieces_remaining[p] - state.pieces_on_board[p] for p in (WHITE, BLACK)
    )


def play_game(ai_white: MinimaxAI, ai_black: MinimaxAI, max_moves: int = 200) -> GameRecord:
    """Play one game between two engines through the rules engine."""
    state = GameState.initial()
    moves = 0
    winner: Optional[int] = None
    blocked = False

    while not state.is_terminal() and moves < max_moves:
        ai = ai_white if state.current_player == WHITE else ai_black
        action = ai.choose_action(state).action
        if action is None:
            blocked = True
            winner = opponent_of(state.current_player)
            break
        next_state = state.apply_action(action)
        if next_state == state:
            raise RuntimeError(f"Engine chose an illegal action {action}: {next_state.message}")
        state = next_state
        moves += 1

    if state.is_terminal():
        winner = state.winner
    logger.info(f"Game over after {moves} actions, winner: {player_name(winner)}")
    return GameRecord(
        winner=winner,
        moves=moves,
        pieces_lost=_pieces_lost(state),
        blocked=blocked,
        final_state=state,
    )


def arena(config_a: SearchConfig, config_b: SearchConfig, cfg: ArenaConfig) -> Tuple[int, int, int, float]:
    """Play matches alternating colors; return (wins, draws, losses, win_rate) for ``config_a``."""
    rng = random.Random(cfg.seed)
    ai_a = MinimaxAI.from_config(config_a, rng=rng)
    ai_b = MinimaxAI.from_config(config_b, rng=rng)
    wins = draws = losses = 0
    for i in range(cfg.games):
        if i % 2 == 0:
            record = play_game(ai_a, ai_b, cfg.max_moves)
            a_color = WHITE
        else:
            record = play_game(ai_b, ai_a, cfg.max_moves)
            a_color = BLACK
        if record.winner is None:
            draws += 1
        elif record.winner == a_color:
            wins += 1
        else:
            losses += 1
    win_rate = (wins + 0.5 * draws) / max(1, cfg.games)
    logger.info(
        f"{config_a.difficulty} vs {config_b.difficulty}: {wins}W {draws}D {losses}L ({win_rate:.2f})"
    )
    return wins, draws, losses, win_rate


def expected_score(rating: float, opponent_rating: float) -> float:
    return 1.0 / (1.0 + 10 ** ((opponent_rating - rating) / 400.0))


def elo_update(rating: float, score: float, expected: float, k: float = 20.0) -> float:
    """Single-step Elo update."""
    return rating + k * (score - expected)
