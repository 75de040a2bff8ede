"""
Minimax search with alpha-beta pruning for Nine Men's Morris.

The engine walks the game tree by replaying actions through the rules
engine, so every simulated position is a real ``GameState``. Whose turn a
node is follows the state itself: after a mill the same player moves again
to capture, which keeps that node on the same side of the max/min split.
"""

from __future__ import annotations

import math
import random
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Tuple

from loguru import logger

from morris.config import SearchConfig, get_config, settings
from morris.game.actions import Action
from morris.game.board import opponent_of, player_name
from morris.game.morris import GameState
from morris.game.movegen import generate_actions
from morris.game.phases import Phase

from .evaluator import evaluate


EvaluateFn = Callable[[GameState, int], float]

# Nodes between two looks at the clock.
_CHECK_INTERVAL = 256

# Per unsearched ply on a finished game; larger than any swing in the
# non-terminal features between two finished positions.
DECIDED_PLY_BONUS = 2_000


class SearchTimeout(Exception):
    """Raised inside the tree walk when the time budget or cancel token trips."""


@dataclass
class SearchResult:
    action: Optional[Action]
    score: Optional[float] = None
    depth: int = 0
    nodes: int = 0
    completed: bool = True
    random_pick: bool = False


class MinimaxAI:
    def __init__(
        self,
        max_depth: int = 4,
        use_alpha_beta: bool = True,
        random_move_rate: float = 0.0,
        time_limit: Optional[float] = None,
        iterative_deepening: bool = False,
        rng: Optional[random.Random] = None,
        evaluate_fn: EvaluateFn = evaluate,
    ) -> None:
        self.max_depth = max(1, max_depth)
        self.use_alpha_beta = use_alpha_beta
        self.random_move_rate = random_move_rate
        self.time_limit = time_limit
        self.iterative_deepening = iterative_deepening
        self.rng = rng if rng is not None else random.Random()
        self.evaluate_fn = evaluate_fn
        self._nodes = 0
        self._deadline: Optional[float] = None
        self._cancel: Optional[threading.Event] = None

    @classmethod
    def from_config(cls, cfg: SearchConfig, rng: Optional[random.Random] = None) -> "MinimaxAI":
        return cls(
            max_depth=cfg.max_depth,
            use_alpha_beta=cfg.use_alpha_beta,
            random_move_rate=cfg.random_move_rate,
            time_limit=cfg.time_limit,
            iterative_deepening=cfg.iterative_deepening,
            rng=rng,
        )

    # ----------------------------- Public API ------------------------------ #
    def choose_action(
        self,
        state: GameState,
        player: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> SearchResult:
        """Pick an action for ``player`` (default: the side to move).

        Returns a result with ``action=None`` when the player has nothing to
        play. If the time limit or ``cancel_event`` cuts the search short, the
        best root action fully evaluated so far is returned with
        ``completed=False``.
        """
        if player is None:
            player = state.current_player
        if player is None or state.phase == Phase.GAME_OVER:
            return SearchResult(action=None)
        if player != state.current_player:
            raise ValueError(
                f"It is {player_name(state.current_player)}'s turn, not {player_name(player)}'s"
            )
        actions = generate_actions(state, player)
        if not actions:
            logger.debug(f"No legal action for {player_name(player)}")
            return SearchResult(action=None)

        if self.random_move_rate > 0 and self.rng.random() < self.random_move_rate:
            action = self.rng.choice(actions)
            logger.debug(f"Random pick for {player_name(player)}: {action}")
            return SearchResult(action=action, random_pick=True)

        self._nodes = 0
        self._cancel = cancel_event
        self._deadline = None if self.time_limit is None else time.monotonic() + self.time_limit

        depths = range(1, self.max_depth + 1) if self.iterative_deepening else [self.max_depth]
        best: Optional[SearchResult] = None
        for depth in depths:
            scored: List[Tuple[Action, float]] = []
            try:
                self._search_root(state, player, actions, depth, scored)
            except SearchTimeout:
                logger.info(
                    f"Search stopped at depth {depth} after {self._nodes} nodes "
                    f"({len(scored)}/{len(actions)} root actions done)"
                )
                if best is None:
                    if scored:
                        action, score = _pick_best(scored)
                        best = SearchResult(action, score, depth, self._nodes, completed=False)
                    else:
                        best = SearchResult(actions[0], None, 0, self._nodes, completed=False)
                else:
                    best.completed = False
                break
            action, score = _pick_best(scored)
            best = SearchResult(action, score, depth, self._nodes, completed=True)
            logger.debug(f"Depth {depth} done: {action} scores {score} ({self._nodes} nodes)")

        return best

    def search(
        self,
        state: GameState,
        depth: int,
        alpha: float,
        beta: float,
        maximizing: bool,
        root_player: int,
    ) -> float:
        """Minimax value of ``state`` for ``root_player`` looking ``depth`` plies ahead."""
        self._nodes += 1
        if self._nodes % _CHECK_INTERVAL == 0:
            self._check_limits()

        if state.phase == Phase.GAME_OVER:
            return self._decided_score(state, depth, root_player)
        if depth == 0:
            return self.evaluate_fn(state, root_player)

        player = root_player if maximizing else opponent_of(root_player)
        actions = generate_actions(state, player)
        if not actions:
            return self.evaluate_fn(state, root_player)

        if maximizing:
            value = -math.inf
            for action in actions:
                child = state.apply_action(action)
                score = self.search(
                    child, depth - 1, alpha, beta, child.current_player == root_player, root_player
                )
                value = max(value, score)
                if self.use_alpha_beta:
                    alpha = max(alpha, score)
                    if beta <= alpha:
                        break
            return value

        value = math.inf
        for action in actions:
            child = state.apply_action(action)
            score = self.search(
                child, depth - 1, alpha, beta, child.current_player == root_player, root_player
            )
            value = min(value, score)
            if self.use_alpha_beta:
                beta = min(beta, score)
                if beta <= alpha:
                    break
        return value

    # ---------------------------- Core internals --------------------------- #
    def _search_root(
        self,
        state: GameState,
        player: int,
        actions: List[Action],
        depth: int,
        scored: List[Tuple[Action, float]],
    ) -> None:
        # Only the best root score is exact once alpha tightens; the others are
        # upper bounds, which is all the selection needs.
        alpha = -math.inf
        for action in actions:
            self._check_limits()
            child = state.apply_action(action)
            score = self.search(
                child, depth - 1, alpha, math.inf, child.current_player == player, player
            )
            scored.append((action, score))
            if self.use_alpha_beta and score > alpha:
                alpha = score

    def _decided_score(self, state: GameState, depth: int, root_player: int) -> float:
        """Score a finished game, shifted so that wins found sooner rank higher
        and losses found later rank higher."""
        score = self.evaluate_fn(state, root_player)
        if state.winner == root_player:
            return score + depth * DECIDED_PLY_BONUS
        if state.winner is not None:
            return score - depth * DECIDED_PLY_BONUS
        return score

    def _check_limits(self) -> None:
        if self._cancel is not None and self._cancel.is_set():
            raise SearchTimeout("cancelled")
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise SearchTimeout("time limit reached")


def _pick_best(scored: List[Tuple[Action, float]]) -> Tuple[Action, float]:
    # First found wins ties.
    best_action, best_score = scored[0]
    for action, score in scored[1:]:
        if score > best_score:
            best_action, best_score = action, score
    return best_action, best_score


def get_best_move(
    state: GameState,
    ai_player: int,
    config: Optional[SearchConfig] = None,
    rng: Optional[random.Random] = None,
    cancel_event: Optional[threading.Event] = None,
) -> Optional[Action]:
    cfg = config if config is not None else get_config("medium")
    return MinimaxAI.from_config(cfg, rng=rng).choose_action(state, ai_player, cancel_event).action


def get_ai_move(
    state: GameState,
    ai_player: int,
    difficulty: str = "medium",
    rng: Optional[random.Random] = None,
    time_limit: Optional[float] = None,
    cancel_event: Optional[threading.Event] = None,
) -> Optional[Action]:
    """Action for ``ai_player`` at the given difficulty, or None when blocked.

    A None result means the AI cannot move; the caller should end the game in
    the opponent's favour.
    """
    cfg = get_config(difficulty)
    limit = time_limit if time_limit is not None else settings.time_limit
    if limit is not None:
        cfg = replace(cfg, time_limit=limit, iterative_deepening=True)
    return get_best_move(state, ai_player, cfg, rng=rng, cancel_event=cancel_event)
