from __future__ import annotations

import argparse
import json
import random
import sys
from typing import Any, Dict, Optional

from loguru import logger

from morris.config import settings
from morris.game.actions import action_to_dict
from morris.game.encoding import deserialize_fen
from morris.search.minimax import get_ai_move


def choose_move(
    fen: str,
    difficulty: str = "medium",
    seed: Optional[int] = None,
    time_limit: Optional[float] = None,
) -> Dict[str, Any]:
    state = deserialize_fen(fen)
    if state.current_player is None:
        return {"action": None, "blocked": False, "gameOver": True}
    rng = random.Random(seed)
    action = get_ai_move(state, state.current_player, difficulty, rng=rng, time_limit=time_limit)
    if action is None:
        return {"action": None, "blocked": True, "gameOver": False}
    return {"action": action_to_dict(action), "blocked": False, "gameOver": False}


def main():
    parser = argparse.ArgumentParser(description="Nine Men's Morris minimax agent")
    parser.add_argument("fen", type=str, help="Position string (see morris.game.encoding)")
    parser.add_argument(
        "--difficulty",
        type=str,
        default=settings.default_difficulty,
        choices=["easy", "medium", "hard"],
        help="Search preset",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for the easy preset's random picks")
    parser.add_argument("--time-limit", type=float, default=None, help="Seconds allowed for the search")
    args = parser.parse_args()

    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)

    try:
        result = choose_move(args.fen, args.difficulty, args.seed, args.time_limit)
    except ValueError as exc:
        logger.error(f"Bad position: {exc}")
        sys.exit(2)
    print(json.dumps(result))


if __name__ == "__main__":
    main()
