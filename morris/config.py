from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Optional

from loguru import logger


@dataclass(frozen=True)
class SearchConfig:
    difficulty: str = "medium"
    max_depth: int = 4
    use_alpha_beta: bool = True
    random_move_rate: float = 0.0  # chance of skipping search for a random legal action
    time_limit: Optional[float] = None  # seconds
    iterative_deepening: bool = False


DIFFICULTY_PRESETS: Dict[str, SearchConfig] = {
    "easy": SearchConfig(difficulty="easy", max_depth=2, random_move_rate=0.3),
    "medium": SearchConfig(difficulty="medium", max_depth=4),
    "hard": SearchConfig(difficulty="hard", max_depth=6),
}


def get_config(difficulty: str) -> SearchConfig:
    cfg = DIFFICULTY_PRESETS.get(difficulty)
    if cfg is None:
        logger.warning(f"Unknown difficulty {difficulty!r}, falling back to 'medium'")
        return DIFFICULTY_PRESETS["medium"]
    return cfg


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def _env_time_limit() -> Optional[float]:
    raw = os.getenv("MORRIS_TIME_LIMIT", "")
    return float(raw) if raw else None


@dataclass
class Settings:
    default_difficulty: str = field(default_factory=lambda: os.getenv("MORRIS_DIFFICULTY", "medium"))
    time_limit: Optional[float] = field(default_factory=_env_time_limit)
    # Raise on rules-engine invariant violations instead of refusing the action.
    strict_invariants: bool = field(default_factory=lambda: _env_flag("MORRIS_STRICT_INVARIANTS", "false"))
    log_level: str = field(default_factory=lambda: os.getenv("MORRIS_LOG_LEVEL", "INFO"))


settings = Settings()
