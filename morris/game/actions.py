"""
Player actions as a closed set of small immutable records.

``Place``, ``Move`` and ``Remove`` are what the move generator and the search
engine produce. ``Select`` is the click-style half move used by interactive
callers during the movement phases; the engine never generates it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Union


@dataclass(frozen=True)
class Place:
    to: int

    kind = "place"


@dataclass(frozen=True)
class Move:
    src: int
    to: int

    kind = "move"


@dataclass(frozen=True)
class Remove:
    pos: int

    kind = "remove"


@dataclass(frozen=True)
class Select:
    pos: int

    kind = "select"


Action = Union[Place, Move, Remove]
AnyAction = Union[Place, Move, Remove, Select]


def action_to_dict(action: AnyAction) -> Dict[str, Any]:
    if isinstance(action, Place):
        return {"type": "place", "to": action.to}
    if isinstance(action, Move):
        return {"type": "move", "from": action.src, "to": action.to}
    if isinstance(action, Remove):
        return {"type": "remove", "to": action.pos}
    if isinstance(action, Select):
        return {"type": "select", "to": action.pos}
    raise TypeError(f"Unknown action: {action!r}")


def action_from_dict(data: Dict[str, Any]) -> AnyAction:
    kind = data.get("type")
    try:
        if kind == "place":
            return Place(int(data["to"]))
        if kind == "move":
            return Move(int(data["from"]), int(data["to"]))
        if kind == "remove":
            return Remove(int(data["to"]))
        if kind == "select":
            return Select(int(data["to"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Malformed action: {data!r}") from exc
    raise ValueError(f"Unknown action type: {kind!r}")
