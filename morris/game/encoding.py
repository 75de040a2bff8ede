"""
Serialization and hashing for Nine Men's Morris states.

Two encodings are provided: a compact one-line string for logs, the CLI and
storage, and a plain dict that maps directly onto JSON for session layers.
Both carry every field, so decoding an encoded state gives back an equal
state with the same message.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from .board import BLACK, NUM_POSITIONS, PLAYER_NAMES, WHITE
from .morris import GameState, InvariantViolation, check_invariants
from .phases import Phase


_CELL_TO_CHAR = {None: ".", WHITE: "W", BLACK: "B"}
_CHAR_TO_CELL = {v: k for k, v in _CELL_TO_CHAR.items()}


def state_key(state: GameState) -> Tuple:
    """Hashable key identifying a position for repetition checks and caches."""
    return (
        state.board,
        state.current_player,
        state.phase.value,
        state.pieces_remaining,
        state.pieces_on_board,
    )


def _validated(state: GameState) -> GameState:
    """Decoded states must satisfy the rules engine's invariants."""
    try:
        check_invariants(state)
    except InvariantViolation as exc:
        raise ValueError(f"Inconsistent game state: {exc}") from exc
    return state


def serialize_fen(state: GameState) -> str:
    """Serialize to a compact FEN-like string.

    Format: board|player|phase|remW,remB|onW,onB|selected|mill|winner|message
      board is 24 chars of W, B or '.', player and winner are W, B or -,
      selected is - or 0..23, mill is 0/1. The message is last so it may
      contain '|'.
    """
    opt = lambda x: "-" if x is None else str(x)
    parts = [
        "".join(_CELL_TO_CHAR[c] for c in state.board),
        _CELL_TO_CHAR[state.current_player] if state.current_player is not None else "-",
        state.phase.value,
        f"{state.pieces_remaining[WHITE]},{state.pieces_remaining[BLACK]}",
        f"{state.pieces_on_board[WHITE]},{state.pieces_on_board[BLACK]}",
        opt(state.selected_position),
        "1" if state.mill_formed else "0",
        _CELL_TO_CHAR[state.winner] if state.winner is not None else "-",
        state.message,
    ]
    return "|".join(parts)


def deserialize_fen(s: str) -> GameState:
    try:
        board_s, player_s, phase_s, rem_s, on_s, sel_s, mill_s, winner_s, message = s.split("|", 8)
    except ValueError as exc:
        raise ValueError(f"Malformed position string: {s!r}") from exc
    if len(board_s) != NUM_POSITIONS or any(ch not in _CHAR_TO_CELL for ch in board_s):
        raise ValueError(f"Malformed board: {board_s!r}")

    def player_of(token: str) -> Optional[int]:
        if token == "-":
            return None
        if token not in ("W", "B"):
            raise ValueError(f"Malformed player: {token!r}")
        return _CHAR_TO_CELL[token]

    rem_w, rem_b = (int(x) for x in rem_s.split(","))
    on_w, on_b = (int(x) for x in on_s.split(","))
    state = GameState(
        board=tuple(_CHAR_TO_CELL[ch] for ch in board_s),
        current_player=player_of(player_s),
        phase=Phase(phase_s),
        pieces_remaining=(rem_w, rem_b),
        pieces_on_board=(on_w, on_b),
        selected_position=None if sel_s == "-" else int(sel_s),
        mill_formed=mill_s == "1",
        winner=player_of(winner_s),
        message=message,
    )
    return _validated(state)


def _name(player: Optional[int]) -> Optional[str]:
    return None if player is None else PLAYER_NAMES[player]


def _player(name: Optional[str]) -> Optional[int]:
    if name is None:
        return None
    if name not in PLAYER_NAMES:
        raise ValueError(f"Unknown player: {name!r}")
    return PLAYER_NAMES.index(name)


def state_to_dict(state: GameState) -> Dict[str, Any]:
    return {
        "board": [_name(c) for c in state.board],
        "currentPlayer": _name(state.current_player),
        "phase": state.phase.value,
        "piecesRemaining": {"white": state.pieces_remaining[WHITE], "black": state.pieces_remaining[BLACK]},
        "piecesOnBoard": {"white": state.pieces_on_board[WHITE], "black": state.pieces_on_board[BLACK]},
        "selectedPosition": state.selected_position,
        "millFormed": state.mill_formed,
        "winner": _name(state.winner),
        "message": state.message,
    }


def state_from_dict(data: Dict[str, Any]) -> GameState:
    try:
        board = tuple(_player(c) for c in data["board"])
        if len(board) != NUM_POSITIONS:
            raise ValueError(f"Board must have {NUM_POSITIONS} cells, got {len(board)}")
        remaining = data["piecesRemaining"]
        on_board = data["piecesOnBoard"]
        state = GameState(
            board=board,
            current_player=_player(data.get("currentPlayer")),
            phase=Phase(data["phase"]),
            pieces_remaining=(int(remaining["white"]), int(remaining["black"])),
            pieces_on_board=(int(on_board["white"]), int(on_board["black"])),
            selected_position=data.get("selectedPosition"),
            mill_formed=bool(data.get("millFormed", False)),
            winner=_player(data.get("winner")),
            message=data.get("message", ""),
        )
    except (KeyError, TypeError) as exc:
        raise ValueError(f"Malformed game state: {exc}") from exc
    return _validated(state)
