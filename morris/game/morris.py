"""
Core rules engine for Nine Men's Morris.

This module implements:
- The immutable game state and its construction helpers
- The four player actions (place, select/move, move, remove) under
  phase-gated validation
- Mill detection and the capture sub-phase
- Win detection for the player about to move
- Invariant checking between consecutive states

Illegal actions never raise: they return the same state with an advisory
``message``. The message takes no part in equality, so ``new == old`` tells a
caller that the action had no effect.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from loguru import logger

from morris.config import settings

from .actions import AnyAction, Action, Move, Place, Remove, Select
from .board import (
    NUM_POSITIONS,
    PIECES_PER_PLAYER,
    PLAYERS,
    WHITE,
    Board,
    check_mill,
    count_pieces,
    empty_board,
    is_removable,
    is_valid_position,
    opponent_of,
    player_name,
)
from .movegen import generate_actions, has_any_legal_move, legal_destinations
from .phases import Phase, can_transition, derive_phase, is_action_allowed, phase_description


class InvariantViolation(Exception):
    """A state the rules can never produce; indicates a defect, not a bad move."""


def _with(counts: Tuple[int, int], player: int, delta: int) -> Tuple[int, int]:
    updated = list(counts)
    updated[player] += delta
    return (updated[0], updated[1])


def _turn_message(player: int, phase: Phase) -> str:
    return f"{player_name(player)}'s turn - {phase_description(phase)}"


@dataclass(frozen=True)
class GameState:
    """Immutable Nine Men's Morris position.

    Attributes:
        board: 24 cells, each WHITE, BLACK or None for empty.
        current_player: Side to act; None once the game is over.
        phase: Phase the current player acts in.
        pieces_remaining: Pieces not yet placed, per player.
        pieces_on_board: Pieces currently on the board, per player.
        selected_position: Half-completed move during Moving/Flying, or None.
        mill_formed: True while the capture owed for a fresh mill is pending.
        winner: Set once the game is over.
        message: Advisory text for a UI; never used by the rules.
    """

    board: Board
    current_player: Optional[int] = WHITE
    phase: Phase = Phase.PLACING
    pieces_remaining: Tuple[int, int] = (PIECES_PER_PLAYER, PIECES_PER_PLAYER)
    pieces_on_board: Tuple[int, int] = (0, 0)
    selected_position: Optional[int] = None
    mill_formed: bool = False
    winner: Optional[int] = None
    message: str = field(default="", compare=False)

    # ------------------------- Construction helpers ------------------------- #
    @staticmethod
    def initial() -> "GameState":
        return GameState(
            board=empty_board(),
            current_player=WHITE,
            phase=Phase.PLACING,
            pieces_remaining=(PIECES_PER_PLAYER, PIECES_PER_PLAYER),
            pieces_on_board=(0, 0),
            message=_turn_message(WHITE, Phase.PLACING),
        )

    def reset(self) -> "GameState":
        return GameState.initial()

    # ----------------------------- Query methods ---------------------------- #
    def is_terminal(self) -> bool:
        return self.phase == Phase.GAME_OVER

    @property
    def in_placement_stage(self) -> bool:
        return any(self.pieces_remaining[p] > 0 for p in PLAYERS)

    def is_flying(self, player: int) -> bool:
        return not self.in_placement_stage and self.pieces_on_board[player] == 3

    def legal_actions(self) -> List[Action]:
        if self.current_player is None:
            return []
        return generate_actions(self, self.current_player)

    def has_lost(self, player: int) -> bool:
        """True if ``player`` cannot go on: two pieces or fewer with none left
        to place, or no legal move once all pieces are placed."""
        if self.pieces_on_board[player] <= 2 and self.pieces_remaining[player] == 0:
            return True
        if self.in_placement_stage:
            return False
        return not has_any_legal_move(self.board, player, self.pieces_on_board[player] == 3)

    # --------------------------- Action application ------------------------- #
    def apply_action(self, action: AnyAction) -> "GameState":
        if isinstance(action, Place):
            return self.place(action.to)
        if isinstance(action, Move):
            return self.move(action.src, action.to)
        if isinstance(action, Remove):
            return self.remove(action.pos)
        if isinstance(action, Select):
            return self.select_or_move(action.pos)
        raise TypeError(f"Unknown action: {action!r}")

    def place(self, pos: int) -> "GameState":
        refusal = self._check_phase(Place.kind)
        if refusal is not None:
            return refusal
        if not is_valid_position(pos):
            return self._refuse("Invalid position")
        if self.board[pos] is not None:
            return self._refuse("Position already occupied")
        player = self.current_player
        if self.pieces_remaining[player] == 0:
            return self._refuse("No pieces left to place")

        board = list(self.board)
        board[pos] = player
        new_board = tuple(board)
        remaining = _with(self.pieces_remaining, player, -1)
        on_board = _with(self.pieces_on_board, player, +1)

        logger.trace("{} places at {}", player_name(player), pos)
        if check_mill(new_board, pos, player):
            return self._commit(self._mill_formed(new_board, remaining, on_board, player))
        return self._commit(self._hand_over(new_board, remaining, on_board, player))

    def select_or_move(self, pos: int) -> "GameState":
        """Two-click movement: first click selects, second click moves."""
        refusal = self._check_phase(Select.kind)
        if refusal is not None:
            return refusal
        if not is_valid_position(pos):
            return self._refuse("Invalid position")

        if self.selected_position is None:
            if self.board[pos] != self.current_player:
                return self._refuse("Select your own piece")
            return self._commit(
                replace(
                    self,
                    selected_position=pos,
                    message=f"{player_name(self.current_player)}'s turn - Select destination",
                )
            )
        if pos == self.selected_position:
            return self._commit(
                replace(
                    self,
                    selected_position=None,
                    message=_turn_message(self.current_player, self.phase),
                )
            )
        return self.move(self.selected_position, pos)

    def move(self, src: int, to: int) -> "GameState":
        refusal = self._check_phase(Move.kind)
        if refusal is not None:
            return refusal
        if not (is_valid_position(src) and is_valid_position(to)):
            return self._refuse("Invalid position")
        player = self.current_player
        if self.board[src] != player:
            return self._refuse("Invalid move - select your own piece")
        if self.board[to] is not None:
            return self._refuse("Position occupied")
        flying = self.pieces_on_board[player] == 3
        if to not in legal_destinations(self.board, src, flying):
            return self._refuse("Invalid move - destination not adjacent")

        board = list(self.board)
        board[src] = None
        board[to] = player
        new_board = tuple(board)

        logger.trace("{} moves {} -> {}", player_name(player), src, to)
        if check_mill(new_board, to, player):
            return self._commit(
                self._mill_formed(new_board, self.pieces_remaining, self.pieces_on_board, player)
            )
        return self._commit(
            self._hand_over(new_board, self.pieces_remaining, self.pieces_on_board, player)
        )

    def remove(self, pos: int) -> "GameState":
        refusal = self._check_phase(Remove.kind)
        if refusal is not None:
            return refusal
        if not is_valid_position(pos):
            return self._refuse("Invalid position")
        player = self.current_player
        opp = opponent_of(player)
        if self.board[pos] != opp:
            return self._refuse("You can only remove opponent's pieces")
        if not is_removable(self.board, pos, opp):
            return self._refuse("Cannot remove piece from a mill unless all pieces are in mills")

        board = list(self.board)
        board[pos] = None
        new_board = tuple(board)
        on_board = _with(self.pieces_on_board, opp, -1)

        logger.trace("{} removes {} piece at {}", player_name(player), player_name(opp), pos)
        if on_board[opp] <= 2 and self.pieces_remaining[opp] == 0:
            return self._commit(self._game_over(new_board, self.pieces_remaining, on_board, player))
        return self._commit(self._hand_over(new_board, self.pieces_remaining, on_board, player))

    # ------------------------------ Internal API ---------------------------- #
    def _refuse(self, reason: str) -> "GameState":
        return replace(self, message=reason)

    def _check_phase(self, kind: str) -> Optional["GameState"]:
        if self.phase == Phase.GAME_OVER:
            logger.warning("Action refused: game is already over")
            return self._refuse("Game is over - start a new game")
        if not is_action_allowed(self.phase, kind):
            return self._refuse(f"Not allowed now - {phase_description(self.phase)}")
        return None

    def _mill_formed(
        self, board: Board, remaining: Tuple[int, int], on_board: Tuple[int, int], player: int
    ) -> "GameState":
        opp = opponent_of(player)
        if on_board[opp] == 0:
            # Nothing to capture; the turn passes as if no mill had been formed.
            return self._hand_over(board, remaining, on_board, player)
        logger.trace("{} formed a mill", player_name(player))
        return GameState(
            board=board,
            current_player=player,
            phase=Phase.REMOVING,
            pieces_remaining=remaining,
            pieces_on_board=on_board,
            selected_position=None,
            mill_formed=True,
            winner=None,
            message=f"{player_name(player)} formed a mill! Remove an opponent's piece",
        )

    def _hand_over(
        self, board: Board, remaining: Tuple[int, int], on_board: Tuple[int, int], mover: int
    ) -> "GameState":
        nxt = opponent_of(mover)
        phase = derive_phase(remaining, on_board, nxt)
        candidate = GameState(
            board=board,
            current_player=nxt,
            phase=phase,
            pieces_remaining=remaining,
            pieces_on_board=on_board,
            message=_turn_message(nxt, phase),
        )
        if phase != Phase.PLACING and candidate.has_lost(nxt):
            return self._game_over(board, remaining, on_board, mover)
        return candidate

    def _game_over(
        self, board: Board, remaining: Tuple[int, int], on_board: Tuple[int, int], winner: int
    ) -> "GameState":
        logger.trace("{} wins", player_name(winner))
        return GameState(
            board=board,
            current_player=None,
            phase=Phase.GAME_OVER,
            pieces_remaining=remaining,
            pieces_on_board=on_board,
            selected_position=None,
            mill_formed=False,
            winner=winner,
            message=f"{player_name(winner)} wins!",
        )

    def _commit(self, new_state: "GameState") -> "GameState":
        try:
            check_invariants(new_state, previous=self)
        except InvariantViolation as exc:
            if settings.strict_invariants:
                raise
            logger.error(f"Refusing action that would corrupt the game state: {exc}")
            return self._refuse("Action refused - internal consistency check failed")
        return new_state


def check_invariants(state: GameState, previous: Optional[GameState] = None) -> None:
    """Raise ``InvariantViolation`` if ``state`` could not have come from the rules."""
    if len(state.board) != NUM_POSITIONS:
        raise InvariantViolation(f"board has {len(state.board)} cells")
    if any(cell not in (None, *PLAYERS) for cell in state.board):
        raise InvariantViolation("board holds an unknown cell value")

    for p in PLAYERS:
        actual = count_pieces(state.board, p)
        if state.pieces_on_board[p] != actual:
            raise InvariantViolation(
                f"{player_name(p)} has {actual} pieces on the board but the count says {state.pieces_on_board[p]}"
            )
        if not 0 <= state.pieces_remaining[p] <= PIECES_PER_PLAYER:
            raise InvariantViolation(f"{player_name(p)} pieces remaining out of range")
        if state.pieces_on_board[p] + state.pieces_remaining[p] > PIECES_PER_PLAYER:
            raise InvariantViolation(f"{player_name(p)} has more than {PIECES_PER_PLAYER} pieces")

    if state.phase == Phase.GAME_OVER:
        if state.winner is None or state.current_player is not None:
            raise InvariantViolation("a finished game needs a winner and no player to move")
    else:
        if state.current_player not in PLAYERS:
            raise InvariantViolation("no player to move in a running game")
        if state.winner is not None:
            raise InvariantViolation("winner set before the game is over")

    if state.phase == Phase.FLYING and state.pieces_on_board[state.current_player] != 3:
        raise InvariantViolation("flying without exactly three pieces")
    if state.phase == Phase.REMOVING and not state.mill_formed:
        raise InvariantViolation("removing without a mill")
    if state.selected_position is not None:
        if not is_valid_position(state.selected_position):
            raise InvariantViolation(f"selected position {state.selected_position!r} is off the board")
        if state.phase not in (Phase.MOVING, Phase.FLYING):
            raise InvariantViolation(f"selection held during {state.phase.value}")
        if state.board[state.selected_position] != state.current_player:
            raise InvariantViolation("selected position does not hold the player's piece")

    if previous is not None:
        if any(state.pieces_remaining[p] > previous.pieces_remaining[p] for p in PLAYERS):
            raise InvariantViolation("pieces remaining increased")
        if state.phase != previous.phase and not can_transition(previous.phase, state.phase):
            raise InvariantViolation(
                f"illegal phase transition {previous.phase.value} -> {state.phase.value}"
            )


# Module-level spellings of the state methods, for callers that prefer functions.
def initialize_game() -> GameState:
    return GameState.initial()


def place_piece(state: GameState, pos: int) -> GameState:
    return state.place(pos)


def select_piece(state: GameState, pos: int) -> GameState:
    return state.select_or_move(pos)


def move_piece(state: GameState, src: int, to: int) -> GameState:
    return state.move(src, to)


def remove_piece(state: GameState, pos: int) -> GameState:
    return state.remove(pos)
