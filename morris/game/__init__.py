from .actions import Action, AnyAction, Move, Place, Remove, Select
from .board import BLACK, WHITE, check_mill, is_removable, opponent_of
from .morris import GameState, InvariantViolation, check_invariants
from .movegen import generate_actions, has_any_legal_move, legal_destinations
from .phases import Phase, derive_phase
