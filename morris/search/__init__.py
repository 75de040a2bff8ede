from .evaluator import evaluate
from .hints import Hint, generate_hint, get_hint_options, simulate_action
from .minimax import MinimaxAI, SearchResult, get_ai_move, get_best_move
