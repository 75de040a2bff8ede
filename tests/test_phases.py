from morris.game import BLACK, WHITE, Phase, derive_phase
from morris.game.phases import PHASE_TRANSITIONS, can_transition, is_action_allowed, phase_description


def test_derive_phase():
    assert derive_phase((9, 9), (0, 0), WHITE) == Phase.PLACING
    assert derive_phase((0, 1), (9, 8), WHITE) == Phase.PLACING
    assert derive_phase((0, 0), (9, 3), WHITE) == Phase.MOVING
    assert derive_phase((0, 0), (9, 3), BLACK) == Phase.FLYING
    assert derive_phase((0, 0), (4, 4), BLACK) == Phase.MOVING


def test_game_over_is_terminal():
    assert PHASE_TRANSITIONS[Phase.GAME_OVER] == frozenset()
    for phase in Phase:
        if phase != Phase.GAME_OVER:
            assert can_transition(phase, Phase.GAME_OVER)
    assert not can_transition(Phase.REMOVING, Phase.REMOVING)
    assert not can_transition(Phase.MOVING, Phase.PLACING)


def test_actions_per_phase():
    assert is_action_allowed(Phase.PLACING, "place")
    assert not is_action_allowed(Phase.PLACING, "move")
    assert is_action_allowed(Phase.FLYING, "select")
    assert is_action_allowed(Phase.REMOVING, "remove")
    assert not is_action_allowed(Phase.GAME_OVER, "place")


def test_phase_values_and_descriptions():
    assert Phase.GAME_OVER.value == "gameOver"
    assert Phase("flying") is Phase.FLYING
    assert phase_description(Phase.REMOVING) == "Remove an opponent's piece"
