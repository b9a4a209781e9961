import sys, pathlib
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

import numpy as np
import pytest

from game_board import GameBoard
from game_mdp import GameMDP
from game_state import GameState


def empty_tiny_state():
    rules = GameBoard(rows=2, cols=3, win_condition=3, gravity=True)
    return GameState(np.zeros((2, 3)), 0, rules)


def test_equal_states_hash_equal():
    a = empty_tiny_state().apply_action(1)
    b = empty_tiny_state().apply_action(1)

    assert a == b
    assert hash(a) == hash(b)
    assert len({a, b}) == 1
    assert a != empty_tiny_state().apply_action(2)
    assert GameState(a.board, 0, a.game_board) != a  # same pieces, other player to move


def test_horizontal_win_on_bottom_row():
    state = empty_tiny_state()
    for action in (0, 0, 1, 1, 2):
        state = state.apply_action(action)

    assert state.winner() == 1
    assert state.is_terminal()
    assert state.get_valid_actions() == []
    with pytest.raises(ValueError):
        state.apply_action(2)


def test_full_column_is_not_a_legal_action():
    state = empty_tiny_state().apply_action(0).apply_action(0)

    assert state.get_valid_actions() == [1, 2]
    with pytest.raises(ValueError):
        state.apply_action(0)


def test_key_round_trip():
    state = empty_tiny_state().apply_action(2).apply_action(2).apply_action(0)
    key = state.get_key()

    assert key == "1:10:00:12"
    assert GameState.from_key(key, state.game_board) == state
    with pytest.raises(ValueError):
        GameState.from_key("1:10:00", state.game_board)


def test_tic_tac_toe_cells():
    mdp = GameMDP()
    start = mdp.initial_state()

    assert mdp.legal_actions(start) == list(range(9))
    after = start.apply_action(4)
    assert after.board[1][1] == 1
    assert 4 not in after.get_valid_actions()


def test_transitions_are_distributions_over_the_universe():
    mdp = GameMDP.from_preset('tiny')
    states = mdp.enumerate_states()
    universe = set(states)

    assert len(universe) == len(states)
    for s in states:
        actions = mdp.legal_actions(s)
        assert (actions == []) == mdp.is_terminal(s)
        if not mdp.is_terminal(s):
            assert s.turn == mdp.agent_turn
        for a in actions:
            outcomes = mdp.transitions(s, a)
            assert sum(o.prob for o in outcomes) == pytest.approx(1.0)
            assert all(o.next_state in universe for o in outcomes)


def test_opponent_reply_probabilities_are_uniform():
    mdp = GameMDP.from_preset('tiny')
    outcomes = mdp.transitions(mdp.initial_state(), 1)

    assert len(outcomes) == 3
    assert all(o.prob == pytest.approx(1 / 3) for o in outcomes)
    assert all(o.reward == mdp.living_reward for o in outcomes)


def test_rewards_follow_the_agent_side():
    state = empty_tiny_state()
    for action in (0, 0, 1, 1, 2):
        state = state.apply_action(action)

    assert GameMDP.from_preset('tiny').reward(state) == 10.0
    assert GameMDP.from_preset('tiny', agent_first=False).reward(state) == -10.0


def test_agent_second_sees_only_its_own_turns():
    mdp = GameMDP.from_preset('tiny', agent_first=False)
    states = mdp.enumerate_states()

    assert mdp.initial_state() not in states
    assert all(s.turn == 1 for s in states if not s.is_terminal())


def test_illegal_action_has_no_transitions():
    mdp = GameMDP()
    start = mdp.initial_state()

    assert not mdp.is_legal(start, 9)
    with pytest.raises(ValueError):
        mdp.transitions(start, 9)


def test_unknown_preset():
    with pytest.raises(ValueError):
        GameMDP.from_preset('go')
