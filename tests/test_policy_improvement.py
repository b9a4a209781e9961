import sys, pathlib
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

import random

import numpy as np
import pytest

from mdp_model import TabularMDP
from policy import Policy
from policy_iteration import evaluate_policy, improve_policy, random_policy, train
from value_table import ValueTable


def one_step_mdp(rewards):
    """State 'S' with one action per reward, each ending the game in 'T'."""
    actions = [f"a{i}" for i in range(len(rewards))]
    return TabularMDP(
        states=['S', 'T'],
        terminal=['T'],
        actions={'S': actions},
        outcomes={('S', a): [(1.0, 'T', r)] for a, r in zip(actions, rewards)},
    )


def test_ties_resolve_to_first_action():
    mdp = one_step_mdp([5.0, 5.0])
    values = ValueTable(mdp.enumerate_states())
    policy = Policy({'S': 'a1'})

    policy, changed = improve_policy(policy, values, mdp, discount=0.9)

    assert changed
    assert policy['S'] == 'a0'


def test_later_higher_value_beats_earlier_ties():
    values_for = {
        (5.0, 7.0, 7.0): 'a1',
        (7.0, 5.0, 7.0): 'a0',
        (5.0, 5.0, 7.0): 'a2',
    }
    for rewards, expected in values_for.items():
        mdp = one_step_mdp(list(rewards))
        values = ValueTable(mdp.enumerate_states())
        policy, _ = improve_policy(Policy({'S': 'a0'}), values, mdp, discount=0.9)
        assert policy['S'] == expected, rewards


def test_tie_break_is_reproducible_across_runs():
    mdp = one_step_mdp([3.0, 3.0, 1.0])
    chosen = []
    for seed in (1, 2, 3):
        values = ValueTable(mdp.enumerate_states())
        policy = random_policy(mdp, values.states, random.Random(seed))
        final = train(policy, values, mdp, discount=0.9, tolerance=1e-6)
        chosen.append(final['S'])
    assert chosen == ['a0', 'a0', 'a0']


def test_improvement_does_not_touch_values():
    mdp = one_step_mdp([1.0, 2.0])
    values = ValueTable(mdp.enumerate_states())
    policy = Policy({'S': 'a0'})
    evaluate_policy(policy, values, mdp, discount=0.9, tolerance=1e-9)
    before = values.as_array()

    improve_policy(policy, values, mdp, discount=0.9)

    assert np.array_equal(values.as_array(), before)


def test_converged_policy_is_a_fixed_point():
    mdp = one_step_mdp([1.0, 2.0, 0.5])
    values = ValueTable(mdp.enumerate_states())
    final = train(Policy({'S': 'a0'}), values, mdp, discount=0.9, tolerance=1e-9)

    again = final.copy()
    result, changed = improve_policy(again, values, mdp, discount=0.9)

    assert result is again
    assert not changed
    assert again == final
    assert final['S'] == 'a1'


def test_frozen_policy_cannot_be_improved():
    mdp = one_step_mdp([1.0, 2.0])
    values = ValueTable(mdp.enumerate_states())
    policy = Policy({'S': 'a0'}).freeze()

    with pytest.raises(TypeError):
        improve_policy(policy, values, mdp, discount=0.9)
