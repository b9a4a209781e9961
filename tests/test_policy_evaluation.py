import sys, pathlib
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

import pytest

from mdp_errors import DeadEndWarning, ModelInconsistencyError, NonConvergenceWarning
from mdp_model import TabularMDP
from policy import Policy
from policy_iteration import evaluate_policy
from value_table import ValueTable


def chain_mdp():
    """A --go--> B (terminal) with reward 10."""
    return TabularMDP(
        states=['A', 'B'],
        terminal=['B'],
        actions={'A': ['go']},
        outcomes={('A', 'go'): [(1.0, 'B', 10.0)]},
    )


def loop_mdp():
    """Two non-terminal states that feed each other, plus an exit."""
    return TabularMDP(
        states=['s0', 's1', 'T'],
        terminal=['T'],
        actions={'s0': ['stay'], 's1': ['go']},
        outcomes={
            ('s0', 'stay'): [(0.5, 's0', 1.0), (0.5, 's1', 0.0)],
            ('s1', 'go'): [(0.8, 's0', 2.0), (0.2, 'T', -1.0)],
        },
    )


def test_two_state_chain():
    mdp = chain_mdp()
    values = ValueTable(mdp.enumerate_states())
    result = evaluate_policy(Policy({'A': 'go'}), values, mdp, discount=0.9, tolerance=1e-6)

    assert result.converged
    assert values['A'] == pytest.approx(10.0, abs=1e-6)
    assert values['B'] == 0.0


def test_terminal_values_are_pinned_to_zero():
    mdp = chain_mdp()
    values = ValueTable(mdp.enumerate_states())
    values['B'] = 5.0  # stale estimate

    evaluate_policy(Policy({'A': 'go'}), values, mdp, discount=0.9, tolerance=1e-6)

    assert values['B'] == 0.0
    assert values['A'] == pytest.approx(10.0)


def test_bellman_residual_below_tolerance():
    mdp = loop_mdp()
    policy = Policy({'s0': 'stay', 's1': 'go'})
    values = ValueTable(mdp.enumerate_states())
    gamma, delta = 0.9, 1e-4

    result = evaluate_policy(policy, values, mdp, gamma, delta)

    assert result.converged and result.delta < delta
    for s in ('s0', 's1'):
        backup = sum(p * (r + gamma * values[s2]) for p, s2, r in mdp.transitions(s, policy[s]))
        assert abs(values[s] - backup) < delta


def test_universe_without_non_terminal_states():
    mdp = TabularMDP(states=['T'], terminal=['T'], actions={}, outcomes={})
    values = ValueTable(mdp.enumerate_states())

    result = evaluate_policy(Policy(), values, mdp, discount=0.5, tolerance=1e-3)

    assert result.sweeps == 1
    assert result.converged
    assert values['T'] == 0.0


def test_state_without_actions_keeps_its_value():
    mdp = TabularMDP(
        states=['A', 'D', 'T'],
        terminal=['T'],
        actions={'A': ['go']},
        outcomes={('A', 'go'): [(1.0, 'D', 1.0)]},
    )
    values = ValueTable(mdp.enumerate_states())
    values['D'] = 3.0

    with pytest.warns(DeadEndWarning):
        result = evaluate_policy(Policy({'A': 'go'}), values, mdp, discount=0.5, tolerance=1e-9)

    assert result.dead_ends == 1
    assert values['D'] == 3.0
    assert values['A'] == pytest.approx(1.0 + 0.5 * 3.0)


def test_sweep_cap_warns_and_returns_best_effort():
    mdp = TabularMDP(
        states=['s'],
        terminal=[],
        actions={'s': ['loop']},
        outcomes={('s', 'loop'): [(1.0, 's', 1.0)]},
    )
    values = ValueTable(mdp.enumerate_states())

    with pytest.warns(NonConvergenceWarning):
        result = evaluate_policy(Policy({'s': 'loop'}), values, mdp,
                                 discount=0.99, tolerance=1e-9, max_sweeps=5)

    assert not result.converged
    assert result.sweeps == 5
    assert values['s'] > 0.0


def test_probabilities_must_sum_to_one():
    mdp = TabularMDP(
        states=['A', 'B'],
        terminal=['B'],
        actions={'A': ['go']},
        outcomes={('A', 'go'): [(0.9, 'B', 1.0)]},
    )
    values = ValueTable(mdp.enumerate_states())

    with pytest.raises(ModelInconsistencyError):
        evaluate_policy(Policy({'A': 'go'}), values, mdp, discount=0.9, tolerance=1e-6)


def test_probabilities_must_lie_in_unit_interval():
    # sums to one, but neither entry is a probability
    mdp = TabularMDP(
        states=['A', 'B'],
        terminal=['B'],
        actions={'A': ['go']},
        outcomes={('A', 'go'): [(1.5, 'B', 0.0), (-0.5, 'B', 0.0)]},
    )
    values = ValueTable(mdp.enumerate_states())

    with pytest.raises(ModelInconsistencyError, match="out of range"):
        evaluate_policy(Policy({'A': 'go'}), values, mdp, discount=0.9, tolerance=1e-6)


def test_successor_outside_universe_is_rejected():
    mdp = TabularMDP(
        states=['A', 'B'],
        terminal=['B'],
        actions={'A': ['go']},
        outcomes={('A', 'go'): [(1.0, 'Z', 1.0)]},
    )
    values = ValueTable(mdp.enumerate_states())

    with pytest.raises(ModelInconsistencyError):
        evaluate_policy(Policy({'A': 'go'}), values, mdp, discount=0.9, tolerance=1e-6)
