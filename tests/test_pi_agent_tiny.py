import sys, pathlib
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

import numpy as np

from game_mdp import GameMDP
from pi_agent import PolicyIterationAgent


def test_pi_agent_tiny_board():
    """
    Sanity-check: on a 3×2 Connect-3 board with γ = 0.9, the value vector V
    found by policy iteration must satisfy (I − γP) V ≈ R for the final policy.
    """
    agent = PolicyIterationAgent(GameMDP.from_preset('tiny'), discount_factor=0.9,
                                 epsilon=1e-10, seed=0, verbose=False)
    agent.train()

    V = agent.values.as_array()
    P, R = agent.build_PR_matrices(agent.policy)

    # Verify Bellman consistency: (I − γP) V ≈ R
    lhs = (np.eye(len(agent.states)) - agent.gamma * P) @ V
    assert np.allclose(lhs, R, atol=1e-6), "Bellman equation not satisfied on tiny board"


def test_iterative_values_match_linear_solve():
    agent = PolicyIterationAgent(GameMDP.from_preset('tiny', agent_first=False),
                                 discount_factor=0.8, epsilon=1e-10, seed=1, verbose=False)
    agent.train()

    exact = agent.policy_evaluate_linear()
    for s in agent.states:
        assert abs(exact[s] - agent.value_of(s)) < 1e-6
        if agent.mdp.is_terminal(s):
            assert agent.value_of(s) == 0.0


def test_transition_rows_are_stochastic():
    agent = PolicyIterationAgent(GameMDP.from_preset('tiny'), seed=2, verbose=False)
    agent.train()
    P, _ = agent.build_PR_matrices()

    for i, s in enumerate(agent.states):
        expected = 0.0 if agent.mdp.is_terminal(s) else 1.0
        assert abs(P[i].sum() - expected) < 1e-9
