"""
agent_factory.py
----------------
Centralised helper to configure and create PolicyIterationAgent instances.

Edit the defaults here (γ, δ, safety caps, verbosity) instead of hunting
through game_data.py or other files.  Any module can simply:

    from agent_factory import make_agent
    agent = make_agent()                               # tic-tac-toe, γ=0.9, quiet
    agent = make_agent(mdp, gamma=0.95, verbose=True)
    agent = make_agent(mdp, policy_file="ttt.pol")     # load if present, else train + save
"""

from pathlib import Path
from typing import Any, Optional, Union

from game_mdp import GameMDP
from pi_agent import PolicyIterationAgent
from policy_iteration import DEFAULT_MAX_ITERATIONS, DEFAULT_MAX_SWEEPS

DEFAULT_GAMMA = 0.9
DEFAULT_EPSILON = 0.1
DEFAULT_BOARD = 'ttt'


def make_agent(
    mdp: Optional[Any] = None,
    *,
    gamma: float = DEFAULT_GAMMA,
    epsilon: float = DEFAULT_EPSILON,
    seed: Optional[int] = None,
    verbose: bool = False,
    policy_file: Optional[Union[str, Path]] = None,
    train: bool = True,
    **kwargs: Any
) -> PolicyIterationAgent:
    """
    Build and return a ready-to-play PolicyIterationAgent.

    Args
    ----
    mdp         : Game/transition model; defaults to tic-tac-toe vs a random opponent.
    gamma       : Discount factor (0 ≤ γ < 1).
    epsilon     : Policy-evaluation tolerance δ (> 0).
    seed        : Seed for the random initial policy.
    verbose     : Master verbosity flag controlling most console prints.
    policy_file : If the file exists the policy is loaded from it and training
                  is skipped; otherwise the trained policy is written there.
    train       : If False, return the agent initialised but untrained.
    **kwargs    : Forwarded to the PolicyIterationAgent constructor
                  (max_sweeps, max_iterations).

    Returns
    -------
    PolicyIterationAgent instance with the requested configuration.
    """
    if mdp is None:
        mdp = GameMDP.from_preset(DEFAULT_BOARD)
    kwargs.setdefault('max_sweeps', DEFAULT_MAX_SWEEPS)
    kwargs.setdefault('max_iterations', DEFAULT_MAX_ITERATIONS)
    agent = PolicyIterationAgent(
        mdp,
        discount_factor=gamma,
        epsilon=epsilon,
        seed=seed,
        verbose=verbose,
        **kwargs,
    )

    if policy_file is not None and Path(policy_file).exists():
        agent.load_policy(policy_file)
    elif train:
        agent.train()
        if policy_file is not None:
            agent.save_policy(policy_file)
    return agent
