"""
--------------------------------------------------------------------------
Policy-iteration agent  —  one training run and the resulting player
--------------------------------------------------------------------------

The agent owns everything a single training run needs: the model, the
value table, the mutable policy and the transition cache.  Once `train()`
returns, the policy is frozen and the agent can be used as a player
(`choose_action`) or saved to disk (`save_policy`).

Verification helpers
--------------------
* `build_PR_matrices(policy)` returns the |S|×|S| transition matrix P and
  reward vector R of a policy (terminal rows are zero).
* `policy_evaluate_linear(policy)` solves V = (I − γP)⁻¹R exactly with
  numpy; `tests/test_pi_agent_tiny.py` checks the iterative values
  against it.
--------------------------------------------------------------------------
"""

import random
import time
from pathlib import Path
from typing import Any, Dict, Hashable, List, Optional, Tuple, Union

import numpy as np

import policy_iteration
from mdp_errors import ConfigurationError
from policy import Policy
from policy_iteration import (DEFAULT_MAX_ITERATIONS, DEFAULT_MAX_SWEEPS, EvaluationResult,
                              TransitionTable, random_policy, validate_parameters,
                              validate_policy)
from value_table import ValueTable


class PolicyIterationAgent:
    """
    Policy-iteration agent for a finite, fully enumerable game model.
    """

    def __init__(self, mdp: Any, discount_factor: float = 0.9, epsilon: float = 0.1,
                 max_sweeps: int = DEFAULT_MAX_SWEEPS, max_iterations: int = DEFAULT_MAX_ITERATIONS,
                 seed: Optional[int] = None, verbose: bool = True):
        """
        Initialize the agent.

        Args:
            mdp: Game/transition model (see policy_iteration for the contract)
            discount_factor: The discount factor for future rewards (gamma), in [0, 1)
            epsilon: The convergence threshold for policy evaluation
            max_sweeps: Safety cap on sweeps per evaluation
            max_iterations: Safety cap on (evaluate, improve) cycles
            seed: Seed for the random initial policy
            verbose: Master verbosity flag controlling console prints
        """
        validate_parameters(discount_factor, epsilon, max_sweeps, max_iterations)
        self.mdp = mdp
        self.gamma = discount_factor
        self.epsilon = epsilon
        self.max_sweeps = max_sweeps
        self.max_iterations = max_iterations
        self.seed = seed
        self.rng = random.Random(seed)
        self.verbose = verbose

        self.values: Optional[ValueTable] = None
        self.policy: Optional[Policy] = None
        self.transitions: Optional[TransitionTable] = None

        # ------------------------------------------------------------------
        # Instrumentation counters
        # ------------------------------------------------------------------
        self.pi_iterations: int = 0          # (evaluate, improve) cycles in last run
        self.eval_sweeps: int = 0            # evaluation sweeps summed over last run
        self.last_eval_delta: float = 0.0    # final delta of the last evaluation
        self.policy_updates_last: int = 0    # states that changed action in the last improvement
        self.training_time: float = 0.0
        self.value_history: List[np.ndarray] = []  # V after each evaluation

    def set_epsilon(self, epsilon: float) -> None:
        """Set the convergence threshold for policy evaluation."""
        validate_parameters(self.gamma, epsilon, self.max_sweeps, self.max_iterations)
        self.epsilon = epsilon

    def set_discount_factor(self, discount_factor: float) -> None:
        """Set the discount factor for future rewards."""
        validate_parameters(discount_factor, self.epsilon, self.max_sweeps, self.max_iterations)
        self.gamma = discount_factor

    def _vprint(self, *args, **kwargs):
        """Verbose‑controlled print."""
        if self.verbose:
            print(*args, **kwargs)

    @property
    def states(self) -> List[Hashable]:
        return self.values.states if self.values is not None else []

    @property
    def is_trained(self) -> bool:
        return self.policy is not None and self.policy.frozen

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------
    def initialize(self) -> None:
        """Enumerate the states, zero the value table and draw a random legal policy."""
        start_time = time.time()
        self.values = ValueTable(self.mdp.enumerate_states())
        self.transitions = TransitionTable(self.mdp, self.values)
        self.policy = random_policy(self.mdp, self.values.states, self.rng)
        self.value_history = []
        self._vprint(f"Enumerated {len(self.values)} states "
                     f"({len(self.policy)} with actions) in {time.time() - start_time:.2f} seconds.")

    def set_policy(self, policy: Union[Policy, Dict[Hashable, Hashable]]) -> None:
        """
        Replace the initial policy.

        Raises:
            ConfigurationError: if some state gets an illegal action or none at all
        """
        if self.values is None:
            self.initialize()
        policy = policy.copy() if isinstance(policy, Policy) else Policy(policy)
        validate_policy(policy, self.mdp, self.values.states)
        self.policy = policy

    def evaluate_policy(self) -> EvaluationResult:
        """Single evaluation of the current policy (updates `self.values`)."""
        if self.values is None:
            self.initialize()
        result = policy_iteration.evaluate_policy(
            self.policy, self.values, self.mdp, self.gamma, self.epsilon,
            max_sweeps=self.max_sweeps, transitions=self.transitions, verbose=self.verbose)
        self.eval_sweeps += result.sweeps
        self.last_eval_delta = result.delta
        self.value_history.append(self.values.as_array())
        return result

    def improve_policy(self) -> bool:
        """Single greedy improvement pass; True if any state changed action."""
        if self.values is None:
            self.initialize()
        _, changed = policy_iteration.improve_policy(
            self.policy, self.values, self.mdp, self.gamma,
            transitions=self.transitions, verbose=self.verbose)
        return changed

    def train(self) -> Policy:
        """
        Run policy iteration to a stable policy.

        Returns:
            The frozen optimal policy (also kept as `self.policy`).
        """
        if self.values is None:
            self.initialize()
        if self.policy.frozen:
            self.policy = self.policy.copy()

        start_time = time.time()
        self.pi_iterations = 0
        self.eval_sweeps = 0
        self.value_history = []

        def record(iteration: int, evaluation: EvaluationResult, updates: int) -> None:
            self.pi_iterations = iteration
            self.eval_sweeps += evaluation.sweeps
            self.last_eval_delta = evaluation.delta
            self.policy_updates_last = updates
            self.value_history.append(self.values.as_array())

        self.policy = policy_iteration.train(
            self.policy, self.values, self.mdp, self.gamma, self.epsilon,
            max_sweeps=self.max_sweeps, max_iterations=self.max_iterations,
            transitions=self.transitions, verbose=self.verbose, on_iteration=record)
        self.training_time = time.time() - start_time
        self.print_stats("Policy iteration summary")
        return self.policy

    # ------------------------------------------------------------------
    # Playing
    # ------------------------------------------------------------------
    def choose_action(self, state: Hashable) -> Optional[Hashable]:
        """Action of the trained policy for `state`; None for terminal or unknown states."""
        if self.policy is None:
            raise RuntimeError("agent has no policy; call train() or load_policy() first")
        return self.policy.get(state)

    def value_of(self, state: Hashable) -> float:
        return self.values[state]

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def save_policy(self, path: Union[str, Path]) -> None:
        """Write the trained policy as one '<state>\\t<action>' line per state."""
        if not self.is_trained:
            raise RuntimeError("only a trained (frozen) policy can be saved")
        header = {'epsilon': self.epsilon, 'states': len(self.policy)}
        header.update(self._model_header())
        self.policy.save(path, self.mdp.encode_state, self.mdp.encode_action, header=header)
        self._vprint(f"Saved policy for {len(self.policy)} states to {path}")

    def _model_header(self) -> Dict[str, str]:
        """Settings a saved policy depends on, as written in the file header."""
        header = {'gamma': float(self.gamma)}
        if hasattr(self.mdp, 'describe'):
            header.update(self.mdp.describe())
        return {key: str(value) for key, value in header.items()}

    def load_policy(self, path: Union[str, Path]) -> Policy:
        """
        Load a policy written by `save_policy` instead of training.

        Raises:
            ConfigurationError: if the file does not match this model
        """
        if self.values is None:
            self.initialize()
        saved = Policy.read_header(path)
        stale = [f"{key}={saved[key]} (model has {value})"
                 for key, value in self._model_header().items()
                 if key in saved and saved[key] != value]
        if stale:
            raise ConfigurationError(f"policy file {path} was trained with different settings: "
                                     + ", ".join(stale))
        try:
            policy = Policy.load(path, self.mdp.decode_state, self.mdp.decode_action)
        except (KeyError, ValueError) as e:
            raise ConfigurationError(f"cannot read policy file {path}: {e}") from e
        validate_policy(policy, self.mdp, self.values.states)
        self.policy = policy
        self._vprint(f"Loaded policy for {len(policy)} states from {path}")
        return policy

    # ------------------------------------------------------------------
    # Exact evaluation with numpy (verification / analysis)
    # ------------------------------------------------------------------
    def build_PR_matrices(self, policy: Optional[Policy] = None) -> Tuple[np.ndarray, np.ndarray]:
        """
        Return (P, R) for a deterministic policy π over the enumerated states.

        • P[i, j] = Σ prob of the outcomes of π(s_i) that land in s_j
        • R[i]    = Σ prob · reward of those outcomes
        Rows of terminal states (and states without an action) are zero.
        """
        policy = self.policy if policy is None else policy
        n = len(self.values)
        P = np.zeros((n, n))
        R = np.zeros(n)
        for i, s in enumerate(self.values.states):
            if self.mdp.is_terminal(s) or s not in policy:
                continue
            for prob, j, reward in self.transitions.outcomes(s, policy[s]):
                P[i, j] += prob
                R[i] += prob * reward
        return P, R

    def policy_evaluate_linear(self, policy: Optional[Policy] = None) -> Dict[Hashable, float]:
        """Evaluate a policy exactly by solving (I − γP)V = R."""
        P, R = self.build_PR_matrices(policy)
        V = np.linalg.solve(np.eye(len(R)) - self.gamma * P, R)
        return {s: float(V[i]) for i, s in enumerate(self.values.states)}

    # ------------------------------------------------------------------
    # Pretty‑print instrumentation after a run
    # ------------------------------------------------------------------
    def print_stats(self, label: str = "Policy iteration stats") -> None:
        """Print key instrumentation counters in a single line."""
        self._vprint(f"{label}: "
                     f"|S|={len(self.states)}, "
                     f"PI iterations={self.pi_iterations}, "
                     f"eval sweeps={self.eval_sweeps}, "
                     f"final Δ={self.last_eval_delta:.6f}, "
                     f"last policy updates={self.policy_updates_last}, "
                     f"time={self.training_time:.2f}s")
