"""
--------------------------------------------------------------------------
Policy Iteration  —  evaluation, improvement and the training loop
--------------------------------------------------------------------------

Markov Decision Process contract
--------------------------------
The functions below never look inside a state.  They talk to a *model*
object that provides

    enumerate_states()        ->  every state, terminal ones included
    is_terminal(s)            ->  bool
    legal_actions(s)          ->  ordered list of actions (empty iff terminal)
    is_legal(s, a)            ->  bool
    transitions(s, a)         ->  ordered list of (prob, s', reward)

`game_mdp.GameMDP` and `mdp_model.TabularMDP` both satisfy it.

Pipeline
--------
1. **Initialise**  V(s)=0 for every state, random legal action per state.
2. **Evaluate**    in-place Bellman expectation sweeps
                   V(s) ← Σ p·(r + γ·V(s'))  for a = π(s)
                   until the largest change of a sweep is < δ.
3. **Improve**     one-step lookahead over every legal action; the first
                   action (in model order) with the highest value wins.
4. Repeat 2–3 until step 3 changes nothing; the policy is then frozen.

Both loops are capped (`max_sweeps`, `max_iterations`); hitting a cap
raises `NonConvergenceWarning` and returns the best-effort result.
--------------------------------------------------------------------------
"""

import math
import random
import warnings
from numbers import Real
from typing import Any, Callable, Dict, Hashable, Iterable, List, NamedTuple, Optional, Tuple

from mdp_errors import ConfigurationError, DeadEndWarning, ModelInconsistencyError, NonConvergenceWarning
from policy import Policy
from value_table import ValueTable

PROB_TOLERANCE = 1e-9
DEFAULT_MAX_SWEEPS = 10_000
DEFAULT_MAX_ITERATIONS = 1_000


class EvaluationResult(NamedTuple):
    sweeps: int        # full sweeps performed
    delta: float       # largest value change in the last sweep
    converged: bool    # False when max_sweeps was hit
    dead_ends: int     # non-terminal states without a policy action


# ----------------------------------------------------------------------
# Parameter / policy validation
# ----------------------------------------------------------------------
def validate_parameters(discount: float, tolerance: float,
                        max_sweeps: int = DEFAULT_MAX_SWEEPS,
                        max_iterations: int = DEFAULT_MAX_ITERATIONS) -> None:
    """Raise ConfigurationError unless 0 ≤ γ < 1, δ > 0 and both caps are positive ints."""
    if not isinstance(discount, Real) or not math.isfinite(discount) or not 0.0 <= discount < 1.0:
        raise ConfigurationError(f"discount factor must be in [0, 1), got {discount!r}")
    if not isinstance(tolerance, Real) or not math.isfinite(tolerance) or tolerance <= 0.0:
        raise ConfigurationError(f"tolerance must be a positive number, got {tolerance!r}")
    for name, cap in (("max_sweeps", max_sweeps), ("max_iterations", max_iterations)):
        if isinstance(cap, bool) or not isinstance(cap, int) or cap < 1:
            raise ConfigurationError(f"{name} must be a positive integer, got {cap!r}")


def validate_policy(policy: Policy, model: Any, states: Iterable[Hashable]) -> None:
    """
    Check that `policy` is a legal starting point for training.

    Every non-terminal state that has legal actions needs an action, every
    action must be legal for its state, and no terminal state or state
    outside the universe may carry one.
    """
    universe = set()
    for s in states:
        universe.add(s)
        if model.is_terminal(s):
            if s in policy:
                raise ConfigurationError(f"policy assigns an action to terminal state {s!r}")
            continue
        if s not in policy:
            if model.legal_actions(s):
                raise ConfigurationError(f"policy has no action for non-terminal state {s!r}")
            continue
        action = policy[s]
        if not model.is_legal(s, action):
            raise ConfigurationError(f"policy action {action!r} is illegal in state {s!r}")
    for s in policy:
        if s not in universe:
            raise ConfigurationError(f"policy covers state {s!r} outside the enumerated universe")


def random_policy(model: Any, states: Iterable[Hashable], rng: Optional[random.Random] = None) -> Policy:
    """Pick uniformly among the legal actions of every non-terminal state."""
    rng = rng or random.Random()
    policy = Policy()
    for s in states:
        if model.is_terminal(s):
            continue
        actions = list(model.legal_actions(s))
        if actions:
            policy[s] = rng.choice(actions)
    return policy


# ----------------------------------------------------------------------
# Transition cache
# ----------------------------------------------------------------------
class TransitionTable:
    """
    Memoised, validated view of `model.transitions`.

    Outcomes are stored as (prob, successor index, reward) so the sweeps
    can index the value vector directly.  Each (state, action) pair is
    checked the first time it is requested.
    """

    def __init__(self, model: Any, values: ValueTable):
        self.model = model
        self.values = values
        self._cache: Dict[Tuple[Hashable, Hashable], List[Tuple[float, int, float]]] = {}

    def __len__(self) -> int:
        return len(self._cache)

    def outcomes(self, state: Hashable, action: Hashable) -> List[Tuple[float, int, float]]:
        key = (state, action)
        rows = self._cache.get(key)
        if rows is None:
            rows = self._fetch(state, action)
            self._cache[key] = rows
        return rows

    def _fetch(self, state: Hashable, action: Hashable) -> List[Tuple[float, int, float]]:
        rows = []
        total = 0.0
        for prob, next_state, reward in self.model.transitions(state, action):
            if not 0.0 <= prob <= 1.0 + PROB_TOLERANCE:
                raise ModelInconsistencyError(
                    f"probability {prob!r} out of range for action {action!r} in state {state!r}")
            try:
                j = self.values.index(next_state)
            except KeyError:
                raise ModelInconsistencyError(
                    f"action {action!r} in state {state!r} leads to {next_state!r}, "
                    f"which is not an enumerated state") from None
            rows.append((float(prob), j, float(reward)))
            total += prob
        if abs(total - 1.0) > PROB_TOLERANCE:
            raise ModelInconsistencyError(
                f"outcome probabilities for action {action!r} in state {state!r} sum to {total!r}")
        return rows

    def q_value(self, state: Hashable, action: Hashable, discount: float, v: List[float]) -> float:
        """Expected one-step value Σ p·(r + γ·V(s')) of `action` in `state`."""
        total = 0.0
        for prob, j, reward in self.outcomes(state, action):
            total += prob * (reward + discount * v[j])
        return total


# ----------------------------------------------------------------------
# Policy evaluation
# ----------------------------------------------------------------------
def evaluate_policy(policy: Policy, values: ValueTable, model: Any,
                    discount: float, tolerance: float,
                    max_sweeps: int = DEFAULT_MAX_SWEEPS,
                    transitions: Optional[TransitionTable] = None,
                    verbose: bool = False) -> EvaluationResult:
    """
    Evaluate `policy`, updating `values` in place.

    Sweeps go over the states in table order and use freshly written
    values within the same sweep.  Terminal states are pinned to 0.
    Stops when a sweep's largest absolute change is strictly below
    `tolerance`, or warns after `max_sweeps` sweeps.
    Non-terminal states without a policy action keep their value and are
    reported with `DeadEndWarning`.
    """
    if transitions is None:
        transitions = TransitionTable(model, values)

    terminal_ids = []
    plan = []
    dead_ends = 0
    for i, s in enumerate(values.states):
        if model.is_terminal(s):
            terminal_ids.append(i)
        elif s in policy:
            plan.append((i, transitions.outcomes(s, policy[s])))
        else:
            dead_ends += 1
    if dead_ends:
        warnings.warn(DeadEndWarning(
            f"{dead_ends} non-terminal states have no legal action; "
            f"their values are left unchanged"), stacklevel=2)

    # Plain list for the inner loop; written back to the numpy vector on exit.
    v = values.values.tolist()
    sweeps = 0
    delta = 0.0
    converged = False
    while sweeps < max_sweeps:
        sweeps += 1
        delta = 0.0
        for i in terminal_ids:
            if v[i] != 0.0:
                delta = max(delta, abs(v[i]))
                v[i] = 0.0
        for i, outcomes in plan:
            new_value = 0.0
            for prob, j, reward in outcomes:
                new_value += prob * (reward + discount * v[j])
            diff = abs(new_value - v[i])
            v[i] = new_value
            if diff > delta:
                delta = diff

        if verbose and sweeps % 100 == 0:
            print(f"Policy evaluation: {sweeps} sweeps, delta={delta:.6f}")
        if delta < tolerance:
            converged = True
            break

    values.values[:] = v
    if not converged:
        warnings.warn(NonConvergenceWarning(
            f"policy evaluation stopped after {sweeps} sweeps with delta={delta:.6g} "
            f"(tolerance {tolerance:g})"), stacklevel=2)
    return EvaluationResult(sweeps, delta, converged, dead_ends)


# ----------------------------------------------------------------------
# Policy improvement
# ----------------------------------------------------------------------
def _greedy_update(policy: Policy, values: ValueTable, model: Any, discount: float,
                   transitions: TransitionTable) -> int:
    """Make `policy` greedy w.r.t. `values`; return how many states changed action."""
    v = values.values.tolist()
    updates = 0
    for s in values.states:
        if model.is_terminal(s):
            continue
        best_action = None
        best_value = -math.inf
        for action in model.legal_actions(s):
            q = transitions.q_value(s, action, discount, v)
            # strict '>' keeps the earliest of equally good actions
            if best_action is None or q > best_value:
                best_action = action
                best_value = q
        if best_action is None:
            continue
        if s not in policy or policy[s] != best_action:
            policy[s] = best_action
            updates += 1
    return updates


def improve_policy(policy: Policy, values: ValueTable, model: Any, discount: float,
                   transitions: Optional[TransitionTable] = None,
                   verbose: bool = False) -> Tuple[Policy, bool]:
    """
    One greedy improvement pass over every non-terminal state.

    Returns (policy, changed).  `policy` is updated in place; `values`
    is only read.
    """
    if policy.frozen:
        raise TypeError("cannot improve a frozen policy")
    if transitions is None:
        transitions = TransitionTable(model, values)
    updates = _greedy_update(policy, values, model, discount, transitions)
    if verbose:
        print(f"Policy improvement: updated {updates} states out of {len(values)}.")
    return policy, updates > 0


# ----------------------------------------------------------------------
# Training loop
# ----------------------------------------------------------------------
def train(policy: Policy, values: ValueTable, model: Any,
          discount: float, tolerance: float,
          max_sweeps: int = DEFAULT_MAX_SWEEPS,
          max_iterations: int = DEFAULT_MAX_ITERATIONS,
          transitions: Optional[TransitionTable] = None,
          verbose: bool = False,
          on_iteration: Optional[Callable[[int, EvaluationResult, int], None]] = None) -> Policy:
    """
    Alternate evaluation and improvement until the policy is stable.

    Args:
        policy: Initial policy (mutable, legal action for every non-terminal state)
        values: Value table over the state universe; updated in place
        model: Game/transition model
        discount: γ in [0, 1)
        tolerance: δ > 0 for policy evaluation
        max_sweeps: Cap on sweeps per evaluation
        max_iterations: Cap on (evaluate, improve) cycles
        transitions: Shared TransitionTable, built here when omitted
        verbose: Print one line per cycle
        on_iteration: Called as on_iteration(iteration, evaluation, updates)
            after every improvement pass

    Returns:
        The final policy, frozen.
    """
    validate_parameters(discount, tolerance, max_sweeps, max_iterations)
    validate_policy(policy, model, values.states)
    if policy.frozen:
        raise TypeError("initial policy must be mutable; pass policy.copy()")
    if transitions is None:
        transitions = TransitionTable(model, values)

    iteration = 0
    while True:
        if iteration >= max_iterations:
            warnings.warn(NonConvergenceWarning(
                f"policy iteration stopped after {iteration} cycles without a stable policy"),
                stacklevel=2)
            break
        iteration += 1
        evaluation = evaluate_policy(policy, values, model, discount, tolerance,
                                     max_sweeps=max_sweeps, transitions=transitions,
                                     verbose=verbose)
        updates = _greedy_update(policy, values, model, discount, transitions)
        if verbose:
            print(f"Iteration {iteration}: {evaluation.sweeps} sweeps, "
                  f"Δ={evaluation.delta:.6f}, {updates} policy updates")
        if on_iteration is not None:
            on_iteration(iteration, evaluation, updates)
        if updates == 0:
            break

    return policy.freeze()
