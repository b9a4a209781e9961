from typing import Dict, Hashable, Iterable, Iterator, List

import numpy as np


class ValueTable:
    """
    State -> value estimate V(s), stored densely.

    Each state gets a stable integer index in enumeration order
    (`state_index`), and the values live in a numpy vector so the same
    ordering can be reused for the P/R matrices in `pi_agent.py`.
    """

    def __init__(self, states: Iterable[Hashable], initial_value: float = 0.0):
        self.states: List[Hashable] = list(dict.fromkeys(states))
        self.state_index: Dict[Hashable, int] = {s: i for i, s in enumerate(self.states)}
        self.values: np.ndarray = np.full(len(self.states), initial_value, dtype=float)

    def __len__(self) -> int:
        return len(self.states)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self.states)

    def __contains__(self, state: Hashable) -> bool:
        return state in self.state_index

    def __getitem__(self, state: Hashable) -> float:
        return float(self.values[self.state_index[state]])

    def __setitem__(self, state: Hashable, value: float) -> None:
        self.values[self.state_index[state]] = value

    def index(self, state: Hashable) -> int:
        """Dense id of `state`; raises KeyError for states outside the table."""
        return self.state_index[state]

    def as_array(self) -> np.ndarray:
        """Copy of the value vector in `states` order."""
        return self.values.copy()

    def as_dict(self) -> Dict[Hashable, float]:
        """Export a plain-dict snapshot (safe to hand to other code)."""
        return {s: float(v) for s, v in zip(self.states, self.values)}
