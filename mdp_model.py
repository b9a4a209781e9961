from typing import Any, Dict, Hashable, Iterable, List, NamedTuple, Sequence, Set, Tuple


class Outcome(NamedTuple):
    """One possible result of taking an action: (probability, next state, reward)."""
    prob: float
    next_state: Hashable
    reward: float


class TabularMDP:
    """
    An MDP given by explicit tables.

    Useful for small hand-built problems; the board-game model in
    `game_mdp.py` implements the same interface procedurally.

        states   : every state in the universe, terminal ones included
        terminal : the subset of states where no action is taken
        actions  : state -> ordered list of legal actions
        outcomes : (state, action) -> list of Outcome / (prob, s', reward)
    """

    def __init__(self,
                 states: Iterable[Hashable],
                 terminal: Iterable[Hashable],
                 actions: Dict[Hashable, Sequence[Hashable]],
                 outcomes: Dict[Tuple[Hashable, Hashable], Sequence[Tuple[float, Hashable, float]]]):
        self.states: List[Hashable] = list(dict.fromkeys(states))
        self.terminal: Set[Hashable] = set(terminal)
        self.actions = {s: list(a) for s, a in actions.items()}
        self.outcomes = {key: [Outcome(*o) for o in outs] for key, outs in outcomes.items()}

    def enumerate_states(self) -> List[Hashable]:
        return list(self.states)

    def is_terminal(self, state: Hashable) -> bool:
        return state in self.terminal

    def legal_actions(self, state: Hashable) -> List[Hashable]:
        if self.is_terminal(state):
            return []
        return list(self.actions.get(state, []))

    def is_legal(self, state: Hashable, action: Any) -> bool:
        return action in self.legal_actions(state)

    def transitions(self, state: Hashable, action: Hashable) -> List[Outcome]:
        return list(self.outcomes.get((state, action), []))

    # Persistence helpers: states and actions are looked up by their str() form.
    def encode_state(self, state: Hashable) -> str:
        return str(state)

    def decode_state(self, key: str) -> Hashable:
        for s in self.states:
            if str(s) == key:
                return s
        raise KeyError(key)

    def encode_action(self, action: Hashable) -> str:
        return str(action)

    def decode_action(self, key: str) -> Hashable:
        for acts in self.actions.values():
            for a in acts:
                if str(a) == key:
                    return a
        raise KeyError(key)
