"""
Opponents for console matches.  Every player exposes
`choose_action(state) -> action`, like PolicyIterationAgent.
"""

import random
from typing import Callable, Optional

from game_state import GameState


class RandomAgent:
    """Plays a uniformly random legal move."""

    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)

    def choose_action(self, state: GameState) -> int:
        return self.rng.choice(state.get_valid_actions())


class HumanAgent:
    """
    Reads moves from the console.

    Moves are typed 1-based: a column number with gravity, a cell number
    (row by row, top-left first) without.
    """

    def __init__(self, input_fn: Callable[[str], str] = input,
                 output_fn: Callable[..., None] = print):
        self.input_fn = input_fn
        self.output_fn = output_fn

    def choose_action(self, state: GameState) -> int:
        valid_actions = state.get_valid_actions()
        kind = "column" if state.game_board.gravity else "cell"
        choices = ", ".join(str(a + 1) for a in valid_actions)
        while True:
            raw = self.input_fn(f"Your move ({kind} {choices}): ").strip()
            try:
                action = int(raw) - 1
            except ValueError:
                self.output_fn(f"'{raw}' is not a number.")
                continue
            if action in valid_actions:
                return action
            self.output_fn(f"{kind.capitalize()} {raw} is not available.")
