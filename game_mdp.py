"""
game_mdp.py
-----------
Game model + transition model for one learning agent against a fixed,
uniformly random opponent.

MDP
---
• **States (S)**   – every position where it is the agent's turn, plus every
                     terminal position, reachable from the root.
• **Actions A(s)** – legal moves of the agent, in ascending order.
• **Transition T** – the agent's move is applied; unless that ends the game,
                     the opponent answers with each legal reply with equal
                     probability.
• **Reward R**     – from the agent's point of view, paid on arrival:
                     win / loss / draw on a terminal successor, the living
                     reward otherwise.
"""

from collections import deque
from typing import Dict, List, Optional

import numpy as np

from game_board import GameBoard
from game_state import GameState
from mdp_model import Outcome

# name -> (cols, rows, win_condition, gravity)
BOARD_PRESETS: Dict[str, tuple] = {
    'ttt': (3, 3, 3, False),   # tic-tac-toe
    'mini': (4, 3, 3, True),   # 4x3 Connect 3
    'tiny': (3, 2, 3, True),   # 3x2 Connect 3, small enough for quick experiments
}


class GameMDP:
    """
    Board game seen as an MDP by the agent.

    Args:
        rows, cols, win_condition, gravity: Board rules (see GameBoard)
        agent_first: Agent plays piece 1 and moves first; otherwise piece 2
        win_reward, lose_reward, draw_reward, living_reward: Agent rewards
        root: Optional starting position (defaults to the empty board, player 1 to move)
    """

    def __init__(self, rows: int = 3, cols: int = 3, win_condition: int = 3, gravity: bool = False,
                 agent_first: bool = True,
                 win_reward: float = 10.0, lose_reward: float = -10.0,
                 draw_reward: float = 0.0, living_reward: float = 0.0,
                 root: Optional[GameState] = None):
        self.rules = GameBoard(rows=rows, cols=cols, win_condition=win_condition, gravity=gravity)
        self.agent_turn = 0 if agent_first else 1
        self.agent_piece = self.agent_turn + 1
        self.win_reward = float(win_reward)
        self.lose_reward = float(lose_reward)
        self.draw_reward = float(draw_reward)
        self.living_reward = float(living_reward)
        if root is not None and not root.game_board.same_rules(self.rules):
            raise ValueError("root state was built with different board rules")
        self.root = root
        self._states: Optional[List[GameState]] = None

    @classmethod
    def from_preset(cls, name: str, **kwargs) -> 'GameMDP':
        """Build a model from one of BOARD_PRESETS ('ttt', 'mini', 'tiny')."""
        try:
            cols, rows, win_condition, gravity = BOARD_PRESETS[name]
        except KeyError:
            raise ValueError(f"unknown board preset {name!r}; "
                             f"choose from {sorted(BOARD_PRESETS)}") from None
        return cls(rows=rows, cols=cols, win_condition=win_condition, gravity=gravity, **kwargs)

    # ------------------------------------------------------------------
    # Game model
    # ------------------------------------------------------------------
    def initial_state(self) -> GameState:
        if self.root is not None:
            return self.root
        return GameState(np.zeros((self.rules.rows, self.rules.cols)), 0, self.rules)

    def enumerate_states(self) -> List[GameState]:
        """
        Breadth-first enumeration of every agent-to-move or terminal state
        reachable from the root.  The order is stable between calls.
        """
        if self._states is None:
            start = self.initial_state()
            if start.is_terminal() or start.turn == self.agent_turn:
                roots = [start]
            else:
                roots = [start.apply_action(b) for b in start.get_valid_actions()]

            seen: Dict[GameState, None] = dict.fromkeys(roots)
            frontier = deque(roots)
            while frontier:
                state = frontier.popleft()
                for action in self.legal_actions(state):
                    for outcome in self.transitions(state, action):
                        if outcome.next_state not in seen:
                            seen[outcome.next_state] = None
                            frontier.append(outcome.next_state)
            self._states = list(seen)
        return list(self._states)

    def is_terminal(self, state: GameState) -> bool:
        return state.is_terminal()

    def legal_actions(self, state: GameState) -> List[int]:
        return state.get_valid_actions()

    def is_legal(self, state: GameState, action) -> bool:
        return action in state.get_valid_actions()

    # ------------------------------------------------------------------
    # Transition model
    # ------------------------------------------------------------------
    def reward(self, state: GameState) -> float:
        """Reward for arriving in `state`, from the agent's point of view."""
        winner = state.winner()
        if winner == self.agent_piece:
            return self.win_reward
        if winner is not None:
            return self.lose_reward
        if state.is_terminal():
            return self.draw_reward
        return self.living_reward

    def transitions(self, state: GameState, action: int) -> List[Outcome]:
        """
        Outcomes of the agent playing `action` in `state`.

        Raises:
            ValueError: if the action is not legal in `state`
        """
        if not self.is_legal(state, action):
            raise ValueError(f"action {action!r} is not legal in state {state.get_key()}")
        after_move = state.apply_action(action)
        if after_move.is_terminal():
            return [Outcome(1.0, after_move, self.reward(after_move))]

        replies = after_move.get_valid_actions()
        prob = 1.0 / len(replies)
        outcomes = []
        for reply in replies:
            next_state = after_move.apply_action(reply)
            outcomes.append(Outcome(prob, next_state, self.reward(next_state)))
        return outcomes

    # ------------------------------------------------------------------
    # Canonical encodings (policy files)
    # ------------------------------------------------------------------
    def encode_state(self, state: GameState) -> str:
        return state.get_key()

    def decode_state(self, key: str) -> GameState:
        return GameState.from_key(key, self.rules)

    def encode_action(self, action: int) -> str:
        return str(action)

    def decode_action(self, key: str) -> int:
        return int(key)

    def describe(self) -> Dict[str, object]:
        """Rules and rewards, written into policy file headers."""
        return {
            'rows': self.rules.rows,
            'cols': self.rules.cols,
            'win_condition': self.rules.win_condition,
            'gravity': self.rules.gravity,
            'agent_piece': self.agent_piece,
            'rewards': f"{self.win_reward}/{self.lose_reward}/{self.draw_reward}/{self.living_reward}",
        }
