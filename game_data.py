from pathlib import Path
from typing import Any, List, Optional, Tuple

import numpy as np

from agent_factory import DEFAULT_EPSILON, DEFAULT_GAMMA, make_agent
from agents import HumanAgent, RandomAgent
from game_board import GameBoard
from game_mdp import BOARD_PRESETS, GameMDP
from game_state import GameState


class GameData:
    """
    The game data class contains all of the data for the game.
    """

    game_over: bool
    turn: int
    game_board: GameBoard
    state: GameState

    # Agent-related fields
    game_mode: str  # 'pvp', 'pva', 'rva'
    agent: Optional[Any]
    players: List[Any]  # indexed by turn
    agent_first: bool

    # Board size and win condition
    cols: int
    rows: int
    win_condition: int
    gravity: bool

    def __init__(self):
        # Default board: tic-tac-toe
        self.cols, self.rows, self.win_condition, self.gravity = BOARD_PRESETS['ttt']
        self.game_board = GameBoard(rows=self.rows, cols=self.cols,
                                    win_condition=self.win_condition, gravity=self.gravity)
        self.reset()

        # Agent configuration
        self.game_mode = 'pvp'
        self.agent = None
        self.players = [HumanAgent(), HumanAgent()]
        self.agent_first = True
        self.gamma = DEFAULT_GAMMA
        self.epsilon = DEFAULT_EPSILON
        self.seed: Optional[int] = None
        self.policy_file: Optional[Path] = None
        self.verbose = False

    def reset(self) -> None:
        """Start a new game on an empty board."""
        self.game_over = False
        self.turn = 0
        self.state = GameState(np.zeros((self.rows, self.cols)), 0, self.game_board)
        self.game_board.board = self.state.board.copy()

    def set_board_size(self, cols: int, rows: int, win_condition: int, gravity: bool = True) -> None:
        """
        Set the game board size and win condition.

        Args:
            cols: Number of columns in the board
            rows: Number of rows in the board
            win_condition: Number of pieces in a row needed to win
            gravity: Whether pieces drop to the bottom of a column
        """
        self.cols = cols
        self.rows = rows
        self.win_condition = win_condition
        self.gravity = gravity

        # Reinitialize the game board with new dimensions
        self.game_board = GameBoard(rows=rows, cols=cols, win_condition=win_condition, gravity=gravity)
        self.agent = None
        self.reset()

    def set_board_preset(self, name: str) -> None:
        """Use one of the BOARD_PRESETS ('ttt', 'mini', 'tiny')."""
        if name not in BOARD_PRESETS:
            raise ValueError(f"unknown board preset {name!r}; choose from {sorted(BOARD_PRESETS)}")
        self.set_board_size(*BOARD_PRESETS[name])

    def set_agent_first(self, agent_first: bool) -> None:
        """Choose the agent's side; a previously trained agent is discarded."""
        if agent_first != self.agent_first:
            self.agent = None
        self.agent_first = agent_first

    def make_mdp(self) -> GameMDP:
        """Game model for the configured board, agent side and random opponent."""
        return GameMDP(rows=self.rows, cols=self.cols, win_condition=self.win_condition,
                       gravity=self.gravity, agent_first=self.agent_first)

    def get_agent(self) -> Any:
        """Create (train or load) the policy-iteration agent on first use."""
        if self.agent is None:
            print("Initializing agent ...")
            # Centralized configuration via agent_factory
            self.agent = make_agent(self.make_mdp(), gamma=self.gamma, epsilon=self.epsilon,
                                    seed=self.seed, verbose=self.verbose,
                                    policy_file=self.policy_file)
        return self.agent

    def set_game_mode(self, mode: str) -> None:
        """
        Set the game mode and initialize agents if needed.

        Args:
            mode: 'pvp' for player vs player, 'pva' for player vs agent,
            'rva' for random player vs agent
        """
        if mode not in ('pvp', 'pva', 'rva'):
            raise ValueError(f"unknown game mode {mode!r}")
        self.game_mode = mode
        if mode == 'pvp':
            self.players = [HumanAgent(), HumanAgent()]
            return

        opponent = HumanAgent() if mode == 'pva' else RandomAgent(self.seed)
        agent = self.get_agent()
        self.players = [agent, opponent] if self.agent_first else [opponent, agent]

    def player_names(self) -> Tuple[str, str]:
        names = []
        for player in self.players:
            if player is self.agent:
                names.append("Agent")
            elif isinstance(player, RandomAgent):
                names.append("Random")
            else:
                names.append("Human")
        return names[0], names[1]
