from typing import List, Optional

import numpy as np

from game_board import GameBoard

_UNSET = object()


class GameState:
    """
    A wrapper class for game states that supports hashing and comparison.
    This enables using GameState objects as dictionary keys for the MDP value function.

    A state is immutable once built: `apply_action` returns a new state.
    """

    def __init__(self, board: np.ndarray, turn: int, game_board: GameBoard = None):
        """
        Initialize a game state.

        Args:
            board: The game board as a numpy array
            turn: The player's turn (0 or 1)
            game_board: GameBoard carrying the rules (win condition, gravity); its
                pieces are ignored in favour of `board`
        """
        self.board = np.array(board, dtype=float)  # private copy
        self.turn = turn

        rows, cols = self.board.shape
        if game_board is None:
            self.game_board = GameBoard(rows=rows, cols=cols, win_condition=min(4, max(rows, cols)))
        else:
            if (game_board.rows, game_board.cols) != (rows, cols):
                raise ValueError(f"board shape {self.board.shape} does not match the "
                                 f"{game_board.rows}x{game_board.cols} rules board")
            self.game_board = GameBoard(rows=rows, cols=cols,
                                        win_condition=game_board.win_condition,
                                        gravity=game_board.gravity)
        self.game_board.board = self.board

        # Hash once; states are looked up constantly during training.
        self._cells = tuple(int(v) for v in self.board.flat)
        self._hash = hash((self._cells, rows, cols, self.turn))
        self._winner = _UNSET
        self._terminal: Optional[bool] = None
        self._actions: Optional[List[int]] = None

    def __hash__(self):
        """
        Generate a hash for the game state based on board configuration and turn.
        """
        return self._hash

    def __eq__(self, other):
        """Check if two game states are equal."""
        if not isinstance(other, GameState):
            return False
        return (self.turn == other.turn and self._cells == other._cells
                and self.board.shape == other.board.shape)

    def __repr__(self):
        return f"GameState({self.get_key()})"

    def winner(self) -> Optional[int]:
        """Return the piece (1 or 2) that has a winning line, or None."""
        if self._winner is _UNSET:
            # The player who just moved is the only one who can have completed a line.
            last_piece = 2 - self.turn
            if self.game_board.winning_move(last_piece):
                self._winner = last_piece
            elif self.game_board.winning_move(3 - last_piece):
                self._winner = 3 - last_piece
            else:
                self._winner = None
        return self._winner

    def is_terminal(self) -> bool:
        """Check if this is a terminal state (win or draw)."""
        if self._terminal is None:
            self._terminal = self.winner() is not None or self.game_board.tie_move()
        return self._terminal

    def get_valid_actions(self) -> List[int]:
        """Get valid actions for this state (empty for terminal states)."""
        if self._actions is None:
            self._actions = [] if self.is_terminal() else self.game_board.valid_actions()
        return list(self._actions)

    def apply_action(self, action: int) -> 'GameState':
        """
        Apply an action to this state and return the resulting state.

        Args:
            action: Column (gravity) or cell index (no gravity)

        Returns:
            GameState: The new state after action
        """
        cell = self.game_board.action_to_cell(action) if not self.is_terminal() else None
        if cell is None:
            raise ValueError(f"action {action!r} is not legal in state {self.get_key()}")
        new_board = self.board.copy()
        row, col = cell
        new_board[row][col] = self.turn + 1  # Convert from 0/1 to 1/2
        return GameState(new_board, (self.turn + 1) % 2, self.game_board)

    def get_key(self) -> str:
        """
        Get a string key representation for this state.
        Columns are written bottom row first and joined with ':' after the turn.
        """
        cols = []
        num_rows, num_cols = self.board.shape
        for col in range(num_cols):
            column = ''.join(str(int(self.board[row][col])) for row in range(num_rows))
            cols.append(column)

        return f"{self.turn}:{':'.join(cols)}"

    @classmethod
    def from_key(cls, key: str, game_board: GameBoard) -> 'GameState':
        """
        Rebuild a state from `get_key()` output.

        Args:
            key: A key produced by get_key
            game_board: Board supplying the rules (dimensions, win condition, gravity)
        """
        turn_part, *columns = key.strip().split(':')
        if turn_part not in ('0', '1') or len(columns) != game_board.cols \
                or any(len(c) != game_board.rows or set(c) - set('012') for c in columns):
            raise ValueError(f"malformed state key {key!r} for a "
                             f"{game_board.rows}x{game_board.cols} board")
        board = np.zeros((game_board.rows, game_board.cols))
        for col, column in enumerate(columns):
            for row, piece in enumerate(column):
                board[row][col] = int(piece)
        return cls(board, int(turn_part), game_board)
