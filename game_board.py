from numbers import Integral
from typing import List, Optional, Tuple

from numpy import flip, ndarray, zeros

PIECE_SYMBOLS = {0: ".", 1: "X", 2: "O"}


class GameBoard:
    """
    The GameBoard class holds the state of the game board,
    and methods to manipulate and query the board.

    With `gravity` the board plays like Connect Four: an action is a column
    and the piece falls to the lowest free row.  Without gravity it plays
    like tic-tac-toe: an action is a cell index `row * cols + col`.
    """

    board: ndarray
    cols: int
    rows: int
    win_condition: int  # Number of pieces needed in a row to win
    gravity: bool

    def __init__(self, rows=6, cols=7, win_condition=4, gravity=True):
        """
        Initializes the game board.
        :param rows: The height of the board in rows.
        :param cols: The width of the board in columns.
        :param win_condition: Number of pieces needed in a row to win.
        :param gravity: Whether pieces drop to the lowest free row of a column.
        """
        if rows < 1 or cols < 1:
            raise ValueError(f"board must be at least 1x1, got {rows}x{cols}")
        if win_condition < 1 or win_condition > max(rows, cols):
            raise ValueError(f"win condition {win_condition} does not fit a {rows}x{cols} board")
        self.rows = rows
        self.cols = cols
        self.win_condition = win_condition
        self.gravity = gravity
        self.board = zeros((rows, cols))

    def same_rules(self, other: 'GameBoard') -> bool:
        """
        Whether `other` has the same dimensions, win condition and gravity.
        """
        return (self.rows, self.cols, self.win_condition, self.gravity) == \
            (other.rows, other.cols, other.win_condition, other.gravity)

    def render(self) -> str:
        """
        Returns the board as text, top row first, with action numbers underneath.
        """
        # With gravity row 0 is the bottom of the board.
        grid = flip(self.board, 0) if self.gravity else self.board
        lines = [" ".join(PIECE_SYMBOLS[int(v)] for v in row) for row in grid]
        if self.gravity:
            lines.append("-" * (self.cols * 2 - 1))
            lines.append(" ".join(str(c + 1) for c in range(self.cols)))
        return "\n".join(lines)

    def print_board(self):
        """
        Prints the state of the board to the console.
        """
        print(self.render())

    def drop_piece(self, row, col, piece):
        """
        Puts `piece` into the slot (row, col), as returned by `action_to_cell`.
        :param piece: 1 or 2, the player number.
        """
        self.board[row][col] = piece

    def is_valid_location(self, col):
        """
        Returns whether the position exists on the board and is a valid drop location.
        :param col: The column to check.
        :return: Whether the specified column exists and is not full.
        """
        # First check if column is in bounds
        if col < 0 or col >= self.cols:
            return False
        # Then check if the top spot is empty
        return self.board[self.rows - 1][col] == 0

    def get_next_open_row(self, col):
        """
        Returns the next free row for a column.
        :param col: The column to check for a free space.
        :return: The next free row for a column.
        """
        for row in range(self.rows):
            if self.board[row][col] == 0:
                return row

    def action_to_cell(self, action: int) -> Optional[Tuple[int, int]]:
        """
        Returns the (row, col) slot an action would fill, or None if the action is illegal.
        :param action: A column (gravity) or a cell index (no gravity).
        """
        if isinstance(action, bool) or not isinstance(action, Integral):
            return None
        if self.gravity:
            if not self.is_valid_location(action):
                return None
            return self.get_next_open_row(action), action
        if action < 0 or action >= self.rows * self.cols:
            return None
        row, col = divmod(action, self.cols)
        if self.board[row][col] != 0:
            return None
        return row, col

    def valid_actions(self) -> List[int]:
        """
        Returns the legal actions in ascending order.
        """
        if self.gravity:
            return [col for col in range(self.cols) if self.is_valid_location(col)]
        return [r * self.cols + c
                for r in range(self.rows) for c in range(self.cols)
                if self.board[r][c] == 0]

    def check_square(self, piece, r, c):
        """
        Checks if a particular square is a certain color.  If
        the space is off of the board it returns False.

        :param piece: The piece color to look for.
        :param r: The row to check.
        :param c: The column to check.
        :return: Whether the square is on the board and has the color/piece specified.
        """
        if r < 0 or r >= self.rows:
            return False

        if c < 0 or c >= self.cols:
            return False

        return self.board[r][c] == piece

    def horizontal_win(self, piece, r, c):
        """
        Checks if there is a horizontal win at the position (r,c)
        :param piece: The color of the chip to check for.
        :param r: The row.
        :param c: The column.
        :return: Whether there is a horizontal win at the position (r, c).
        """
        if c + self.win_condition > self.cols:
            return False

        for i in range(self.win_condition):
            if not self.check_square(piece, r, c + i):
                return False

        return True

    def vertical_win(self, piece, r, c):
        """
        Checks if there is vertical win at the position (r, c)
        :param piece: The color of the chip to check for.
        :param r: The row
        :param c: The column
        :return: Whether there is a vertical win at the position (r, c)
        """
        if r + self.win_condition > self.rows:
            return False

        for i in range(self.win_condition):
            if not self.check_square(piece, r + i, c):
                return False

        return True

    def diagonal_win(self, piece, r, c):
        """
        Checks if there is a diagonal_win at the position (r, c)
        :param piece: The color of the chip to check for.
        :param r: The row
        :param c: The column
        :return: Whether there is a diagonal win at the position (r,c)
        """
        # Positive diagonal (/)
        if r + self.win_condition <= self.rows and c + self.win_condition <= self.cols:
            for i in range(self.win_condition):
                if not self.check_square(piece, r + i, c + i):
                    break
            else:
                return True

        # Negative diagonal (\)
        if r >= self.win_condition - 1 and c + self.win_condition <= self.cols:
            for i in range(self.win_condition):
                if not self.check_square(piece, r - i, c + i):
                    break
            else:
                return True

        return False

    def winning_move(self, piece):
        """
        Checks if the current piece has won the game.
        :param piece: The color of the chip to check for.
        :return: Whether the current piece has won the game.
        """
        for c in range(self.cols):
            for r in range(self.rows):
                if (
                    self.horizontal_win(piece, r, c)
                    or self.vertical_win(piece, r, c)
                    or self.diagonal_win(piece, r, c)
                ):
                    return True
        return False

    def tie_move(self):
        """
        Checks for a tie game.
        :return:  Whether a tie has occurred.
        """
        slots_filled: int = 0
        total_slots = self.rows * self.cols

        for c in range(self.cols):
            for r in range(self.rows):
                if self.board[r][c] != 0:
                    slots_filled += 1

        return slots_filled == total_slots
