from game_data import GameData


class ConnectGame:
    """
    Holds all of the game logic and game data for one console match.
    """

    game_data: GameData

    def __init__(self, game_data: GameData, verbose: bool = True):
        """
        Initializes the connect game.
        :param game_data: A reference to the game data object.
        :param verbose: Whether to print the board after every move.
        """
        self.game_data = game_data
        self.verbose = verbose

    def make_move(self, action: int) -> bool:
        """
        Make a move for the player whose turn it is.

        Args:
            action: Column (gravity) or cell index (no gravity)

        Returns:
            bool: True if the move was successful, False if it was illegal
        """
        data = self.game_data
        if data.game_over or action not in data.state.get_valid_actions():
            return False

        row, col = data.state.game_board.action_to_cell(action)
        data.game_board.drop_piece(row, col, data.turn + 1)
        data.state = data.state.apply_action(action)
        data.turn = data.state.turn

        if self.verbose:
            self.print_board()
        if data.state.is_terminal():
            data.game_over = True
        return True

    def handle_move(self) -> None:
        """
        Ask the player whose turn it is for a move and play it.

        Raises:
            ValueError: if a non-interactive player returns an illegal move
        """
        data = self.game_data
        if data.game_over:
            return
        player_number = data.turn + 1
        player = data.players[data.turn]
        action = player.choose_action(data.state)
        if action is None or not self.make_move(action):
            raise ValueError(f"player {player_number} chose illegal move {action!r}")

    def play_out(self) -> int:
        """
        Play until the game ends.

        Returns:
            int: The winning piece (1 or 2), or 0 for a draw
        """
        if self.verbose:
            self.print_board()
        while not self.game_data.game_over:
            self.handle_move()
        winner = self.game_data.state.winner()
        if self.verbose:
            if winner is None:
                print("Game ended in a tie.")
            else:
                names = self.game_data.player_names()
                print(f"Player {winner} ({names[winner - 1]}) wins!")
        return winner or 0

    def print_board(self):
        """
        Prints the state of the board to the console.
        """
        self.game_data.game_board.print_board()
        print()
