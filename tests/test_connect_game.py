import sys, pathlib
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

import game
from agents import HumanAgent, RandomAgent
from connect_game import ConnectGame
from game_data import GameData


def tiny_game_data(seed=0):
    data = GameData()
    data.set_board_preset('tiny')
    data.seed = seed
    return data


def test_agent_plays_full_games_against_random():
    data = tiny_game_data()
    data.set_game_mode('rva')
    assert data.player_names() == ("Agent", "Random")

    for _ in range(5):
        data.reset()
        winner = ConnectGame(data, verbose=False).play_out()
        assert winner in (0, 1, 2)
        assert data.game_over
        assert data.state.is_terminal()


def test_agent_can_play_second():
    data = tiny_game_data()
    data.set_agent_first(False)
    data.set_game_mode('rva')
    assert data.player_names() == ("Random", "Agent")

    data.reset()
    ConnectGame(data, verbose=False).play_out()
    assert data.state.is_terminal()


def test_illegal_move_is_refused():
    data = tiny_game_data()
    connect = ConnectGame(data, verbose=False)

    assert connect.make_move(0)
    assert connect.make_move(0)
    assert not connect.make_move(0)   # column full
    assert not connect.make_move(5)   # off the board
    assert data.turn == 0
    assert data.game_board.board[0][0] == 1 and data.game_board.board[1][0] == 2
    assert (data.game_board.board == data.state.board).all()


def test_human_agent_reprompts_until_legal():
    answers = iter(["x", "9", "2"])
    messages = []
    human = HumanAgent(input_fn=lambda prompt: next(answers), output_fn=messages.append)

    data = tiny_game_data()
    assert human.choose_action(data.state) == 1
    assert len(messages) == 2


def test_random_agent_only_plays_legal_moves():
    data = tiny_game_data()
    connect = ConnectGame(data, verbose=False)
    data.players = [RandomAgent(1), RandomAgent(2)]

    assert connect.play_out() in (0, 1, 2)


def test_cli_train_then_play(tmp_path, capsys):
    path = tmp_path / "tiny.pol"

    assert game.main(["train", "--board", "tiny", "--seed", "0", "--policy-file", str(path)]) == 0
    assert path.exists()

    assert game.main(["play", "--board", "tiny", "--opponent", "random", "--games", "3",
                      "--policy-file", str(path)]) == 0
    out = capsys.readouterr().out
    assert "Results:" in out


def test_cli_reports_stale_policy_file(tmp_path, capsys):
    path = tmp_path / "tiny.pol"
    assert game.main(["train", "--board", "tiny", "--seed", "0", "--policy-file", str(path)]) == 0

    assert game.main(["play", "--board", "tiny", "--opponent", "random", "--gamma", "0.5",
                      "--policy-file", str(path)]) == 2
    assert "gamma" in capsys.readouterr().err
