"""
Command-line entrypoint.

Commands:
- train: enumerate the game, run policy iteration and (optionally) save the policy
- play:  load or train the agent, then play console games against a human or random opponent
"""

import argparse
import sys
from collections import Counter
from pathlib import Path
from typing import List, Optional

from agent_factory import DEFAULT_BOARD, DEFAULT_EPSILON, DEFAULT_GAMMA, make_agent
from connect_game import ConnectGame
from game_data import GameData
from game_mdp import BOARD_PRESETS
from mdp_errors import ConfigurationError


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(prog="connect-pi")
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--board", choices=sorted(BOARD_PRESETS), default=DEFAULT_BOARD,
                        help="Board preset (default: %(default)s)")
    common.add_argument("--gamma", type=float, default=DEFAULT_GAMMA, help="Discount factor in [0, 1)")
    common.add_argument("--epsilon", type=float, default=DEFAULT_EPSILON,
                        help="Policy evaluation tolerance (> 0)")
    common.add_argument("--seed", type=int, default=None, help="Seed for the random initial policy")
    common.add_argument("--policy-file", type=Path, default=None,
                        help="Policy file to load (if present) or to write after training")
    common.add_argument("--second", action="store_true", help="Agent plays second")
    common.add_argument("--verbose", action="store_true", help="Print training progress")

    subparsers.add_parser("train", parents=[common], help="Train a policy")

    play_parser = subparsers.add_parser("play", parents=[common], help="Play against the agent")
    play_parser.add_argument("--opponent", choices=["human", "random"], default="human")
    play_parser.add_argument("--games", type=int, default=1, help="Number of games to play")
    return parser


def configure(args: argparse.Namespace) -> GameData:
    data = GameData()
    data.set_board_preset(args.board)
    data.set_agent_first(not args.second)
    data.gamma = args.gamma
    data.epsilon = args.epsilon
    data.seed = args.seed
    data.policy_file = args.policy_file
    data.verbose = args.verbose
    return data


def train(data: GameData) -> int:
    agent = make_agent(data.make_mdp(), gamma=data.gamma, epsilon=data.epsilon, seed=data.seed,
                       verbose=data.verbose, policy_file=None)
    print(f"Trained policy for {len(agent.policy)} of {len(agent.states)} states: "
          f"{agent.pi_iterations} policy iterations, {agent.eval_sweeps} evaluation sweeps, "
          f"{agent.training_time:.2f}s")
    if data.policy_file is not None:
        agent.save_policy(data.policy_file)
        print(f"Policy written to {data.policy_file}")
    start = agent.mdp.initial_state()
    if start in agent.values:
        print(f"Value of the opening position: {agent.value_of(start):.3f}")
    return 0


def start(data: GameData, mode: str = 'pva', games: int = 1) -> Counter:
    data.set_game_mode(mode)
    results: Counter = Counter()
    names = data.player_names()
    for game_number in range(1, games + 1):
        data.reset()
        print(f"\n=== Game {game_number}: {names[0]} (X) vs {names[1]} (O) ===")
        winner = ConnectGame(data, verbose=mode != 'rva' or games == 1).play_out()
        results["Draw" if winner == 0 else names[winner - 1]] += 1
    print("Results: " + ", ".join(f"{k}={v}" for k, v in sorted(results.items())))
    return results


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    data = configure(args)
    try:
        if args.command == "train":
            return train(data)
        start(data, mode='pva' if args.opponent == 'human' else 'rva', games=args.games)
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
