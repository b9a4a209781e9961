#!/usr/bin/env python3
"""
Parameter sweep for PolicyIterationAgent.

Iterates over:
  • boards   = ['tiny', 'ttt']   (add 'mini' for a longer run)
  • gammas   = [0.7, 0.8, 0.9, 0.95]

Logs:
  |S|    – number of states enumerated
  iter   – policy iteration cycles until the policy was stable
  sweeps – policy evaluation sweeps summed over all cycles
  V0     – value of the opening position
  time   – wall-clock runtime of training (enumeration excluded)
"""
import sys, pathlib
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

import itertools

from game_mdp import GameMDP
from pi_agent import PolicyIterationAgent


def run_one(board: str, gamma: float, epsilon: float = 0.01) -> None:
    mdp = GameMDP.from_preset(board)
    agent = PolicyIterationAgent(mdp, discount_factor=gamma, epsilon=epsilon,
                                 seed=0, verbose=False)
    agent.initialize()
    agent.train()

    start = mdp.initial_state()
    print(f"board={board:5s}  γ={gamma:4.2f}  "
          f"|S|={len(agent.states):5d}  iter={agent.pi_iterations:3d}  "
          f"sweeps={agent.eval_sweeps:4d}  V0={agent.value_of(start):+7.3f}  "
          f"time={agent.training_time:6.3f}s")


def main():
    boards = ['tiny', 'ttt']
    gammas = [0.7, 0.8, 0.9, 0.95]

    print("Parameter sweep (policy iteration vs random opponent)")
    for b, g in itertools.product(boards, gammas):
        run_one(b, g)


if __name__ == "__main__":
    main()
