#!/usr/bin/env python3
# =============================================================================
# Train Q-Table
# =============================================================================
"""
Train a Q-table for an illuminance goal on the simulated lab.

Usage:
------
# Basic training with the bundled config
python scripts/train_q.py --config configs/default.yaml

# Another goal, fewer episodes
python scripts/train_q.py --goal 1 2 --episodes 1000

# Print the table and skip the evaluation rollouts
python scripts/train_q.py --print-table --no-eval
"""

import argparse
import logging
import os
import sys

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Train a Q-table on the simulated lab")

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML experiment config (default: built-in defaults)"
    )

    # Goal
    parser.add_argument(
        "--goal",
        type=int,
        nargs=2,
        metavar=("Z1", "Z2"),
        default=None,
        help="Target ranks for zone 1 and zone 2, each 0-3"
    )

    # Training
    parser.add_argument("--episodes", type=int, default=None, help="Number of episodes")
    parser.add_argument("--alpha", type=float, default=None, help="Learning rate [0, 1]")
    parser.add_argument("--gamma", type=float, default=None, help="Discount factor [0, 1]")
    parser.add_argument("--epsilon", type=float, default=None, help="Exploration rate [0, 1]")
    parser.add_argument("--reward", type=float, default=None, help="Goal reward (> 0)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")

    # Output
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Directory for the exported CSV table"
    )
    parser.add_argument(
        "--log-episodes",
        action="store_true",
        help="Write per-episode stats to <log_dir>/<name>.jsonl"
    )
    parser.add_argument(
        "--print-table",
        action="store_true",
        help="Print the full Q matrix after training"
    )
    parser.add_argument(
        "--no-eval",
        action="store_true",
        help="Skip the greedy evaluation rollouts"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Debug logging"
    )

    return parser.parse_args(argv)


def build_config(args):
    """Load the config and apply command line overrides."""
    from lightlab.training.experiment_config import create_default_config, load_config

    config = load_config(args.config) if args.config else create_default_config("cli")

    if args.goal is not None:
        config.goal = list(args.goal)
        if not args.config:
            config.name = f"goal_{args.goal[0]}_{args.goal[1]}"
    if args.seed is not None:
        config.seed = args.seed
    if args.output_dir is not None:
        config.output_dir = args.output_dir

    overrides = {
        "episodes": args.episodes,
        "alpha": args.alpha,
        "gamma": args.gamma,
        "epsilon": args.epsilon,
        "goal_reward": args.reward,
    }
    for key, value in overrides.items():
        if value is not None:
            setattr(config.training, key, value)

    return config


def main(argv=None):
    """Main training function."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from lightlab import QLearner
    from lightlab.evaluation import EvaluationSuite
    from lightlab.training import EpisodeLogger, format_q_table

    config = build_config(args)
    training = config.training

    print("=" * 60)
    print("Q-Learning")
    print("=" * 60)
    print(f"Goal:           {tuple(config.goal)}")
    print(f"Episodes:       {training.episodes}")
    print(f"Alpha:          {training.alpha}")
    print(f"Gamma:          {training.gamma}")
    print(f"Epsilon:        {training.epsilon}")
    print(f"Goal reward:    {training.goal_reward}")
    print(f"Experiment:     {config.name}")
    print("=" * 60)
    print()

    # Save config next to the tables it produces
    config_path = os.path.join(config.output_dir, f"{config.name}.yaml")
    config.save(config_path)
    print(f"Saved config to: {config_path}")

    episode_logger = None
    if args.log_episodes:
        episode_logger = EpisodeLogger(config.log_dir, f"{config.name}.jsonl")

    lab = config.make_environment()
    learner = QLearner(
        lab,
        seed=config.seed,
        max_steps=training.max_steps,
        max_kicks=training.max_kicks,
        log_every=training.log_every,
        episode_logger=episode_logger,
    )

    table = learner.train(
        config.goal,
        episodes=training.episodes,
        alpha=training.alpha,
        gamma=training.gamma,
        epsilon=training.epsilon,
        goal_reward=training.goal_reward,
    )

    history = learner.trainer.history
    reached = sum(s.reached_goal for s in history)
    print(f"\nGoal reached in {reached}/{len(history)} training episodes")

    if args.print_table:
        print(format_q_table(table))

    path = learner.export(config.goal, config.output_dir)
    print(f"Saved Q-table to: {path}")

    if not args.no_eval:
        print("\nRunning evaluation...")
        suite = EvaluationSuite(lab, max_steps=config.evaluation.max_steps, seed=config.seed)
        metrics = suite.evaluate(
            learner, config.goal, num_episodes=config.evaluation.num_episodes, verbose=True
        )

        print("\n" + "=" * 60)
        print("Training Complete!")
        print("=" * 60)
        print(f"Final success rate: {metrics['success_rate']:.1%}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
