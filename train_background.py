#!/usr/bin/env python3
"""
Headless training script for the Q-learning maze agent.
Trains until exploration decays away, plays the final greedy episode and
saves the Q-table, with optional checkpoints along the way.
"""

import argparse
import logging
import sys

from qmaze.domain.environment import GridMazeEnvironment
from qmaze.domain.qlearning import QLearningAgent
from qmaze.domain.types import RLConfig, QMazeError, Episode
from qmaze.utils.table_store import TableStore


def create_checkpoint_callback(store: TableStore, name: str, agent: QLearningAgent, interval: int):
    """Create a callback that dumps the table every ``interval`` episodes."""
    def save_checkpoint(episode: Episode):
        if episode.mode == "training" and agent.episodes_completed % interval == 0:
            store.create_checkpoint(name, agent.table, agent.episodes_completed)

    return save_checkpoint


def build_config(args) -> RLConfig:
    return RLConfig(
        learning_rate=args.learning_rate,
        discount_factor=args.discount_factor,
        epsilon_decay=args.epsilon_decay,
        epsilon_floor=args.epsilon_floor,
        max_steps_per_episode=args.max_steps or None,
        seed=args.seed,
        checkpoint_interval=args.checkpoint_interval,
        log_interval=args.log_interval,
    )


def build_parser() -> argparse.ArgumentParser:
    defaults = RLConfig()
    parser = argparse.ArgumentParser(description="Headless Q-learning maze training")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--load-table", type=str, help="Pre-trained Q-table; runs one exploitation episode")
    source.add_argument("--resume", action="store_true",
                        help="Continue training from the latest checkpoint in --checkpoint-dir")
    parser.add_argument("--save-table", type=str, default="qtable.csv", help="Where to write the final Q-table")
    parser.add_argument("--learning-rate", type=float, default=defaults.learning_rate)
    parser.add_argument("--discount-factor", type=float, default=defaults.discount_factor)
    parser.add_argument("--epsilon-decay", type=float, default=defaults.epsilon_decay)
    parser.add_argument("--epsilon-floor", type=float, default=defaults.epsilon_floor)
    parser.add_argument("--max-steps", type=int, default=1000,
                        help="Truncate episodes after this many steps (0 = never)")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--checkpoint-interval", type=int, default=0, help="Episodes between checkpoints (0 = off)")
    parser.add_argument("--checkpoint-dir", type=str, default="training_checkpoints")
    parser.add_argument("--keep-checkpoints", type=int, default=10)
    parser.add_argument("--log-interval", type=int, default=defaults.log_interval)
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    store = None
    try:
        config = build_config(args)
        env = GridMazeEnvironment()
        agent = QLearningAgent(env, config)
        if args.load_table:
            print(f"Loading Q-table from: {args.load_table}")
            agent.load_table(args.load_table)
        elif args.resume:
            store = TableStore(args.checkpoint_dir)
            checkpoint = store.latest_checkpoint("maze")
            if checkpoint is None:
                print(f"No checkpoint to resume from in {args.checkpoint_dir}")
                return 1
            print(f"Resuming from {checkpoint.file_path} ({checkpoint.file_size} bytes)")
            store.load_checkpoint(checkpoint, agent.table)
            agent.episodes_completed = checkpoint.episode_number
    except (QMazeError, OSError) as e:
        print(f"Startup error: {e}")
        return 1

    print("Q-Learning Maze Training")
    print("=" * 50)
    print(f"Grid: {env.width}x{env.height}, start {env.start} -> goal {env.goal}")
    print(f"Learning rate: {config.learning_rate}, discount: {config.discount_factor}")
    print(f"Epsilon: {agent.epsilon} (decay {config.epsilon_decay}, floor {config.epsilon_floor})")
    print(f"Starting from episode: {agent.episodes_completed}")

    on_episode = None
    if config.checkpoint_interval > 0:
        store = store or TableStore(args.checkpoint_dir)
        on_episode = create_checkpoint_callback(store, "maze", agent, config.checkpoint_interval)

    try:
        result = agent.run(on_episode=on_episode)
    except KeyboardInterrupt:
        print("\nTraining interrupted by user")
        agent.stop()
        result = agent.result()
    except (QMazeError, OSError) as e:
        print(f"\nTraining failed: {e}")
        return 1

    if on_episode is not None:
        store.cleanup_old_checkpoints("maze", args.keep_checkpoints)

    print("\nRun summary:")
    print(f"   Episodes: {result.total_episodes}")
    print(f"   Steps: {result.total_steps}")
    print(f"   Success rate: {result.success_rate:.1%}")
    print(f"   Final epsilon: {result.final_epsilon:.3e}")
    final = result.exploitation_episode
    if final is not None:
        outcome = "reached the goal" if final.reached_goal else "did not reach the goal"
        print(f"   Exploitation episode: {final.steps} steps, {outcome}")
    elif result.stopped:
        print("   Stopped before the exploitation episode")

    try:
        agent.save_table(args.save_table)
        print(f"Q-table saved to {args.save_table}")
    except OSError as e:
        print(f"Failed to save Q-table: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
