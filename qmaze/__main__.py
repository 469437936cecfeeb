"""Main entry point for the Q-learning maze viewer."""

import argparse
import logging
import os
import signal
import sys

from PySide6.QtWidgets import QApplication

from .domain.types import RLConfig, QMazeError


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Watch a Q-learning agent learn a maze")
    parser.add_argument("--load-table", type=str, help="Pre-trained Q-table; skips straight to exploitation")
    parser.add_argument("--save-table", type=str, help="File written by the Save button and on exit")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible runs")
    parser.add_argument("--epsilon-decay", type=float, default=RLConfig.epsilon_decay,
                        help="Multiplicative epsilon decay per termination check")
    parser.add_argument("--steps-per-tick", type=int, default=RLConfig.steps_per_tick,
                        help="Training steps per redraw")
    parser.add_argument("--step-delay", type=int, default=RLConfig.visual_step_delay,
                        help="Milliseconds between training redraws")
    parser.add_argument("--max-steps", type=int, default=1000,
                        help="Truncate episodes after this many steps (0 = never)")
    parser.add_argument("--autostart", action="store_true", help="Start the run immediately")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level")
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point for the maze viewer."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    os.environ.setdefault('QT_LOGGING_RULES', 'qt.qpa.backingstore=false')

    app = QApplication(sys.argv[:1])
    app.setApplicationName("QMaze")

    # Import UI components (after QApplication is created)
    from .ui.main_window import MainWindow
    from .app.controller import MazeController

    config = RLConfig(
        epsilon_decay=args.epsilon_decay,
        seed=args.seed,
        max_steps_per_episode=args.max_steps or None,
        steps_per_tick=args.steps_per_tick,
        visual_step_delay=args.step_delay,
    )
    try:
        controller = MazeController(config, table_path=args.load_table)
    except (QMazeError, OSError) as e:
        print(f"Startup error: {e}")
        return 1

    window = MainWindow(controller, save_path=args.save_table)

    def signal_handler(sig, frame):
        """Handle system signals as a stop request."""
        print(f"\nReceived signal {sig}, shutting down...")
        window.close()
        app.quit()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    window.show()
    if args.autostart:
        controller.start()
    exit_code = app.exec()

    if args.save_table:
        try:
            controller.agent.save_table(args.save_table)
        except OSError as e:
            print(f"Failed to save table: {e}")
            return 1
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
