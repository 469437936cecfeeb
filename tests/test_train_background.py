"""Tests for the headless training script."""

import contextlib
import io
import tempfile
import unittest
from pathlib import Path

from qmaze.domain.qtable import QTable
from qmaze.utils.table_store import TableStore, load_table
from train_background import build_config, build_parser, main

# Epsilon reaches the floor after ~66 termination checks
FAST_RUN = [
    "--epsilon-decay", "0.9",
    "--epsilon-floor", "1e-3",
    "--max-steps", "20",
    "--seed", "3",
    "--log-interval", "0",
]


class TestBuildConfig(unittest.TestCase):

    def test_max_steps_zero_means_no_cap(self):
        config = build_config(build_parser().parse_args(["--max-steps", "0"]))
        self.assertIsNone(config.max_steps_per_episode)

    def test_default_max_steps(self):
        config = build_config(build_parser().parse_args([]))
        self.assertEqual(config.max_steps_per_episode, 1000)

    def test_load_table_and_resume_exclusive(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                build_parser().parse_args(["--load-table", "q.csv", "--resume"])


class TestTrainBackground(unittest.TestCase):
    """Runs main() end to end in a temporary directory."""

    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp_dir.name)
        self.table_path = self.root / "qtable.csv"
        self.checkpoint_dir = self.root / "checkpoints"

    def tearDown(self):
        self.tmp_dir.cleanup()

    def run_main(self, *extra):
        argv = FAST_RUN + ["--save-table", str(self.table_path),
                           "--checkpoint-dir", str(self.checkpoint_dir), *extra]
        output = io.StringIO()
        with contextlib.redirect_stdout(output):
            code = main(argv)
        return code, output.getvalue()

    def test_checkpoints_written_and_pruned(self):
        code, output = self.run_main("--checkpoint-interval", "1", "--keep-checkpoints", "2")
        self.assertEqual(code, 0)
        self.assertIn("Run summary", output)

        checkpoints = TableStore(str(self.checkpoint_dir)).list_checkpoints("maze")
        self.assertEqual(len(checkpoints), 2)
        self.assertEqual(checkpoints[1].episode_number - checkpoints[0].episode_number, 1)

        self.assertEqual(len(self.table_path.read_text().splitlines()), 16)
        load_table(QTable(16, 5), self.table_path)

    def test_no_checkpoints_by_default(self):
        code, _ = self.run_main()
        self.assertEqual(code, 0)
        self.assertEqual(TableStore(str(self.checkpoint_dir)).list_checkpoints(), [])

    def test_resume_continues_episode_numbering(self):
        store = TableStore(str(self.checkpoint_dir))
        table = QTable(16, 5)
        table.set(3, 2, 7.5)
        store.create_checkpoint("maze", table, 50)

        code, output = self.run_main("--resume", "--checkpoint-interval", "1")
        self.assertEqual(code, 0)
        self.assertIn("Starting from episode: 50", output)
        self.assertGreater(store.latest_checkpoint("maze").episode_number, 50)

    def test_resume_without_checkpoint_fails(self):
        code, output = self.run_main("--resume")
        self.assertEqual(code, 1)
        self.assertIn("No checkpoint", output)
        self.assertFalse(self.table_path.exists())

    def test_bad_table_is_startup_error(self):
        bad = self.root / "bad.csv"
        bad.write_text("not,a,table\n")
        code, output = self.run_main("--load-table", str(bad))
        self.assertEqual(code, 1)
        self.assertIn("Startup error", output)


if __name__ == "__main__":
    unittest.main()
