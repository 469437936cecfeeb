"""Unit tests for epsilon-greedy action selection."""

import unittest

from qmaze.domain.policy import EpsilonGreedyPolicy
from qmaze.domain.qtable import QTable
from qmaze.domain.types import StateOutOfRangeError
from qmaze.utils.rng import SeededRNG


class TestEpsilonGreedyPolicy(unittest.TestCase):
    """Test cases for EpsilonGreedyPolicy."""

    def setUp(self):
        self.table = QTable(16, 5)

    def test_epsilon_strictly_decreases(self):
        policy = EpsilonGreedyPolicy(epsilon=1.0, decay_rate=0.9)
        previous = policy.epsilon
        for _ in range(100):
            current = policy.decay()
            self.assertLess(current, previous)
            previous = current

    def test_epsilon_eventually_below_floor(self):
        policy = EpsilonGreedyPolicy(epsilon=1.0, decay_rate=0.5, floor=1e-3)
        checks = 0
        while policy.is_exploring:
            policy.decay()
            checks += 1
        # 0.5 ** 10 is the first power below 1e-3
        self.assertEqual(checks, 10)
        self.assertLessEqual(policy.epsilon, 1e-3)

    def test_exploration_actions_in_range(self):
        policy = EpsilonGreedyPolicy(epsilon=1.0, rng=SeededRNG(3))
        seen = set()
        for i in range(500):
            action = policy.select(self.table, i % 16)
            self.assertTrue(0 <= action < 5)
            seen.add(action)
        self.assertEqual(seen, {0, 1, 2, 3, 4})

    def test_exploitation_picks_best_action(self):
        policy = EpsilonGreedyPolicy(epsilon=0.0, rng=SeededRNG(3))
        self.table.set(7, 3, 2.0)
        for _ in range(50):
            self.assertEqual(policy.select(self.table, 7), 3)
        for state in range(16):
            self.assertTrue(0 <= policy.select(self.table, state) < 5)

    def test_disable_exploration(self):
        policy = EpsilonGreedyPolicy(epsilon=0.7)
        policy.disable_exploration()
        self.assertEqual(policy.epsilon, 0.0)
        self.assertFalse(policy.is_exploring)

    def test_seeded_selection_is_reproducible(self):
        first = EpsilonGreedyPolicy(epsilon=0.5, rng=SeededRNG(42))
        second = EpsilonGreedyPolicy(epsilon=0.5, rng=SeededRNG(42))
        picks_a = [first.select(self.table, s % 16) for s in range(100)]
        picks_b = [second.select(self.table, s % 16) for s in range(100)]
        self.assertEqual(picks_a, picks_b)

    def test_out_of_range_state_rejected(self):
        policy = EpsilonGreedyPolicy(epsilon=1.0)
        with self.assertRaises(StateOutOfRangeError):
            policy.select(self.table, 16)


if __name__ == "__main__":
    unittest.main()
