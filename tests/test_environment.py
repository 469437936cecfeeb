"""Unit tests for the reference grid maze and an end-to-end training run on it."""

import unittest

from qmaze.domain.environment import (
    GridMazeEnvironment, GOAL_ABOVE, GOAL_BELOW, GOAL_LEFT, GOAL_RIGHT,
    N_MAZE_STATES, REWARD_CLOSE, REWARD_FAR,
)
from qmaze.domain.qlearning import QLearningAgent
from qmaze.domain.types import Action, RLConfig


class TestGridMazeEnvironment(unittest.TestCase):
    """Test cases for GridMazeEnvironment."""

    def setUp(self):
        self.env = GridMazeEnvironment()
        self.env.reset()

    def test_reset_places_player_on_start(self):
        self.env.apply(Action.RIGHT)
        self.env.reset()
        self.assertEqual(self.env.player_pos, (0, 0))
        self.assertFalse(self.env.is_terminal())

    def test_start_state_encodes_goal_direction(self):
        # Goal (4, 6) lies below and to the right of (0, 0)
        self.assertEqual(self.env.observe_state(), GOAL_BELOW | GOAL_RIGHT)

    def test_idle_is_noop(self):
        self.env.apply(Action.IDLE)
        self.assertEqual(self.env.player_pos, (0, 0))
        self.assertEqual(self.env.observe_reward(), REWARD_FAR)

    def test_moves(self):
        self.env.apply(Action.RIGHT)
        self.assertEqual(self.env.player_pos, (1, 0))
        self.env.apply(Action.DOWN)
        self.assertEqual(self.env.player_pos, (1, 1))
        self.env.apply(Action.LEFT)
        self.assertEqual(self.env.player_pos, (0, 1))
        self.env.apply(Action.UP)
        self.assertEqual(self.env.player_pos, (0, 0))

    def test_reward_follows_distance(self):
        self.env.apply(Action.DOWN)
        self.assertEqual(self.env.observe_reward(), REWARD_CLOSE)
        self.env.apply(Action.UP)
        self.assertEqual(self.env.observe_reward(), REWARD_FAR)

    def test_leaving_grid_is_terminal(self):
        self.env.apply(Action.UP)
        self.assertTrue(self.env.is_terminal())
        self.assertFalse(self.env.is_goal())
        self.assertEqual(self.env.observe_reward(), REWARD_FAR)
        self.assertTrue(0 <= self.env.observe_state() < N_MAZE_STATES)

    def test_reaching_goal_is_terminal(self):
        env = GridMazeEnvironment(start=(4, 5), goal=(4, 6))
        env.reset()
        self.assertEqual(env.observe_state(), GOAL_BELOW)
        env.apply(Action.DOWN)
        self.assertTrue(env.is_terminal())
        self.assertTrue(env.is_goal())
        self.assertEqual(env.observe_state(), 0)
        self.assertEqual(env.observe_reward(), REWARD_CLOSE)

    def test_state_bits(self):
        env = GridMazeEnvironment(start=(7, 7), goal=(4, 6))
        env.reset()
        self.assertEqual(env.observe_state(), GOAL_ABOVE | GOAL_LEFT)

    def test_states_stay_in_range(self):
        for y in range(-1, 9):
            for x in range(-1, 9):
                self.env.player_pos = (x, y)
                self.assertTrue(0 <= self.env.observe_state() < N_MAZE_STATES)

    def test_invalid_layout_rejected(self):
        with self.assertRaises(ValueError):
            GridMazeEnvironment(start=(8, 0))
        with self.assertRaises(ValueError):
            GridMazeEnvironment(goal=(-1, 2))


class TestMazeTraining(unittest.TestCase):
    """Trains on the reference maze with a faster decay."""

    def test_agent_learns_to_reach_goal(self):
        # With rewards of +/-10 any discount below 2/3 keeps every move toward
        # the goal ahead of every other move, despite the aliased states.
        config = RLConfig(discount_factor=0.5, epsilon_decay=0.999, seed=7,
                          max_steps_per_episode=100, log_interval=0)
        env = GridMazeEnvironment()
        agent = QLearningAgent(env, config)
        result = agent.run()

        self.assertTrue(result.finished)
        final = result.exploitation_episode
        self.assertIsNotNone(final)
        self.assertTrue(final.reached_goal)
        # Manhattan distance from (0, 0) to (4, 6)
        self.assertEqual(final.steps, 10)
        self.assertIn(agent.table.best_action(GOAL_BELOW | GOAL_RIGHT), (Action.DOWN, Action.RIGHT))


if __name__ == "__main__":
    unittest.main()
