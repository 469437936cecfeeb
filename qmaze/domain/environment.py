"""Environment adapters the Q-learning agent can drive."""

from abc import ABC, abstractmethod

from .types import Action, Coord, ACTION_DELTAS

# Reference maze layout
GRID_SIZE = 8
START_POS: Coord = (0, 0)
GOAL_POS: Coord = (4, 6)

REWARD_CLOSE = 10
REWARD_FAR = -10

# Sensor bits of the maze state
GOAL_ABOVE = 0x1
GOAL_BELOW = 0x2
GOAL_LEFT = 0x4
GOAL_RIGHT = 0x8
N_MAZE_STATES = 16


class Environment(ABC):
    """Episodic environment exposed to the trainer."""

    @abstractmethod
    def reset(self) -> None:
        """Place the environment in its initial state."""

    @abstractmethod
    def is_terminal(self) -> bool:
        """True once the current episode has ended."""

    @abstractmethod
    def apply(self, action: int) -> None:
        """Apply a discrete action."""

    @abstractmethod
    def observe_state(self) -> int:
        """Encode the current configuration as a state id."""

    @abstractmethod
    def observe_reward(self) -> float:
        """Reward for the most recent transition."""

    def is_goal(self) -> bool:
        """Whether a terminal state counts as success. Defaults to any terminal."""
        return self.is_terminal()


class GridMazeEnvironment(Environment):
    """
    Open grid where the player walks toward a goal tile.

    The episode ends on the goal or as soon as the player leaves the grid.
    The state is a 4-bit mask telling in which directions the goal lies, and
    each move is rewarded by whether it brought the player closer.
    """

    def __init__(self, width: int = GRID_SIZE, height: int = GRID_SIZE,
                 start: Coord = START_POS, goal: Coord = GOAL_POS,
                 reward_close: float = REWARD_CLOSE, reward_far: float = REWARD_FAR):
        if not (0 <= start[0] < width and 0 <= start[1] < height):
            raise ValueError(f"start {start} outside {width}x{height} grid")
        if not (0 <= goal[0] < width and 0 <= goal[1] < height):
            raise ValueError(f"goal {goal} outside {width}x{height} grid")
        self.width = width
        self.height = height
        self.start = start
        self.goal = goal
        self.reward_close = reward_close
        self.reward_far = reward_far
        self.player_pos: Coord = start
        self.last_reward = 0.0

    def reset(self) -> None:
        self.player_pos = self.start
        self.last_reward = 0.0

    def in_bounds(self, pos: Coord) -> bool:
        x, y = pos
        return 0 <= x < self.width and 0 <= y < self.height

    def is_goal(self) -> bool:
        return self.player_pos == self.goal

    def is_terminal(self) -> bool:
        return self.is_goal() or not self.in_bounds(self.player_pos)

    def apply(self, action: int) -> None:
        action = Action(action)
        old_distance = self._distance_to_goal(self.player_pos)
        if action != Action.IDLE:
            dx, dy = ACTION_DELTAS[action]
            self.player_pos = (self.player_pos[0] + dx, self.player_pos[1] + dy)

        closer = (self.in_bounds(self.player_pos)
                  and self._distance_to_goal(self.player_pos) < old_distance)
        self.last_reward = self.reward_close if closer else self.reward_far

    def observe_state(self) -> int:
        x, y = self.player_pos
        gx, gy = self.goal
        state = 0
        if gy < y:
            state |= GOAL_ABOVE
        if gy > y:
            state |= GOAL_BELOW
        if gx < x:
            state |= GOAL_LEFT
        if gx > x:
            state |= GOAL_RIGHT
        return state

    def observe_reward(self) -> float:
        return self.last_reward

    def _distance_to_goal(self, pos: Coord) -> int:
        """Manhattan distance to the goal."""
        return abs(pos[0] - self.goal[0]) + abs(pos[1] - self.goal[1])
