"""Core type definitions for the Q-learning maze trainer."""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional, Tuple, Literal, Dict

# Coordinate type for grid positions
Coord = Tuple[int, int]

# Session modes
TrainingMode = Literal["training", "exploitation"]


class Action(IntEnum):
    """Discrete moves available to the agent, in table column order."""
    IDLE = 0
    UP = 1
    DOWN = 2
    LEFT = 3
    RIGHT = 4


ACTION_DELTAS: Dict[Action, Coord] = {
    Action.IDLE: (0, 0),
    Action.UP: (0, -1),
    Action.DOWN: (0, 1),
    Action.LEFT: (-1, 0),
    Action.RIGHT: (1, 0),
}


class QMazeError(Exception):
    """Base class for trainer errors."""


class ConfigurationError(QMazeError, ValueError):
    """Invalid trainer configuration."""


class QTableFormatError(QMazeError, ValueError):
    """Malformed persisted Q-table."""


class StateOutOfRangeError(QMazeError, IndexError):
    """State or action index outside the table bounds."""


@dataclass
class RLConfig:
    """Configuration for the Q-learning session."""
    n_states: int = 16  # 4 sensor bits
    n_actions: int = len(Action)
    learning_rate: float = 0.1
    discount_factor: float = 0.9
    epsilon: float = 1.0
    epsilon_decay: float = 0.9999  # applied on every termination check
    epsilon_floor: float = 1e-8
    max_steps_per_episode: Optional[int] = None  # None = run until terminal
    seed: Optional[int] = None
    checkpoint_interval: int = 0
    log_interval: int = 1000
    # Visual configuration
    visual_step_delay: int = 0  # milliseconds between training ticks
    exploit_step_delay: int = 1000  # milliseconds between exploitation steps
    steps_per_tick: int = 50

    def validate(self) -> None:
        """Raise ConfigurationError if any setting is unusable."""
        if self.n_states <= 0 or self.n_actions <= 0:
            raise ConfigurationError(
                f"Q-table dimensions must be positive, got {self.n_states}x{self.n_actions}"
            )
        if not 0.0 < self.learning_rate <= 1.0:
            raise ConfigurationError(f"learning_rate must be in (0, 1], got {self.learning_rate}")
        if not 0.0 <= self.discount_factor <= 1.0:
            raise ConfigurationError(f"discount_factor must be in [0, 1], got {self.discount_factor}")
        if not 0.0 <= self.epsilon <= 1.0:
            raise ConfigurationError(f"epsilon must be in [0, 1], got {self.epsilon}")
        if not 0.0 < self.epsilon_decay < 1.0:
            raise ConfigurationError(f"epsilon_decay must be in (0, 1), got {self.epsilon_decay}")
        if self.epsilon_floor < 0.0:
            raise ConfigurationError(f"epsilon_floor must be non-negative, got {self.epsilon_floor}")
        if self.max_steps_per_episode is not None and self.max_steps_per_episode <= 0:
            raise ConfigurationError("max_steps_per_episode must be positive when set")
        if self.checkpoint_interval < 0:
            raise ConfigurationError("checkpoint_interval must be non-negative")
        if self.steps_per_tick <= 0:
            raise ConfigurationError("steps_per_tick must be positive")


@dataclass
class Episode:
    """Represents a single episode from reset to termination."""
    number: int
    steps: int
    total_reward: float
    reached_goal: bool
    epsilon_used: float
    mode: TrainingMode = "training"
    truncated: bool = False
    elapsed_time: float = 0.0  # seconds


@dataclass
class TrainingResult:
    """Summary of a training run."""
    episodes: list[Episode] = field(default_factory=list)
    total_steps: int = 0
    final_epsilon: float = 0.0
    finished: bool = False  # exploitation episode completed
    stopped: bool = False  # ended by an external stop request

    @property
    def total_episodes(self) -> int:
        return len(self.episodes)

    @property
    def successful_episodes(self) -> int:
        return sum(1 for ep in self.episodes if ep.reached_goal)

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        return self.successful_episodes / self.total_episodes if self.total_episodes > 0 else 0.0

    @property
    def average_reward(self) -> float:
        if not self.episodes:
            return 0.0
        return sum(ep.total_reward for ep in self.episodes) / len(self.episodes)

    @property
    def exploitation_episode(self) -> Optional[Episode]:
        """The final greedy episode, if the run got that far."""
        for ep in reversed(self.episodes):
            if ep.mode == "exploitation":
                return ep
        return None
