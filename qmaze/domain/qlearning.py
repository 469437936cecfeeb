"""Q-Learning algorithm implementation for episodic environments."""

import logging
import time
from typing import Optional, List, Callable, Literal

from .environment import Environment
from .policy import EpsilonGreedyPolicy
from .qtable import QTable
from .types import RLConfig, Episode, TrainingResult, TrainingMode, ConfigurationError
from ..utils.rng import SeededRNG
from ..utils.table_store import save_table, load_table

logger = logging.getLogger(__name__)

SessionPhase = Literal["idle", "training", "exploitation", "finished", "stopped"]


def bellman_update(table: QTable, state: int, action: int, reward: float, q_max: float,
                   learning_rate: float, discount_factor: float) -> float:
    """
    Move Q(S, a) toward the one-step target and return the new value.

        Q(S, a) <- Q(S, a) + lr * (R + gamma * Q_max - Q(S, a))
    """
    current_q = table.get(state, action)
    new_q = current_q + learning_rate * (reward + discount_factor * q_max - current_q)
    table.set(state, action, new_q)
    return new_q


class QLearningAgent:
    """
    Tabular Q-learning agent bound to one environment.

    The session trains episode after episode until epsilon decays to the
    floor, then plays exactly one more episode in exploitation mode and
    finishes. Q-values keep being updated during that last episode.
    """

    def __init__(self, env: Environment, config: Optional[RLConfig] = None,
                 table: Optional[QTable] = None, rng: Optional[SeededRNG] = None):
        self.config = config or RLConfig()
        self.config.validate()
        self.env = env

        if table is None:
            table = QTable(self.config.n_states, self.config.n_actions)
        elif (table.n_states, table.n_actions) != (self.config.n_states, self.config.n_actions):
            raise ConfigurationError(
                f"table is {table.n_states}x{table.n_actions}, config expects "
                f"{self.config.n_states}x{self.config.n_actions}"
            )
        self.table = table
        self.policy = EpsilonGreedyPolicy(
            epsilon=self.config.epsilon,
            decay_rate=self.config.epsilon_decay,
            floor=self.config.epsilon_floor,
            rng=rng or SeededRNG(self.config.seed),
        )

        self.phase: SessionPhase = "idle"
        self.episodes_completed = 0
        self.total_steps = 0
        self.training_history: List[Episode] = []
        self.state: Optional[int] = None

        # Current episode bookkeeping
        self._episode_mode: TrainingMode = "training"
        self._episode_steps = 0
        self._episode_reward = 0.0
        self._episode_epsilon = 0.0
        self._episode_start_time = 0.0
        self._stop_requested = False

    # Session state

    @property
    def epsilon(self) -> float:
        return self.policy.epsilon

    @property
    def is_training(self) -> bool:
        """True while epsilon is above the exploration floor."""
        return self.policy.is_exploring

    @property
    def is_finished(self) -> bool:
        return self.phase in ("finished", "stopped")

    @property
    def mode(self) -> TrainingMode:
        """Mode of the episode currently being played."""
        return self._episode_mode

    # Building blocks

    def observe_state(self) -> int:
        """Read the environment state and check it fits the table."""
        state = self.env.observe_state()
        return self.table.check_state(state)

    def is_ended(self) -> bool:
        """Decay epsilon, then ask the environment whether the episode ended."""
        self.policy.decay()
        return self.env.is_terminal()

    def select_action(self, state: int) -> int:
        """Select action using epsilon-greedy policy."""
        return self.policy.select(self.table, state)

    def update_q_value(self, state: int, action: int, reward: float, q_max: float) -> float:
        """Update Q-value using the Bellman equation."""
        return bellman_update(self.table, state, action, reward, q_max,
                              self.config.learning_rate, self.config.discount_factor)

    def step(self, state: int) -> int:
        """Select, apply and learn from one action. Returns the resulting state."""
        action = self.select_action(state)
        self.env.apply(action)
        new_state = self.observe_state()
        reward = self.env.observe_reward()
        q_max = self.table.max_over_actions(new_state)
        self.update_q_value(state, action, reward, q_max)

        self._episode_steps += 1
        self._episode_reward += reward
        self.total_steps += 1
        logger.debug("S=%d a=%d R=%s S'=%d eps=%.6f", state, action, reward, new_state, self.epsilon)
        return new_state

    # Session loop

    def begin(self) -> None:
        """Reset the environment and start the first episode of the run."""
        self._stop_requested = False
        self.env.reset()
        if self.is_training:
            self.phase = "training"
            logger.info("Training started (epsilon=%.6f)", self.epsilon)
        else:
            self.phase = "exploitation"
            logger.info("Exploration disabled, running a single exploitation episode")
        self._start_episode()

    def _start_episode(self) -> None:
        self._episode_mode = "exploitation" if self.phase == "exploitation" else "training"
        self._episode_steps = 0
        self._episode_reward = 0.0
        self._episode_epsilon = self.epsilon
        self._episode_start_time = time.time()
        self.state = self.observe_state()

    def tick(self) -> bool:
        """
        Advance the session by one termination check.

        If the episode is still running, one step is taken. On termination the
        episode is recorded and the environment restarted; a finished
        exploitation episode ends the run. Returns True once the run is over.
        """
        if self.phase == "idle":
            self.begin()
        if self.is_finished:
            return True

        max_steps = self.config.max_steps_per_episode
        truncated = max_steps is not None and self._episode_steps >= max_steps
        if self.is_ended() or truncated:
            self._finish_episode(truncated and not self.env.is_terminal())
            return self.is_finished

        self.state = self.step(self.state)
        return False

    def _finish_episode(self, truncated: bool) -> Episode:
        episode = Episode(
            number=self.episodes_completed,
            steps=self._episode_steps,
            total_reward=self._episode_reward,
            reached_goal=not truncated and self.env.is_goal(),
            epsilon_used=self._episode_epsilon,
            mode=self._episode_mode,
            truncated=truncated,
            elapsed_time=time.time() - self._episode_start_time,
        )
        self.training_history.append(episode)
        self.episodes_completed += 1
        self.env.reset()

        interval = self.config.log_interval
        if interval and self.episodes_completed % interval == 0:
            recent = self.training_history[-interval:]
            successes = sum(1 for ep in recent if ep.reached_goal)
            logger.info("Episode %d: success rate %.1f%%, epsilon %.3e",
                        self.episodes_completed, 100.0 * successes / len(recent), self.epsilon)

        if self._episode_mode == "exploitation":
            self.phase = "finished"
            logger.info("Exploitation episode finished in %d steps (goal reached: %s)",
                        episode.steps, episode.reached_goal)
        else:
            if not self.is_training:
                self.phase = "exploitation"
                logger.info("Epsilon %.3e below floor after %d episodes, switching to exploitation",
                            self.epsilon, self.episodes_completed)
            self._start_episode()
        return episode

    def stop(self) -> None:
        """Request the run to end before the next step."""
        self._stop_requested = True
        if not self.is_finished and self.phase != "idle":
            self.phase = "stopped"
            logger.info("Run stopped after %d episodes", self.episodes_completed)

    def run(self, should_stop: Optional[Callable[[], bool]] = None,
            on_step: Optional[Callable[["QLearningAgent"], None]] = None,
            on_episode: Optional[Callable[[Episode], None]] = None) -> TrainingResult:
        """
        Train until the exploitation episode completes or a stop is requested.

        ``should_stop`` is polled between steps. ``on_step`` runs after every
        tick (rendering hook) and ``on_episode`` after every finished episode.
        """
        if self.phase == "idle":
            self.begin()
        while not self.is_finished:
            if self._stop_requested or (should_stop is not None and should_stop()):
                self.stop()
                break
            episodes_before = self.episodes_completed
            self.tick()
            if on_step is not None:
                on_step(self)
            if on_episode is not None and self.episodes_completed > episodes_before:
                on_episode(self.training_history[-1])
        return self.result()

    def result(self) -> TrainingResult:
        return TrainingResult(
            episodes=list(self.training_history),
            total_steps=self.total_steps,
            final_epsilon=self.epsilon,
            finished=self.phase == "finished",
            stopped=self.phase == "stopped",
        )

    # Persistence

    def save_table(self, path) -> None:
        """Write the Q-table dump to ``path``."""
        save_table(self.table, path)
        logger.info("Saved Q-table to %s", path)

    def load_table(self, path) -> None:
        """Load a pre-trained Q-table; exploration is switched off afterwards."""
        load_table(self.table, path)
        self.policy.disable_exploration()
        logger.info("Loaded Q-table from %s, epsilon forced to 0", path)
