"""Epsilon-greedy action selection with per-check decay."""

from typing import Optional

from .qtable import QTable
from ..utils.rng import SeededRNG


class EpsilonGreedyPolicy:
    """
    Chooses between a uniformly random action and the table's best action.

    Epsilon starts at ``epsilon`` and is multiplied by ``decay_rate`` every
    time decay() is called. The trainer calls it on each termination check,
    so exploration shrinks with elapsed steps rather than episodes. Once
    epsilon drops to ``floor`` or below the policy no longer counts as
    exploring.
    """

    def __init__(self, epsilon: float = 1.0, decay_rate: float = 0.9999,
                 floor: float = 1e-8, rng: Optional[SeededRNG] = None):
        self.epsilon = epsilon
        self.decay_rate = decay_rate
        self.floor = floor
        self.rng = rng or SeededRNG()

    @property
    def is_exploring(self) -> bool:
        return self.epsilon > self.floor

    def select(self, table: QTable, state: int) -> int:
        """Select an action for ``state``."""
        table.check_state(state)
        if self.rng.random() < self.epsilon:
            return self.rng.randint(0, table.n_actions - 1)
        return table.best_action(state)

    def decay(self) -> float:
        self.epsilon *= self.decay_rate
        return self.epsilon

    def disable_exploration(self) -> None:
        """Force pure exploitation, as for a pre-trained table."""
        self.epsilon = 0.0
