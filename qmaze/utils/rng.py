"""Random number generation utilities for Q-learning sessions."""

import numpy as np
from typing import Optional


class SeededRNG:
    """Seeded random number generator owned by a single training session."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._generator = np.random.default_rng(seed)

    def random(self) -> float:
        """Generate random float in [0, 1)."""
        return float(self._generator.random())

    def randint(self, a: int, b: int) -> int:
        """Generate random integer in [a, b]."""
        return int(self._generator.integers(a, b + 1))
