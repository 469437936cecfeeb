"""Dense state x action value table."""

import logging
import operator
from typing import List, TextIO

import numpy as np

from .types import QTableFormatError, StateOutOfRangeError, ConfigurationError

logger = logging.getLogger(__name__)

# Shortest line limit for a persisted table; wider tables get a longer one
MAX_LINE_LENGTH = 4096

# Widest token serialize() can write for one float64 value
_MAX_VALUE_WIDTH = len(f"{-np.finfo(np.float64).max:f},")


class QTable:
    """Q-values stored in a single contiguous grid indexed by state then action."""

    def __init__(self, n_states: int, n_actions: int):
        if n_states <= 0 or n_actions <= 0:
            raise ConfigurationError(
                f"Q-table dimensions must be positive, got {n_states}x{n_actions}"
            )
        self.n_states = int(n_states)
        self.n_actions = int(n_actions)
        self._values = np.zeros((self.n_states, self.n_actions), dtype=np.float64)
        self.max_line_length = max(MAX_LINE_LENGTH, self.n_actions * _MAX_VALUE_WIDTH + 2)

    def __repr__(self) -> str:
        return f"QTable(n_states={self.n_states}, n_actions={self.n_actions})"

    def check_state(self, state: int) -> int:
        return self._check_index(state, self.n_states, "state")

    def check_action(self, action: int) -> int:
        return self._check_index(action, self.n_actions, "action")

    @staticmethod
    def _check_index(value, size: int, kind: str) -> int:
        # Floats and other non-integral ids are rejected, never truncated
        try:
            index = operator.index(value)
        except TypeError:
            raise StateOutOfRangeError(f"{kind} {value!r} is not an integer id") from None
        if not 0 <= index < size:
            raise StateOutOfRangeError(f"{kind} {index} outside 0..{size - 1}")
        return index

    def get(self, state: int, action: int) -> float:
        """Get Q-value for state-action pair."""
        return float(self._values[self.check_state(state), self.check_action(action)])

    def set(self, state: int, action: int, value: float) -> None:
        """Set Q-value for state-action pair."""
        self._values[self.check_state(state), self.check_action(action)] = value

    def max_over_actions(self, state: int) -> float:
        """Best achievable Q-value from a state."""
        return float(self._values[self.check_state(state)].max())

    def best_action(self, state: int) -> int:
        """Action with the highest Q-value; ties go to the lowest index."""
        # np.argmax returns the first occurrence of the maximum
        return int(np.argmax(self._values[self.check_state(state)]))

    def serialize(self, sink: TextIO) -> None:
        """
        Write the table as text, one line per state.

        Each line holds the action values separated by commas, with a
        trailing comma after the last value.
        """
        for row in self._values:
            sink.write("".join(f"{value:f}," for value in row))
            sink.write("\n")

    def deserialize(self, source: TextIO) -> None:
        """
        Load values written by serialize().

        Reads exactly n_states lines. Raises QTableFormatError on missing lines,
        overlong lines, wrong token counts or unparsable numbers. The table is
        left untouched if any line is rejected.
        """
        loaded = np.empty_like(self._values)
        for state in range(self.n_states):
            line = source.readline(self.max_line_length + 1)
            if not line:
                raise QTableFormatError(
                    f"expected {self.n_states} lines, got {state}"
                )
            if len(line) > self.max_line_length and not line.endswith("\n"):
                raise QTableFormatError(
                    f"line {state + 1} exceeds {self.max_line_length} characters"
                )
            loaded[state] = self._parse_line(line, state + 1)

        trailing = source.read(self.max_line_length)
        if trailing.strip():
            raise QTableFormatError(f"unexpected data after line {self.n_states}")

        self._values[:] = loaded
        logger.debug("Loaded %dx%d Q-table", self.n_states, self.n_actions)

    def _parse_line(self, line: str, line_number: int) -> List[float]:
        tokens = line.rstrip("\r\n").split(",")
        if tokens and tokens[-1].strip() == "":
            tokens.pop()  # trailing comma
        if len(tokens) != self.n_actions:
            raise QTableFormatError(
                f"line {line_number}: expected {self.n_actions} values, got {len(tokens)}"
            )
        try:
            return [float(token) for token in tokens]
        except ValueError as e:
            raise QTableFormatError(f"line {line_number}: {e}") from e
