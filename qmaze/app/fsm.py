"""Finite State Machine for training session execution states."""

from enum import Enum, auto
from typing import Dict, Callable, Optional


class SessionState(Enum):
    """States for a training session."""
    IDLE = auto()
    TRAINING = auto()
    PAUSED = auto()
    EXPLOITING = auto()
    FINISHED = auto()
    STOPPED = auto()
    ERROR = auto()


class SessionStateMachine:
    """State machine for managing a training session in the viewer."""

    def __init__(self):
        self.current_state = SessionState.IDLE
        self._enter_callbacks: Dict[SessionState, Callable[[Optional[Dict]], None]] = {}
        self._exit_callbacks: Dict[SessionState, Callable[[Optional[Dict]], None]] = {}

        # Exploitation is entered at most once and only from training or idle
        self._valid_transitions = {
            SessionState.IDLE: {SessionState.TRAINING, SessionState.EXPLOITING, SessionState.STOPPED},
            SessionState.TRAINING: {SessionState.PAUSED, SessionState.EXPLOITING,
                                    SessionState.STOPPED, SessionState.ERROR},
            SessionState.PAUSED: {SessionState.TRAINING, SessionState.EXPLOITING,
                                  SessionState.STOPPED, SessionState.ERROR},
            SessionState.EXPLOITING: {SessionState.PAUSED, SessionState.FINISHED,
                                      SessionState.STOPPED, SessionState.ERROR},
            SessionState.FINISHED: set(),
            SessionState.STOPPED: set(),
            SessionState.ERROR: {SessionState.STOPPED},
        }
        self._paused_from: Optional[SessionState] = None

    def on_state_enter(self, state: SessionState, callback: Callable[[Optional[Dict]], None]):
        """Register callback for state entry."""
        self._enter_callbacks[state] = callback

    def on_state_exit(self, state: SessionState, callback: Callable[[Optional[Dict]], None]):
        """Register callback for state exit."""
        self._exit_callbacks[state] = callback

    def can_transition(self, to_state: SessionState) -> bool:
        """Check if transition to target state is valid."""
        return to_state in self._valid_transitions.get(self.current_state, set())

    def transition(self, to_state: SessionState, context: Optional[Dict] = None) -> bool:
        """Attempt to transition to target state."""
        if not self.can_transition(to_state):
            return False

        from_state = self.current_state
        if from_state in self._exit_callbacks:
            self._exit_callbacks[from_state](context)

        self.current_state = to_state

        if to_state in self._enter_callbacks:
            self._enter_callbacks[to_state](context)
        return True

    # Convenience methods for common transitions

    def start_training(self, context: Optional[Dict] = None) -> bool:
        return self.transition(SessionState.TRAINING, context)

    def start_exploiting(self, context: Optional[Dict] = None) -> bool:
        return self.transition(SessionState.EXPLOITING, context)

    def pause(self, context: Optional[Dict] = None) -> bool:
        """Pause the running session, remembering which mode to resume."""
        from_state = self.current_state
        if self.transition(SessionState.PAUSED, context):
            self._paused_from = from_state
            return True
        return False

    def resume(self, context: Optional[Dict] = None) -> bool:
        """Resume the mode that was paused."""
        if self.current_state != SessionState.PAUSED or self._paused_from is None:
            return False
        return self.transition(self._paused_from, context)

    def finish(self, context: Optional[Dict] = None) -> bool:
        return self.transition(SessionState.FINISHED, context)

    def stop(self, context: Optional[Dict] = None) -> bool:
        return self.transition(SessionState.STOPPED, context)

    def fail_error(self, context: Optional[Dict] = None) -> bool:
        return self.transition(SessionState.ERROR, context)

    # State checking methods

    def is_active(self) -> bool:
        """Check if the session is stepping."""
        return self.current_state in {SessionState.TRAINING, SessionState.EXPLOITING}

    def is_paused(self) -> bool:
        return self.current_state == SessionState.PAUSED

    def is_done(self) -> bool:
        return self.current_state in {SessionState.FINISHED, SessionState.STOPPED}

    def get_state_description(self) -> str:
        """Get human-readable state description."""
        descriptions = {
            SessionState.IDLE: "Ready - press Start to begin training",
            SessionState.TRAINING: "Training agent with Q-Learning",
            SessionState.PAUSED: "Paused",
            SessionState.EXPLOITING: "Exploiting learned policy",
            SessionState.FINISHED: "Run finished",
            SessionState.STOPPED: "Run stopped",
            SessionState.ERROR: "Error occurred during execution",
        }
        return descriptions.get(self.current_state, "Unknown state")
