"""Application controller connecting the Qt viewer to the Q-learning agent."""

import logging
from typing import Optional

from PySide6.QtCore import QObject, QTimer, Signal

from ..domain.environment import GridMazeEnvironment
from ..domain.qlearning import QLearningAgent
from ..domain.types import RLConfig, Episode, QMazeError
from .fsm import SessionStateMachine, SessionState

logger = logging.getLogger(__name__)


class MazeController(QObject):
    """
    Drives a QLearningAgent from a QTimer so the window stays responsive.

    Each timer tick advances the agent by ``steps_per_tick`` termination
    checks while training, and by a single check in exploitation mode so the
    final greedy episode can be watched move by move.

    Signals:
        state_changed: Emitted when the session state changes
        episode_completed: Emitted when an episode finishes
        maze_updated: Emitted when the maze needs to be redrawn
        run_finished: Emitted with the TrainingResult once the run ends
        error_occurred: Emitted when an error occurs
    """

    state_changed = Signal(object)  # SessionState
    episode_completed = Signal(object)  # Episode
    maze_updated = Signal()
    run_finished = Signal(object)  # TrainingResult
    error_occurred = Signal(str)

    def __init__(self, config: Optional[RLConfig] = None,
                 env: Optional[GridMazeEnvironment] = None,
                 table_path: Optional[str] = None):
        super().__init__()
        self._config = config or RLConfig()
        self._env = env or GridMazeEnvironment()
        self._agent = QLearningAgent(self._env, self._config)
        if table_path:
            self._agent.load_table(table_path)

        self._state_machine = SessionStateMachine()
        self._timer = QTimer()
        self._timer.timeout.connect(self._on_timer_tick)

        for state in SessionState:
            self._state_machine.on_state_enter(state, self._emit_state_changed)

    # Properties

    @property
    def env(self) -> GridMazeEnvironment:
        return self._env

    @property
    def agent(self) -> QLearningAgent:
        return self._agent

    @property
    def config(self) -> RLConfig:
        return self._config

    @property
    def current_state(self) -> SessionState:
        return self._state_machine.current_state

    def state_description(self) -> str:
        return self._state_machine.get_state_description()

    # Session control

    def start(self) -> bool:
        """Begin the run in training or exploitation mode."""
        if self._state_machine.current_state != SessionState.IDLE:
            return False
        self._agent.begin()
        if self._agent.phase == "exploitation":
            self._state_machine.start_exploiting()
        else:
            self._state_machine.start_training()
        self._restart_timer()
        self.maze_updated.emit()
        return True

    def pause(self) -> bool:
        if self._state_machine.pause():
            self._timer.stop()
            return True
        return False

    def resume(self) -> bool:
        if self._state_machine.resume():
            self._restart_timer()
            return True
        return False

    def step_once(self) -> None:
        """Advance a paused session by one termination check."""
        if self._state_machine.is_paused():
            self._advance(1)

    def stop(self) -> None:
        """External stop request, e.g. the window closing."""
        self._timer.stop()
        if not self._state_machine.is_done():
            self._agent.stop()
            self._state_machine.stop()
            self.run_finished.emit(self._agent.result())

    def save_table(self, path: str) -> bool:
        try:
            self._agent.save_table(path)
            return True
        except OSError as e:
            self.error_occurred.emit(f"Failed to save table: {e}")
            return False

    def cleanup(self) -> None:
        """Stop timers before the application shuts down."""
        self.stop()

    # Internals

    def _restart_timer(self) -> None:
        if self._state_machine.current_state == SessionState.EXPLOITING:
            self._timer.setInterval(self._config.exploit_step_delay)
        else:
            self._timer.setInterval(self._config.visual_step_delay)
        self._timer.start()

    def _on_timer_tick(self) -> None:
        if self._state_machine.current_state == SessionState.EXPLOITING:
            self._advance(1)
        else:
            self._advance(self._config.steps_per_tick)

    def _advance(self, checks: int) -> None:
        try:
            for _ in range(checks):
                episodes_before = self._agent.episodes_completed
                finished = self._agent.tick()
                if self._agent.episodes_completed > episodes_before:
                    self._on_episode_finished(self._agent.training_history[-1])
                # Hand over to the slower exploitation timer at the mode switch
                switched = (self._agent.phase == "exploitation"
                            and self._state_machine.current_state != SessionState.EXPLOITING)
                if finished or switched:
                    break
        except QMazeError as e:
            logger.exception("Session failed")
            self._timer.stop()
            self._state_machine.fail_error()
            self.error_occurred.emit(str(e))
            return

        self._sync_state()
        self.maze_updated.emit()

    def _on_episode_finished(self, episode: Episode) -> None:
        self.episode_completed.emit(episode)

    def _sync_state(self) -> None:
        """Mirror the agent's phase into the state machine."""
        phase = self._agent.phase
        if phase == "exploitation" and self._state_machine.current_state != SessionState.EXPLOITING:
            was_paused = self._state_machine.is_paused()
            self._state_machine.start_exploiting()
            if was_paused:
                self._state_machine.pause()
            else:
                self._restart_timer()
        elif phase == "finished" and not self._state_machine.is_done():
            self._timer.stop()
            if self._state_machine.is_paused():
                self._state_machine.resume()
            self._state_machine.finish()
            self.run_finished.emit(self._agent.result())

    def _emit_state_changed(self, context=None) -> None:
        self.state_changed.emit(self._state_machine.current_state)
