"""Main window for the Q-learning maze viewer."""

from typing import Optional

from PySide6.QtWidgets import (
    QMainWindow, QVBoxLayout, QHBoxLayout, QWidget, QPushButton,
    QLabel, QStatusBar, QGroupBox, QFileDialog, QMessageBox
)
from PySide6.QtGui import QKeySequence, QShortcut, QCloseEvent

from ..app.controller import MazeController
from ..app.fsm import SessionState
from ..domain.types import Episode, TrainingResult
from .maze_view import MazeView


class MainWindow(QMainWindow):
    """Main application window: maze on the left, session statistics on the right."""

    def __init__(self, controller: MazeController, save_path: Optional[str] = None):
        super().__init__()
        self.controller = controller
        self.save_path = save_path
        self.last_episode: Optional[Episode] = None

        self.setWindowTitle("Maze - Q-Learning Agent")
        self.resize(960, 540)

        self._create_ui()
        self._setup_connections()
        self._setup_shortcuts()
        self._update_button_states()
        self._update_statistics_display()

    def _create_ui(self):
        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        main_layout = QHBoxLayout(central_widget)

        self.maze_view = MazeView(self.controller)
        main_layout.addWidget(self.maze_view, 3)

        side_layout = QVBoxLayout()

        buttons_group = QGroupBox("Session")
        buttons_layout = QHBoxLayout(buttons_group)
        self.start_btn = QPushButton("Start")
        self.pause_btn = QPushButton("Pause")
        self.step_btn = QPushButton("Step")
        self.save_btn = QPushButton("Save Table")
        for btn in [self.start_btn, self.pause_btn, self.step_btn, self.save_btn]:
            buttons_layout.addWidget(btn)
        side_layout.addWidget(buttons_group)

        stats_group = QGroupBox("Statistics")
        stats_layout = QVBoxLayout(stats_group)
        self.mode_label = QLabel()
        self.epsilon_label = QLabel()
        self.episodes_label = QLabel()
        self.steps_label = QLabel()
        self.last_episode_label = QLabel()
        for label in [self.mode_label, self.epsilon_label, self.episodes_label,
                      self.steps_label, self.last_episode_label]:
            stats_layout.addWidget(label)
        side_layout.addWidget(stats_group)
        side_layout.addStretch()

        main_layout.addLayout(side_layout, 1)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self._update_status_message()

    def _setup_connections(self):
        self.start_btn.clicked.connect(self._on_start_clicked)
        self.pause_btn.clicked.connect(self._on_pause_clicked)
        self.step_btn.clicked.connect(self.controller.step_once)
        self.save_btn.clicked.connect(self._on_save_clicked)

        self.controller.state_changed.connect(self._on_state_changed)
        self.controller.episode_completed.connect(self._on_episode_completed)
        self.controller.maze_updated.connect(self._update_statistics_display)
        self.controller.run_finished.connect(self._on_run_finished)
        self.controller.error_occurred.connect(self._on_error_occurred)

    def _setup_shortcuts(self):
        QShortcut(QKeySequence("Space"), self, self._on_pause_clicked)
        QShortcut(QKeySequence("Ctrl+S"), self, self._on_save_clicked)

    # Slots

    def _on_start_clicked(self):
        self.controller.start()

    def _on_pause_clicked(self):
        if self.controller.current_state == SessionState.PAUSED:
            self.controller.resume()
        else:
            self.controller.pause()

    def _on_save_clicked(self):
        path = self.save_path
        if not path:
            path, _ = QFileDialog.getSaveFileName(self, "Save Q-table", "qtable.csv", "CSV (*.csv)")
        if path and self.controller.save_table(path):
            self.status_bar.showMessage(f"Q-table saved to {path}", 5000)

    def _on_state_changed(self, state: SessionState):
        self._update_button_states()
        self._update_status_message()

    def _on_episode_completed(self, episode: Episode):
        self.last_episode = episode

    def _on_run_finished(self, result: TrainingResult):
        self._update_statistics_display()
        self.status_bar.showMessage(
            f"{self.controller.state_description()} after {result.total_episodes} episodes "
            f"({result.success_rate:.1%} reached the goal)"
        )

    def _on_error_occurred(self, error_msg: str):
        QMessageBox.critical(self, "Error", error_msg)

    # Display updates

    def _update_button_states(self):
        state = self.controller.current_state
        self.start_btn.setEnabled(state == SessionState.IDLE)
        self.pause_btn.setEnabled(state in {SessionState.TRAINING, SessionState.EXPLOITING,
                                            SessionState.PAUSED})
        self.pause_btn.setText("Resume" if state == SessionState.PAUSED else "Pause")
        self.step_btn.setEnabled(state == SessionState.PAUSED)

    def _update_status_message(self):
        self.status_bar.showMessage(self.controller.state_description())

    def _update_statistics_display(self):
        agent = self.controller.agent
        self.mode_label.setText(f"Mode: {agent.mode}")
        self.epsilon_label.setText(f"Epsilon: {agent.epsilon:.3e}")
        self.episodes_label.setText(f"Episodes: {agent.episodes_completed}")
        self.steps_label.setText(f"Steps: {agent.total_steps}")
        if self.last_episode is not None:
            outcome = "goal" if self.last_episode.reached_goal else "out of bounds"
            self.last_episode_label.setText(
                f"Last episode: {self.last_episode.steps} steps, {outcome}, "
                f"reward {self.last_episode.total_reward:.0f}"
            )
        else:
            self.last_episode_label.setText("Last episode: -")

    def closeEvent(self, event: QCloseEvent):
        """Closing the window is the stop signal for the run."""
        self.controller.cleanup()
        event.accept()
