"""Maze drawing widget."""

from PySide6.QtWidgets import QWidget
from PySide6.QtGui import QPainter, QColor, QPen, QBrush, QPaintEvent
from PySide6.QtCore import Qt, QRectF

from ..app.controller import MazeController

GRID_LINE_COLOR = QColor(0xFF, 0x00, 0x00)
GOAL_COLOR = QColor(0x00, 0x80, 0x00)
PLAYER_COLOR = QColor(0x00, 0x00, 0xFF)
BACKGROUND_COLOR = QColor(0x00, 0x00, 0x00)


class MazeView(QWidget):
    """Paints the grid, the goal tile and the player disc."""

    def __init__(self, controller: MazeController):
        super().__init__()
        self.controller = controller
        self.setMinimumSize(320, 320)
        self.controller.maze_updated.connect(self.update)

    def _tile_size(self) -> float:
        env = self.controller.env
        return min(self.width() / env.width, self.height() / env.height)

    def paintEvent(self, event: QPaintEvent):
        env = self.controller.env
        size = self._tile_size()

        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        painter.fillRect(self.rect(), BACKGROUND_COLOR)

        painter.setPen(QPen(GRID_LINE_COLOR, 1))
        painter.setBrush(Qt.NoBrush)
        for y in range(env.height):
            for x in range(env.width):
                painter.drawRect(QRectF(x * size, y * size, size, size))

        gx, gy = env.goal
        painter.fillRect(QRectF(gx * size, gy * size, size, size), GOAL_COLOR)

        # The player is only visible while on the grid
        if env.in_bounds(env.player_pos):
            px, py = env.player_pos
            painter.setPen(Qt.NoPen)
            painter.setBrush(QBrush(PLAYER_COLOR))
            painter.drawEllipse(QRectF(px * size, py * size, size, size))

        painter.end()
