"""QMaze - tabular Q-learning on a small grid maze.

This package implements a Q-learning trainer that drives an episodic
environment toward its goal, with a Qt viewer and a headless trainer.
"""

__version__ = "1.0.0"
__author__ = "QMaze"
