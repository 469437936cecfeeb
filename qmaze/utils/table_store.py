"""Q-table dump files and training checkpoints."""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..domain.qtable import QTable

logger = logging.getLogger(__name__)

_CHECKPOINT_RE = re.compile(r"^(?P<name>.+)_ep(?P<episode>\d+)\.csv$")


@dataclass
class CheckpointInfo:
    """A checkpoint dump found on disk."""
    name: str
    episode_number: int
    file_path: Path
    file_size: int


def save_table(table: QTable, path) -> Path:
    """Write ``table`` to ``path`` in the comma-separated dump format."""
    path = Path(path)
    with open(path, "w", encoding="utf-8") as f:
        table.serialize(f)
    return path


def load_table(table: QTable, path) -> QTable:
    """Fill ``table`` from the dump at ``path``."""
    with open(path, "r", encoding="utf-8") as f:
        table.deserialize(f)
    return table


class TableStore:
    """Manages periodic Q-table checkpoints in a directory."""

    def __init__(self, checkpoints_dir: str = "training_checkpoints"):
        self.checkpoints_dir = Path(checkpoints_dir)
        self.checkpoints_dir.mkdir(parents=True, exist_ok=True)

    def checkpoint_path(self, name: str, episode_number: int) -> Path:
        return self.checkpoints_dir / f"{name}_ep{episode_number}.csv"

    def create_checkpoint(self, name: str, table: QTable, episode_number: int) -> Path:
        """Dump ``table`` as the checkpoint for ``episode_number``."""
        path = save_table(table, self.checkpoint_path(name, episode_number))
        logger.info("Checkpoint saved: %s", path)
        return path

    def list_checkpoints(self, name: Optional[str] = None) -> List[CheckpointInfo]:
        """Checkpoints on disk, sorted by episode number."""
        checkpoints = []
        for checkpoint_file in self.checkpoints_dir.glob("*.csv"):
            match = _CHECKPOINT_RE.match(checkpoint_file.name)
            if not match:
                continue
            if name is not None and match.group("name") != name:
                continue
            checkpoints.append(CheckpointInfo(
                name=match.group("name"),
                episode_number=int(match.group("episode")),
                file_path=checkpoint_file,
                file_size=checkpoint_file.stat().st_size,
            ))
        checkpoints.sort(key=lambda c: (c.name, c.episode_number))
        return checkpoints

    def latest_checkpoint(self, name: str) -> Optional[CheckpointInfo]:
        checkpoints = self.list_checkpoints(name)
        return checkpoints[-1] if checkpoints else None

    def load_checkpoint(self, info: CheckpointInfo, table: QTable) -> QTable:
        return load_table(table, info.file_path)

    def cleanup_old_checkpoints(self, name: str, keep_count: int = 10) -> int:
        """Delete all but the newest ``keep_count`` checkpoints of ``name``."""
        checkpoints = self.list_checkpoints(name)
        removed = 0
        for checkpoint in checkpoints[:max(0, len(checkpoints) - keep_count)]:
            checkpoint.file_path.unlink()
            removed += 1
        return removed
