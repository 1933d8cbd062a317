"""Per-file baseline/current snapshots of files edited during a session."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pi.diff_review.constants import DIFF_CONTEXT_LINES
from pi.diff_review.diff_engine import FileDiff, compute_diff

logger = logging.getLogger(__name__)


@dataclass
class FileSnapshot:
    """Remembered and current content of one tracked file."""

    path: str
    baseline_content: str
    current_content: str

    @property
    def is_changed(self) -> bool:
        return self.baseline_content != self.current_content


class DiffState:
    """Tracks edited files and produces their diffs on demand.

    A file is tracked on its first edit and stays tracked for the rest of
    the session.  Dismissing a file moves its baseline up to the current
    content instead of forgetting it, so later edits show up again.

    Mutations for one path are expected to arrive one at a time; nothing
    here serializes concurrent callers.
    """

    def __init__(self, context_lines: int = DIFF_CONTEXT_LINES) -> None:
        self._context_lines = context_lines
        self._snapshots: dict[str, FileSnapshot] = {}

    @property
    def context_lines(self) -> int:
        return self._context_lines

    def is_tracked(self, path: str) -> bool:
        return path in self._snapshots

    def track_file(self, path: str, baseline: str, current: str) -> None:
        """Start tracking *path*.  Already-tracked paths are left alone."""
        if path in self._snapshots:
            return
        self._snapshots[path] = FileSnapshot(
            path=path, baseline_content=baseline, current_content=current
        )
        logger.debug("Tracking %s", path)

    def update_file(self, path: str, current: str) -> bool:
        snapshot = self._snapshots.get(path)
        if snapshot is None:
            return False
        snapshot.current_content = current
        logger.debug("Updated %s", path)
        return True

    def dismiss_file(self, path: str) -> bool:
        """Accept the current content of *path* as its new baseline."""
        snapshot = self._snapshots.get(path)
        if snapshot is None:
            return False
        snapshot.baseline_content = snapshot.current_content
        logger.debug("Dismissed %s", path)
        return True

    def get_snapshot(self, path: str) -> FileSnapshot | None:
        return self._snapshots.get(path)

    def get_file_diff(self, path: str) -> FileDiff | None:
        snapshot = self._snapshots.get(path)
        if snapshot is None:
            return None
        return compute_diff(
            snapshot.baseline_content,
            snapshot.current_content,
            self._context_lines,
            file_path=path,
        )

    def get_changed_files(self) -> list[str]:
        """Paths whose content differs from their baseline, in tracking order."""
        return [path for path, snap in self._snapshots.items() if snap.is_changed]

    @property
    def tracked_files(self) -> list[str]:
        return list(self._snapshots)

    @property
    def pending_count(self) -> int:
        return len(self.get_changed_files())
