"""Footer status text and widget lines summarizing pending file changes."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from pi.diff_review.constants import MAX_WIDGET_FILES


class FileStats(Protocol):
    path: str
    additions: int
    deletions: int


def _changed_label(count: int) -> str:
    word = "file" if count == 1 else "files"
    return f"📋 {count} {word} changed"


def get_status_text(pending_count: int) -> str | None:
    """Return e.g. ``"📋 3 files changed"``, or ``None`` when nothing changed."""
    if pending_count == 0:
        return None
    return _changed_label(pending_count)


def get_widget_lines(
    changed_files: Sequence[FileStats],
    max_files: int = MAX_WIDGET_FILES,
) -> list[str] | None:
    """Return a header plus one ``path  +a/-d`` line per file.

    At most *max_files* files are listed; the rest are summarized as
    ``+N more``.  Returns ``None`` for an empty list.
    """
    if not changed_files:
        return None

    total = len(changed_files)
    lines = [_changed_label(total)]
    for entry in changed_files[:max_files]:
        lines.append(f"  {entry.path}  +{entry.additions}/-{entry.deletions}")

    if total > max_files:
        lines.append(f"  +{total - max_files} more")

    return lines
