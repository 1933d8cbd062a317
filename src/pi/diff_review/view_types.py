"""Shared types for the inline and side-by-side diff views."""

from __future__ import annotations

import logging
from typing import Callable, Literal, Protocol

from pi.diff_review.diff_engine import FileDiff

logger = logging.getLogger(__name__)

HighlightFn = Callable[[str, str], str]

ViewMode = Literal["inline", "side-by-side"]

SEPARATOR_GLYPH = "···"


class DiffView(Protocol):
    """Capabilities every diff layout provides to the controller."""

    def set_diff(self, diff: FileDiff) -> None: ...

    def scroll_up(self, lines: int = 1) -> None: ...

    def scroll_down(self, lines: int = 1) -> None: ...

    def scroll_to_top(self) -> None: ...

    def scroll_to_bottom(self) -> None: ...

    def render(self, width: int, visible_height: int) -> list[str]: ...

    @property
    def total_lines(self) -> int: ...

    @property
    def scroll_offset(self) -> int: ...


class ScrollWindow:
    """Scroll offset over a list of ``total`` rendered rows.

    Scrolling clamps to ``[0, total]``; :meth:`clamp` tightens that to
    ``[0, total - height]`` once the viewport height is known.
    """

    def __init__(self) -> None:
        self.offset = 0
        self.total = 0

    def reset(self, total: int) -> None:
        self.total = total
        self.offset = 0

    def up(self, lines: int) -> None:
        self.offset = max(0, min(self.total, self.offset - lines))

    def down(self, lines: int) -> None:
        self.offset = max(0, min(self.total, self.offset + lines))

    def to_top(self) -> None:
        self.offset = 0

    def to_bottom(self) -> None:
        self.offset = self.total

    def clamp(self, visible_height: int) -> tuple[int, int]:
        """Clamp to the viewport and return the visible ``(start, end)``."""
        max_offset = max(0, self.total - visible_height)
        self.offset = max(0, min(self.offset, max_offset))
        end = min(self.offset + max(0, visible_height), self.total)
        return self.offset, end


def safe_highlight(highlight_fn: HighlightFn | None, code: str, file_path: str) -> str:
    """Run *highlight_fn*, falling back to the plain *code* if it fails."""
    if highlight_fn is None:
        return code
    try:
        return highlight_fn(code, file_path)
    except Exception:
        logger.debug("Highlighting failed for %s", file_path, exc_info=True)
        return code
