"""Switches between the inline and side-by-side layouts of one diff."""

from __future__ import annotations

from pi.diff_review.constants import SIDE_BY_SIDE_MIN_WIDTH
from pi.diff_review.diff_engine import FileDiff
from pi.diff_review.inline_view import InlineDiffView
from pi.diff_review.side_by_side_view import SideBySideDiffView
from pi.diff_review.view_types import DiffView, HighlightFn, ViewMode


class DiffViewController:
    """Owns both views of a diff and forwards calls to the active one.

    Both views are rebuilt on every :meth:`set_diff` so switching modes
    never shows stale content.
    """

    def __init__(
        self,
        diff: FileDiff,
        highlight_fn: HighlightFn | None = None,
        *,
        side_by_side_min_width: int = SIDE_BY_SIDE_MIN_WIDTH,
    ) -> None:
        self._inline_view = InlineDiffView(diff, highlight_fn)
        self._side_by_side_view = SideBySideDiffView(diff, highlight_fn)
        self._side_by_side_min_width = side_by_side_min_width
        self._view_mode: ViewMode = "inline"

    def set_diff(self, diff: FileDiff) -> None:
        self._inline_view.set_diff(diff)
        self._side_by_side_view.set_diff(diff)
        self._reset_scroll()

    @property
    def view_mode(self) -> ViewMode:
        return self._view_mode

    def toggle_view_mode(self, terminal_width: int) -> bool:
        """Flip the layout.  Returns ``False`` if the terminal is too narrow."""
        if self._view_mode == "inline":
            if not self.can_use_side_by_side(terminal_width):
                return False
            self._view_mode = "side-by-side"
        else:
            self._view_mode = "inline"
        self._reset_scroll()
        return True

    def set_view_mode(self, mode: ViewMode) -> None:
        if self._view_mode != mode:
            self._view_mode = mode
            self._reset_scroll()

    def can_use_side_by_side(self, terminal_width: int) -> bool:
        return terminal_width >= self._side_by_side_min_width

    def scroll_up(self, lines: int = 1) -> None:
        self._active_view().scroll_up(lines)

    def scroll_down(self, lines: int = 1) -> None:
        self._active_view().scroll_down(lines)

    def scroll_to_top(self) -> None:
        self._active_view().scroll_to_top()

    def scroll_to_bottom(self) -> None:
        self._active_view().scroll_to_bottom()

    def render(self, width: int, visible_height: int) -> list[str]:
        return self._active_view().render(width, visible_height)

    @property
    def total_lines(self) -> int:
        return self._active_view().total_lines

    @property
    def scroll_offset(self) -> int:
        return self._active_view().scroll_offset

    def _active_view(self) -> DiffView:
        if self._view_mode == "inline":
            return self._inline_view
        return self._side_by_side_view

    def _reset_scroll(self) -> None:
        self._inline_view.scroll_to_top()
        self._side_by_side_view.scroll_to_top()
