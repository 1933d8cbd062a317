"""Two-column diff view: baseline on the left, current content on the right."""

from __future__ import annotations

from dataclasses import dataclass

from pi.diff_review.diff_engine import AddedLine, ContextLine, DiffLine, FileDiff, RemovedLine
from pi.diff_review.text import DIM, GREEN, RED, RESET, pad_to_width, width_truncate
from pi.diff_review.view_types import (
    SEPARATOR_GLYPH,
    HighlightFn,
    ScrollWindow,
    safe_highlight,
)

COLUMN_SEPARATOR = "│"


@dataclass
class SideBySideLine:
    left_content: str
    left_raw_content: str
    right_content: str
    right_raw_content: str


class SideBySideDiffView:
    """Renders a :class:`FileDiff` as aligned old/new panels.

    Removed lines occupy only the left panel and added lines only the
    right; the empty side keeps its gutter so the panels stay aligned.
    """

    def __init__(self, diff: FileDiff, highlight_fn: HighlightFn | None = None) -> None:
        self._diff = diff
        self._highlight_fn = highlight_fn
        self._rendered_lines: list[SideBySideLine] = []
        self._scroll = ScrollWindow()
        self._build_rendered_lines()

    def set_diff(self, diff: FileDiff) -> None:
        self._diff = diff
        self._build_rendered_lines()

    def scroll_up(self, lines: int = 1) -> None:
        self._scroll.up(lines)

    def scroll_down(self, lines: int = 1) -> None:
        self._scroll.down(lines)

    def scroll_to_top(self) -> None:
        self._scroll.to_top()

    def scroll_to_bottom(self) -> None:
        self._scroll.to_bottom()

    @property
    def total_lines(self) -> int:
        return len(self._rendered_lines)

    @property
    def scroll_offset(self) -> int:
        return self._scroll.offset

    @property
    def rendered_lines(self) -> list[SideBySideLine]:
        return list(self._rendered_lines)

    def render(self, width: int, visible_height: int) -> list[str]:
        start, end = self._scroll.clamp(visible_height)
        panel_width = (width - 1) // 2

        rows: list[str] = []
        for line in self._rendered_lines[start:end]:
            left = pad_to_width(width_truncate(line.left_content, panel_width), panel_width)
            right = pad_to_width(width_truncate(line.right_content, panel_width), panel_width)
            rows.append(f"{left}{COLUMN_SEPARATOR}{right}")
        return rows

    def _build_rendered_lines(self) -> None:
        self._rendered_lines = []

        if self._diff.hunks:
            old_width = len(str(max((h.old_line_number or 0 for h in self._diff.hunks), default=0)))
            new_width = len(str(max((h.new_line_number or 0 for h in self._diff.hunks), default=0)))

            previous_old: int | None = None
            previous_new: int | None = None

            for hunk in self._diff.hunks:
                current_old = hunk.old_line_number
                current_new = hunk.new_line_number

                # The old side decides when both old numbers are known; the
                # new side only when an old number is missing.
                if previous_old is not None and current_old is not None:
                    if current_old > previous_old + 1:
                        self._rendered_lines.append(self._separator_line())
                elif previous_new is not None and current_new is not None:
                    if current_new > previous_new + 1:
                        self._rendered_lines.append(self._separator_line())

                self._rendered_lines.append(self._render_hunk(hunk, old_width, new_width))

                if current_old is not None:
                    previous_old = current_old
                if current_new is not None:
                    previous_new = current_new

        self._scroll.reset(len(self._rendered_lines))

    def _render_hunk(self, hunk: DiffLine, old_width: int, new_width: int) -> SideBySideLine:
        if isinstance(hunk, ContextLine):
            return self._render_context_line(hunk, old_width, new_width)
        if isinstance(hunk, RemovedLine):
            return self._render_removed_line(hunk, old_width, new_width)
        return self._render_added_line(hunk, old_width, new_width)

    def _render_context_line(
        self, hunk: ContextLine, old_width: int, new_width: int
    ) -> SideBySideLine:
        old_number = str(hunk.old_line_number).rjust(old_width)
        new_number = str(hunk.new_line_number).rjust(new_width)

        # Each panel is highlighted on its own
        left_text = safe_highlight(self._highlight_fn, hunk.content, self._diff.file_path)
        right_text = safe_highlight(self._highlight_fn, hunk.content, self._diff.file_path)

        return SideBySideLine(
            left_content=f"{DIM}{old_number} {left_text}{RESET}",
            left_raw_content=f"{old_number} {hunk.content}",
            right_content=f"{DIM}{new_number} {right_text}{RESET}",
            right_raw_content=f"{new_number} {hunk.content}",
        )

    def _render_removed_line(
        self, hunk: RemovedLine, old_width: int, new_width: int
    ) -> SideBySideLine:
        old_number = str(hunk.old_line_number).rjust(old_width)
        blank = " " * new_width + " "
        return SideBySideLine(
            left_content=f"{RED}{old_number} {hunk.content}{RESET}",
            left_raw_content=f"{old_number} {hunk.content}",
            right_content=blank,
            right_raw_content=blank,
        )

    def _render_added_line(
        self, hunk: AddedLine, old_width: int, new_width: int
    ) -> SideBySideLine:
        new_number = str(hunk.new_line_number).rjust(new_width)
        blank = " " * old_width + " "
        return SideBySideLine(
            left_content=blank,
            left_raw_content=blank,
            right_content=f"{GREEN}{new_number} {hunk.content}{RESET}",
            right_raw_content=f"{new_number} {hunk.content}",
        )

    def _separator_line(self) -> SideBySideLine:
        styled = f"{DIM}{SEPARATOR_GLYPH}{RESET}"
        return SideBySideLine(
            left_content=styled,
            left_raw_content=SEPARATOR_GLYPH,
            right_content=styled,
            right_raw_content=SEPARATOR_GLYPH,
        )
