"""Single-column diff view with +/- markers and one line-number gutter."""

from __future__ import annotations

from dataclasses import dataclass

from pi.diff_review.diff_engine import DiffLine, FileDiff
from pi.diff_review.text import DIM, GREEN, RED, RESET, width_truncate
from pi.diff_review.view_types import (
    SEPARATOR_GLYPH,
    HighlightFn,
    ScrollWindow,
    safe_highlight,
)


@dataclass
class RenderedLine:
    content: str  # full ANSI-coloured line
    raw_content: str  # same line without ANSI codes


class InlineDiffView:
    """Renders a :class:`FileDiff` as one column of coloured rows."""

    def __init__(self, diff: FileDiff, highlight_fn: HighlightFn | None = None) -> None:
        self._diff = diff
        self._highlight_fn = highlight_fn
        self._rendered_lines: list[RenderedLine] = []
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
    def rendered_lines(self) -> list[RenderedLine]:
        return list(self._rendered_lines)

    def render(self, width: int, visible_height: int) -> list[str]:
        start, end = self._scroll.clamp(visible_height)
        return [
            width_truncate(line.content, width)
            for line in self._rendered_lines[start:end]
        ]

    def _build_rendered_lines(self) -> None:
        self._rendered_lines = []

        if self._diff.hunks:
            number_width = len(str(self._max_line_number()))
            previous: int | None = None

            for hunk in self._diff.hunks:
                current = _display_number(hunk)

                # A jump in numbering means unchanged lines were left out
                if previous is not None and current is not None and current > previous + 1:
                    self._rendered_lines.append(self._separator_line())

                self._rendered_lines.append(self._render_hunk(hunk, number_width))

                if current is not None:
                    previous = current

        self._scroll.reset(len(self._rendered_lines))

    def _max_line_number(self) -> int:
        return max((_display_number(hunk) or 0 for hunk in self._diff.hunks), default=0)

    def _render_hunk(self, hunk: DiffLine, number_width: int) -> RenderedLine:
        number = str(_display_number(hunk) or 0).rjust(number_width)
        content = hunk.content

        if hunk.type == "added":
            prefix, color = "+", GREEN
        elif hunk.type == "removed":
            prefix, color = "-", RED
        else:
            prefix, color = " ", DIM
            content = safe_highlight(self._highlight_fn, hunk.content, self._diff.file_path)

        return RenderedLine(
            content=f"{color}{number} {prefix} {content}{RESET}",
            raw_content=f"{number} {prefix} {hunk.content}",
        )

    def _separator_line(self) -> RenderedLine:
        return RenderedLine(content=f"{DIM}{SEPARATOR_GLYPH}{RESET}", raw_content=SEPARATOR_GLYPH)


def _display_number(hunk: DiffLine) -> int | None:
    if hunk.new_line_number is not None:
        return hunk.new_line_number
    return hunk.old_line_number
