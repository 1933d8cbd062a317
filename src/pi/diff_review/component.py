"""Bordered overlay that shows the diff of one changed file at a time."""

from __future__ import annotations

import math
from typing import Callable, Protocol

from pi.diff_review.constants import SIDE_BY_SIDE_MIN_WIDTH
from pi.diff_review.diff_view_controller import DiffViewController
from pi.diff_review.keys import Key, matches_key
from pi.diff_review.modal import DiffReviewModal
from pi.diff_review.text import pad_to_width, visible_width, width_truncate
from pi.diff_review.view_types import HighlightFn

TITLE = " Diff Review "
HELP_TEXT = "n/p files  d dismiss  Tab file list  Ctrl+D/U scroll  v view  y copy  Esc close"
PICKER_HELP_TEXT = "↑↓ navigate  Enter select  Esc cancel"
HALF_PAGE = 10
DEFAULT_TERMINAL_HEIGHT = 40


class ReviewTheme(Protocol):
    def fg(self, color: str, text: str) -> str: ...

    def bold(self, text: str) -> str: ...


class ReviewTUI(Protocol):
    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int | None: ...

    def request_render(self) -> None: ...


class DiffReviewComponent:
    """Overlay component: file header, diff window, help line.

    Takes over keyboard input while open.  *done* closes the overlay;
    *on_dismiss* runs after a file is dismissed and *on_copy* receives the
    path to copy.
    """

    def __init__(
        self,
        modal: DiffReviewModal,
        tui: ReviewTUI,
        theme: ReviewTheme,
        done: Callable[[], None],
        *,
        highlight_fn: HighlightFn | None = None,
        on_dismiss: Callable[[], None] | None = None,
        on_copy: Callable[[str], None] | None = None,
        side_by_side_min_width: int = SIDE_BY_SIDE_MIN_WIDTH,
    ) -> None:
        self._modal = modal
        self._tui = tui
        self._theme = theme
        self._done = done
        self._highlight_fn = highlight_fn
        self._on_dismiss = on_dismiss
        self._on_copy = on_copy
        self._side_by_side_min_width = side_by_side_min_width
        self._controller: DiffViewController | None = None
        self.rebuild_view()

    @property
    def controller(self) -> DiffViewController | None:
        return self._controller

    def rebuild_view(self) -> None:
        """Point the diff view at the currently selected file."""
        diff = self._modal.get_selected_diff()
        if diff is None:
            self._controller = None
        elif self._controller is None:
            self._controller = DiffViewController(
                diff,
                self._highlight_fn,
                side_by_side_min_width=self._side_by_side_min_width,
            )
        else:
            self._controller.set_diff(diff)

    def invalidate(self) -> None:
        pass

    # --- Rendering ---

    def render(self, width: int) -> list[str]:
        term_height = self._tui.height or DEFAULT_TERMINAL_HEIGHT
        target_height = max(20, math.floor(term_height * 0.75))
        inner_width = width - 4  # border and one space of padding per side
        theme = self._theme
        file_list = self._modal.get_file_list()

        border = theme.fg("border", "│")

        def pad_line(line: str) -> str:
            body = pad_to_width(width_truncate(line, inner_width), inner_width)
            return f"{border} {body} {border}"

        content: list[str] = []
        if not file_list:
            content.append(theme.fg("muted", "No files to review"))
            content.append("")
            content.append(theme.fg("dim", "Press Escape or Ctrl+Shift+R to close"))
        elif self._modal.is_file_picker_open:
            content.extend(self._render_file_picker())
        else:
            content.extend(self._render_diff(inner_width, target_height))

        output = [
            theme.fg("border", "╭─")
            + theme.fg("accent", theme.bold(TITLE))
            + theme.fg("border", "─" * max(0, width - 2 - len(TITLE) - 1) + "╮")
        ]
        output.extend(pad_line(line) for line in content)

        while len(output) < target_height - 1:
            output.append(f"{border}{' ' * (width - 2)}{border}")

        if file_list and not self._modal.is_file_picker_open:
            output[-1] = pad_line(theme.fg("dim", HELP_TEXT))

        output.append(theme.fg("border", f"╰{'─' * (width - 2)}╯"))
        return output

    def _render_file_picker(self) -> list[str]:
        theme = self._theme
        lines = [theme.fg("accent", theme.bold("File Picker")), ""]
        for i, entry in enumerate(self._modal.get_file_list()):
            selected = i == self._modal.file_picker_index
            prefix = "▸ " if selected else "  "
            name = theme.fg("accent" if selected else "text", entry.path)
            stats = theme.fg("muted", f" +{entry.additions}/-{entry.deletions}")
            tag = theme.fg("success", " [new]") if entry.is_new_file else ""
            lines.append(f"{prefix}{name}{stats}{tag}")
        lines.append("")
        lines.append(theme.fg("dim", PICKER_HELP_TEXT))
        return lines

    def _render_diff(self, inner_width: int, target_height: int) -> list[str]:
        theme = self._theme
        file_list = self._modal.get_file_list()
        entry = file_list[self._modal.selected_index]
        controller = self._controller

        position = f"[{self._modal.selected_index + 1}/{len(file_list)}]"
        stats = f" +{entry.additions}/-{entry.deletions}"
        mode_label = ""
        if controller is not None:
            mode_label = "Inline" if controller.view_mode == "inline" else "Side-by-side"

        left = f"{position} {theme.fg('accent', entry.path)}{theme.fg('muted', stats)}"
        gap = max(1, inner_width - visible_width(f"{position} {entry.path}{stats}") - len(mode_label))
        lines = [left + " " * gap + theme.fg("dim", mode_label), theme.fg("border", "─" * inner_width)]

        if controller is not None:
            # top border, header, rule, help line, bottom border and a spare row
            available_height = max(5, target_height - 8)
            lines.extend(controller.render(inner_width, available_height))

            if controller.total_lines > available_height:
                ratio = (controller.scroll_offset + available_height) / controller.total_lines
                # halves round up
                pct = math.floor(ratio * 100 + 0.5)
                lines.append(theme.fg("dim", f"── {min(pct, 100)}% ──"))

        return lines

    # --- Input ---

    def handle_input(self, data: str) -> None:
        if self._modal.is_file_picker_open:
            self._handle_file_picker_input(data)
            return

        controller = self._controller

        if matches_key(data, Key.escape):
            self._done()
        elif data in ("n", "p"):
            if data == "n":
                self._modal.select_next()
            else:
                self._modal.select_previous()
            self.rebuild_view()
            self._tui.request_render()
        elif matches_key(data, Key.up) or data == "k":
            self._scroll(lambda c: c.scroll_up(1))
        elif matches_key(data, Key.down) or data == "j":
            self._scroll(lambda c: c.scroll_down(1))
        elif matches_key(data, Key.ctrl("u")):
            self._scroll(lambda c: c.scroll_up(HALF_PAGE))
        elif matches_key(data, Key.ctrl("d")):
            self._scroll(lambda c: c.scroll_down(HALF_PAGE))
        elif matches_key(data, Key.tab):
            self._modal.open_file_picker()
            self._tui.request_render()
        elif data == "v":
            if controller is not None:
                controller.toggle_view_mode(self._tui.width)
            self._tui.request_render()
        elif data == "d":
            self._dismiss_selected()
        elif data == "y":
            path = self._modal.get_selected_path()
            if path is not None and self._on_copy is not None:
                self._on_copy(path)

    def _scroll(self, action: Callable[[DiffViewController], None]) -> None:
        if self._controller is not None:
            action(self._controller)
        self._tui.request_render()

    def _dismiss_selected(self) -> None:
        self._modal.dismiss_selected()
        if self._on_dismiss is not None:
            self._on_dismiss()
        self.rebuild_view()
        self._tui.request_render()
        if not self._modal.get_file_list():
            self._done()

    def _handle_file_picker_input(self, data: str) -> None:
        if matches_key(data, Key.escape):
            self._modal.close_file_picker()
        elif matches_key(data, Key.up) or data == "k":
            self._modal.file_picker_previous()
        elif matches_key(data, Key.down) or data == "j":
            self._modal.file_picker_next()
        elif matches_key(data, Key.enter):
            self._modal.confirm_file_picker_selection()
            self.rebuild_view()
        else:
            return
        self._tui.request_render()
