"""Selection state behind the diff review overlay."""

from __future__ import annotations

from dataclasses import dataclass

from pi.diff_review.diff_engine import FileDiff
from pi.diff_review.diff_state import DiffState


@dataclass
class ModalFileEntry:
    path: str
    additions: int
    deletions: int
    is_new_file: bool


class DiffReviewModal:
    """List of changed files with a current selection and a file picker."""

    def __init__(self, diff_state: DiffState) -> None:
        self._diff_state = diff_state
        self._selected_index = 0
        self._file_list: list[ModalFileEntry] = []
        self._file_picker_open = False
        self._file_picker_index = 0
        self.refresh()

    def get_file_list(self) -> list[ModalFileEntry]:
        return self._file_list

    @property
    def selected_index(self) -> int:
        return self._selected_index

    @property
    def selected_file(self) -> str | None:
        if not self._file_list:
            return None
        return self._file_list[self._selected_index].path

    def get_selected_path(self) -> str | None:
        return self.selected_file

    def select_next(self) -> None:
        """Select the next file, wrapping around at the end."""
        if not self._file_list:
            return
        self._selected_index = (self._selected_index + 1) % len(self._file_list)

    def select_previous(self) -> None:
        """Select the previous file, wrapping around at the start."""
        if not self._file_list:
            return
        self._selected_index = (self._selected_index - 1) % len(self._file_list)

    def select_index(self, index: int) -> None:
        if not self._file_list:
            self._selected_index = 0
            return
        self._selected_index = max(0, min(index, len(self._file_list) - 1))

    def get_selected_diff(self) -> FileDiff | None:
        path = self.selected_file
        if path is None:
            return None
        return self._diff_state.get_file_diff(path)

    def dismiss_selected(self) -> bool:
        """Dismiss the selected file.  Returns ``False`` if nothing is selected."""
        path = self.selected_file
        if path is None:
            return False
        self._diff_state.dismiss_file(path)
        self.refresh()
        return True

    def refresh(self) -> None:
        """Rebuild the file list from the diff state."""
        entries: list[ModalFileEntry] = []
        for path in self._diff_state.get_changed_files():
            diff = self._diff_state.get_file_diff(path)
            entries.append(
                ModalFileEntry(
                    path=path,
                    additions=diff.additions if diff else 0,
                    deletions=diff.deletions if diff else 0,
                    is_new_file=diff.is_new_file if diff else False,
                )
            )
        self._file_list = entries
        self.select_index(self._selected_index)
        self._file_picker_index = max(0, min(self._file_picker_index, len(entries) - 1))

    # --- File picker ---

    @property
    def is_file_picker_open(self) -> bool:
        return self._file_picker_open

    @property
    def file_picker_index(self) -> int:
        return self._file_picker_index

    def open_file_picker(self) -> None:
        if not self._file_list:
            return
        self._file_picker_open = True
        self._file_picker_index = self._selected_index

    def close_file_picker(self) -> None:
        self._file_picker_open = False

    def file_picker_next(self) -> None:
        if not self._file_list:
            return
        self._file_picker_index = (self._file_picker_index + 1) % len(self._file_list)

    def file_picker_previous(self) -> None:
        if not self._file_list:
            return
        self._file_picker_index = (self._file_picker_index - 1) % len(self._file_list)

    def confirm_file_picker_selection(self) -> None:
        self.select_index(self._file_picker_index)
        self._file_picker_open = False
