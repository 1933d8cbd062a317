"""pi-diff-review: review the agent's file edits as inline or side-by-side diffs."""

from pi.diff_review.constants import (
    DIFF_CONTEXT_LINES,
    MAX_WIDGET_FILES,
    SIDE_BY_SIDE_MIN_WIDTH,
)

# Diff computation and per-file state
from pi.diff_review.diff_engine import (
    AddedLine,
    ContextLine,
    DiffLine,
    FileDiff,
    RemovedLine,
    compute_diff,
)
from pi.diff_review.diff_state import DiffState, FileSnapshot

# Views
from pi.diff_review.diff_view_controller import DiffViewController
from pi.diff_review.inline_view import InlineDiffView
from pi.diff_review.side_by_side_view import SideBySideDiffView
from pi.diff_review.view_types import DiffView, HighlightFn, ViewMode

# Text layout
from pi.diff_review.text import pad_to_width, strip_ansi, visible_width, width_truncate

# Host integration
from pi.diff_review.extension import DiffReviewExtension, create_extension, register
from pi.diff_review.modal import DiffReviewModal, ModalFileEntry
from pi.diff_review.settings import DiffReviewSettings, load_diff_review_settings
from pi.diff_review.status import get_status_text, get_widget_lines

__all__ = [
    "DIFF_CONTEXT_LINES",
    "MAX_WIDGET_FILES",
    "SIDE_BY_SIDE_MIN_WIDTH",
    "AddedLine",
    "ContextLine",
    "DiffLine",
    "DiffReviewExtension",
    "DiffReviewModal",
    "DiffReviewSettings",
    "DiffState",
    "DiffView",
    "DiffViewController",
    "FileDiff",
    "FileSnapshot",
    "HighlightFn",
    "InlineDiffView",
    "ModalFileEntry",
    "RemovedLine",
    "SideBySideDiffView",
    "ViewMode",
    "compute_diff",
    "create_extension",
    "get_status_text",
    "get_widget_lines",
    "load_diff_review_settings",
    "pad_to_width",
    "register",
    "strip_ansi",
    "visible_width",
    "width_truncate",
]
