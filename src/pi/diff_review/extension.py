"""pi extension: track files the agent writes or edits and review their diffs.

Load it like any other extension factory::

    from pi.diff_review.extension import register

``tool_call`` captures a file's content before the first write or edit
touches it; ``tool_result`` records the content afterwards.  Ctrl+Shift+R
opens the review overlay.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Protocol

from pi.diff_review.clipboard import copy_to_clipboard
from pi.diff_review.component import DiffReviewComponent
from pi.diff_review.diff_state import DiffState
from pi.diff_review.modal import DiffReviewModal
from pi.diff_review.path_utils import resolve_path
from pi.diff_review.settings import DiffReviewSettings, load_diff_review_settings
from pi.diff_review.status import get_status_text, get_widget_lines
from pi.diff_review.view_types import HighlightFn

logger = logging.getLogger(__name__)

STATUS_KEY = "diff-review"
SHORTCUT = "ctrl+shift+r"
TRACKED_TOOLS = ("write", "edit")

_background_tasks: set[asyncio.Task[bool]] = set()

OVERLAY_OPTIONS: dict[str, Any] = {
    "overlay": True,
    "overlay_options": {"anchor": "center", "width": "90%", "min_width": 60, "margin": 1},
}


class ExtensionUI(Protocol):
    """The parts of the host UI the extension talks to."""

    def set_status(self, key: str, text: str | None) -> None: ...

    def set_widget(self, key: str, lines: list[str] | None) -> None: ...

    def notify(self, message: str, level: str = "info") -> None: ...

    async def custom(self, factory: Callable[..., Any], options: dict[str, Any]) -> Any: ...


class ExtensionHost(Protocol):
    @property
    def cwd(self) -> str: ...

    def on(self, event_type: str, handler: Callable[..., Any]) -> None: ...

    def register_shortcut(
        self,
        key_id: str,
        *,
        description: str = "",
        handler: Callable[..., Any] | None = None,
    ) -> None: ...


@dataclass
class PendingCapture:
    """File state captured when a write/edit call starts."""

    path: str
    original: str | None = None
    written: str | None = None


@dataclass
class ReviewSession:
    """State for one open/close cycle of the review overlay."""

    done: Callable[[], None] | None = None
    component: DiffReviewComponent | None = field(default=None, repr=False)

    def close(self) -> None:
        if self.done is not None:
            self.done()


def read_file_content(path: str) -> str:
    """Read *path* as text; a missing or unreadable file reads as ``""``."""
    try:
        return Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError:
        return ""


def _ui(ctx: Any) -> ExtensionUI | None:
    if not getattr(ctx, "has_ui", False):
        return None
    return getattr(ctx, "ui", None)


class DiffReviewExtension:
    """Event handlers and overlay lifecycle for diff review."""

    def __init__(
        self,
        settings: DiffReviewSettings | None = None,
        highlight_fn: HighlightFn | None = None,
    ) -> None:
        self.settings = settings or DiffReviewSettings()
        self.state = DiffState(context_lines=self.settings.context_lines)
        self.modal = DiffReviewModal(self.state)
        self._highlight_fn = highlight_fn
        self._captures: dict[str, PendingCapture] = {}
        self._session: ReviewSession | None = None

    @property
    def session(self) -> ReviewSession | None:
        return self._session

    def install(self, api: ExtensionHost) -> None:
        api.on("tool_call", self.on_tool_call)
        api.on("tool_result", self.on_tool_result)
        api.on("agent_end", self.on_agent_end)
        api.register_shortcut(
            SHORTCUT,
            description="Toggle diff review modal",
            handler=self.on_shortcut,
        )

    # --- Tool events ---

    def on_tool_call(self, event: Any, ctx: Any) -> None:
        if event.tool_name not in TRACKED_TOOLS:
            return
        arguments = getattr(event, "arguments", None) or {}
        raw_path = arguments.get("path")
        if not raw_path:
            return

        path = resolve_path(raw_path, ctx.cwd)
        capture = PendingCapture(path=path)
        # Only the first modification sets the baseline
        if not self.state.is_tracked(path):
            capture.original = read_file_content(path)
        if event.tool_name == "write":
            capture.written = arguments.get("content", "")
        self._captures[event.tool_call_id] = capture

    def on_tool_result(self, event: Any, ctx: Any) -> None:
        if event.tool_name not in TRACKED_TOOLS:
            return
        capture = self._captures.pop(event.tool_call_id, None)
        if capture is None or getattr(event, "is_error", False):
            return

        if capture.written is not None:
            current = capture.written
        else:
            current = read_file_content(capture.path)

        if self.state.is_tracked(capture.path):
            self.state.update_file(capture.path, current)
        else:
            self.state.track_file(capture.path, capture.original or "", current)

        self.modal.refresh()
        self.update_status(ctx)

    def on_agent_end(self, event: Any, ctx: Any) -> None:
        # No tool result arrives after the run ends
        if self._captures:
            logger.debug("Dropping %d unmatched tool call capture(s)", len(self._captures))
            self._captures.clear()

    def update_status(self, ctx: Any) -> None:
        ui = _ui(ctx)
        if ui is None:
            return
        ui.set_status(STATUS_KEY, get_status_text(self.state.pending_count))
        ui.set_widget(
            STATUS_KEY,
            get_widget_lines(self.modal.get_file_list(), self.settings.max_widget_files),
        )

    # --- Overlay ---

    async def on_shortcut(self, ctx: Any) -> None:
        ui = _ui(ctx)
        if ui is None:
            return

        if self._session is not None:
            self._session.close()
            return

        if self.state.pending_count == 0:
            ui.notify("No file changes to review", "info")
            return

        self.modal.refresh()
        session = ReviewSession()
        self._session = session

        def factory(tui: Any, theme: Any, _keybindings: Any, done: Callable[[], None]) -> DiffReviewComponent:
            session.done = done
            session.component = DiffReviewComponent(
                self.modal,
                tui,
                theme,
                done,
                highlight_fn=self._highlight_fn,
                on_dismiss=lambda: self.update_status(ctx),
                on_copy=_schedule_copy,
                side_by_side_min_width=self.settings.side_by_side_min_width,
            )
            return session.component

        try:
            await ui.custom(factory, OVERLAY_OPTIONS)
        finally:
            self._session = None


def _schedule_copy(text: str) -> None:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        logger.debug("No running event loop; clipboard copy skipped")
        return
    task = loop.create_task(copy_to_clipboard(text))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)


def create_extension(
    highlight_fn: HighlightFn | None = None,
    settings: DiffReviewSettings | None = None,
) -> Callable[[ExtensionHost], DiffReviewExtension]:
    """Return an extension factory bound to *highlight_fn* and *settings*."""

    def factory(api: ExtensionHost) -> DiffReviewExtension:
        extension = DiffReviewExtension(
            settings=settings or load_diff_review_settings(api.cwd),
            highlight_fn=highlight_fn,
        )
        extension.install(api)
        return extension

    return factory


def register(api: ExtensionHost) -> DiffReviewExtension:
    """Default extension factory: settings from disk, no highlighting."""
    return create_extension()(api)
