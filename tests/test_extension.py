"""Tests for the extension's tool hooks and overlay lifecycle."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Callable

import pytest

from pi.diff_review.extension import (
    OVERLAY_OPTIONS,
    SHORTCUT,
    STATUS_KEY,
    DiffReviewExtension,
    create_extension,
    read_file_content,
    register,
)
from pi.diff_review.settings import DiffReviewSettings


class IdentityTheme:
    def fg(self, color: str, text: str) -> str:
        return text

    def bold(self, text: str) -> str:
        return text


class FakeTUI:
    width = 140
    height = 40

    def request_render(self) -> None:
        pass


class FakeUI:
    def __init__(self) -> None:
        self.status: dict[str, str | None] = {}
        self.widgets: dict[str, list[str] | None] = {}
        self.notifications: list[tuple[str, str]] = []
        self.options: dict[str, Any] | None = None
        self.component: Any = None
        self.opened = asyncio.Event()
        self.on_open: Callable[[Any], None] | None = None

    def set_status(self, key: str, text: str | None) -> None:
        self.status[key] = text

    def set_widget(self, key: str, lines: list[str] | None) -> None:
        self.widgets[key] = lines

    def notify(self, message: str, level: str = "info") -> None:
        self.notifications.append((message, level))

    async def custom(self, factory: Callable[..., Any], options: dict[str, Any]) -> None:
        self.options = options
        closed = asyncio.Event()
        self.component = factory(FakeTUI(), IdentityTheme(), None, closed.set)
        self.opened.set()
        if self.on_open is not None:
            self.on_open(self.component)
        await closed.wait()


class FakeAPI:
    def __init__(self, cwd: str) -> None:
        self.cwd = cwd
        self.handlers: dict[str, Callable[..., Any]] = {}
        self.shortcuts: dict[str, dict[str, Any]] = {}

    def on(self, event_type: str, handler: Callable[..., Any]) -> None:
        self.handlers[event_type] = handler

    def register_shortcut(
        self,
        key_id: str,
        *,
        description: str = "",
        handler: Callable[..., Any] | None = None,
    ) -> None:
        self.shortcuts[key_id] = {"description": description, "handler": handler}


def _ctx(cwd: Path, ui: FakeUI | None = None) -> SimpleNamespace:
    return SimpleNamespace(cwd=str(cwd), has_ui=ui is not None, ui=ui)


def _call(tool_name: str, call_id: str, **arguments: Any) -> SimpleNamespace:
    return SimpleNamespace(tool_name=tool_name, tool_call_id=call_id, arguments=arguments)


def _result(tool_name: str, call_id: str, is_error: bool = False) -> SimpleNamespace:
    return SimpleNamespace(tool_name=tool_name, tool_call_id=call_id, is_error=is_error)


def _edit(ext: DiffReviewExtension, ctx: SimpleNamespace, path: Path, content: str, call_id: str) -> None:
    ext.on_tool_call(_call("edit", call_id, path=path.name), ctx)
    path.write_text(content, encoding="utf-8")
    ext.on_tool_result(_result("edit", call_id), ctx)


@pytest.fixture
def ui() -> FakeUI:
    return FakeUI()


@pytest.fixture
def ext() -> DiffReviewExtension:
    return DiffReviewExtension()


class TestToolTracking:
    def test_write_creates_new_file_entry(self, ext: DiffReviewExtension, ui: FakeUI, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path, ui)
        ext.on_tool_call(_call("write", "c1", path="new.py", content="x\ny\n"), ctx)
        ext.on_tool_result(_result("write", "c1"), ctx)

        path = str(tmp_path / "new.py")
        diff = ext.state.get_file_diff(path)
        assert diff is not None
        assert diff.is_new_file is True
        assert diff.additions == 2
        assert ui.status[STATUS_KEY] == "📋 1 file changed"
        assert ui.widgets[STATUS_KEY] == ["📋 1 file changed", f"  {path}  +2/-0"]

    def test_edit_reads_file_before_and_after(self, ext: DiffReviewExtension, ui: FakeUI, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path, ui)
        target = tmp_path / "app.py"
        target.write_text("a\n", encoding="utf-8")
        _edit(ext, ctx, target, "b\n", "c1")

        diff = ext.state.get_file_diff(str(target))
        assert diff is not None
        assert [(h.type, h.content) for h in diff.hunks] == [("removed", "a"), ("added", "b")]

    def test_later_edits_keep_first_baseline(self, ext: DiffReviewExtension, ui: FakeUI, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path, ui)
        target = tmp_path / "app.py"
        target.write_text("a\n", encoding="utf-8")
        _edit(ext, ctx, target, "b\n", "c1")
        _edit(ext, ctx, target, "c\n", "c2")

        snapshot = ext.state.get_snapshot(str(target))
        assert snapshot is not None
        assert snapshot.baseline_content == "a\n"
        assert snapshot.current_content == "c\n"

    def test_failed_tool_not_tracked(self, ext: DiffReviewExtension, ui: FakeUI, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path, ui)
        ext.on_tool_call(_call("write", "c1", path="x.py", content="x"), ctx)
        ext.on_tool_result(_result("write", "c1", is_error=True), ctx)
        assert ext.state.tracked_files == []
        assert ui.status == {}

    def test_other_tools_ignored(self, ext: DiffReviewExtension, ui: FakeUI, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path, ui)
        ext.on_tool_call(_call("read", "c1", path="x.py"), ctx)
        ext.on_tool_result(_result("read", "c1"), ctx)
        ext.on_tool_call(_call("write", "c2", content="no path"), ctx)
        ext.on_tool_result(_result("write", "c2"), ctx)
        assert ext.state.tracked_files == []

    def test_result_without_call_ignored(self, ext: DiffReviewExtension, tmp_path: Path) -> None:
        ext.on_tool_result(_result("edit", "unknown"), _ctx(tmp_path))
        assert ext.state.tracked_files == []

    def test_agent_end_drops_unanswered_calls(self, ext: DiffReviewExtension, ui: FakeUI, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path, ui)
        ext.on_tool_call(_call("write", "c1", path="x.py", content="x\n"), ctx)
        ext.on_agent_end(SimpleNamespace(type="agent_end"), ctx)

        ext.on_tool_result(_result("write", "c1"), ctx)
        assert ext.state.tracked_files == []

    def test_calls_answered_before_agent_end_are_kept(
        self, ext: DiffReviewExtension, ui: FakeUI, tmp_path: Path
    ) -> None:
        ctx = _ctx(tmp_path, ui)
        ext.on_tool_call(_call("write", "c1", path="x.py", content="x\n"), ctx)
        ext.on_tool_result(_result("write", "c1"), ctx)
        ext.on_agent_end(SimpleNamespace(type="agent_end"), ctx)
        assert ext.state.pending_count == 1

    def test_works_without_ui(self, ext: DiffReviewExtension, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path)
        ext.on_tool_call(_call("write", "c1", path="x.py", content="x\n"), ctx)
        ext.on_tool_result(_result("write", "c1"), ctx)
        assert ext.state.pending_count == 1

    def test_write_back_to_baseline_clears_status(self, ext: DiffReviewExtension, ui: FakeUI, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path, ui)
        target = tmp_path / "app.py"
        target.write_text("a\n", encoding="utf-8")
        _edit(ext, ctx, target, "b\n", "c1")
        _edit(ext, ctx, target, "a\n", "c2")
        assert ui.status[STATUS_KEY] is None
        assert ui.widgets[STATUS_KEY] is None


class TestShortcut:
    @pytest.mark.asyncio
    async def test_nothing_to_review(self, ext: DiffReviewExtension, ui: FakeUI, tmp_path: Path) -> None:
        await ext.on_shortcut(_ctx(tmp_path, ui))
        assert ui.notifications == [("No file changes to review", "info")]
        assert ui.component is None

    @pytest.mark.asyncio
    async def test_no_ui_is_a_no_op(self, ext: DiffReviewExtension, tmp_path: Path) -> None:
        await ext.on_shortcut(_ctx(tmp_path))
        assert ext.session is None

    @pytest.mark.asyncio
    async def test_overlay_opens_and_closes_on_escape(
        self, ext: DiffReviewExtension, ui: FakeUI, tmp_path: Path
    ) -> None:
        ctx = _ctx(tmp_path, ui)
        ext.on_tool_call(_call("write", "c1", path="x.py", content="x\n"), ctx)
        ext.on_tool_result(_result("write", "c1"), ctx)

        ui.on_open = lambda component: component.handle_input("\x1b")
        await asyncio.wait_for(ext.on_shortcut(ctx), timeout=1)

        assert ui.options == OVERLAY_OPTIONS
        assert ext.session is None

    @pytest.mark.asyncio
    async def test_shortcut_again_closes_overlay(
        self, ext: DiffReviewExtension, ui: FakeUI, tmp_path: Path
    ) -> None:
        ctx = _ctx(tmp_path, ui)
        ext.on_tool_call(_call("write", "c1", path="x.py", content="x\n"), ctx)
        ext.on_tool_result(_result("write", "c1"), ctx)

        task = asyncio.create_task(ext.on_shortcut(ctx))
        await asyncio.wait_for(ui.opened.wait(), timeout=1)
        assert ext.session is not None
        assert ext.session.component is ui.component

        await ext.on_shortcut(ctx)
        await asyncio.wait_for(task, timeout=1)
        assert ext.session is None

    @pytest.mark.asyncio
    async def test_dismiss_in_overlay_updates_status(
        self, ext: DiffReviewExtension, ui: FakeUI, tmp_path: Path
    ) -> None:
        ctx = _ctx(tmp_path, ui)
        ext.on_tool_call(_call("write", "c1", path="x.py", content="x\n"), ctx)
        ext.on_tool_result(_result("write", "c1"), ctx)
        assert ui.status[STATUS_KEY] == "📋 1 file changed"

        ui.on_open = lambda component: component.handle_input("d")
        await asyncio.wait_for(ext.on_shortcut(ctx), timeout=1)

        assert ui.status[STATUS_KEY] is None
        assert ext.state.pending_count == 0
        assert ext.session is None


class TestRegistration:
    def test_install_registers_handlers(self, ext: DiffReviewExtension, tmp_path: Path) -> None:
        api = FakeAPI(str(tmp_path))
        ext.install(api)
        assert set(api.handlers) == {"tool_call", "tool_result", "agent_end"}
        assert api.shortcuts[SHORTCUT]["handler"] == ext.on_shortcut

    def test_register_loads_project_settings(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        project = tmp_path / "project"
        (project / ".pi").mkdir(parents=True)
        (project / ".pi" / "settings.json").write_text(
            json.dumps({"diffReview": {"contextLines": 0, "sideBySideMinWidth": 90}}),
            encoding="utf-8",
        )

        extension = register(FakeAPI(str(project)))
        assert extension.settings.context_lines == 0
        assert extension.settings.side_by_side_min_width == 90
        assert extension.state.context_lines == 0

    def test_create_extension_with_explicit_settings(self, tmp_path: Path) -> None:
        settings = DiffReviewSettings(max_widget_files=1)
        api = FakeAPI(str(tmp_path))
        extension = create_extension(settings=settings)(api)
        assert extension.settings is settings
        assert "tool_call" in api.handlers


def test_read_file_content_missing_file(tmp_path: Path) -> None:
    assert read_file_content(str(tmp_path / "missing.txt")) == ""
