"""Diff review settings read from pi's layered ``settings.json`` files.

The ``diffReview`` object of the global settings file is merged with the
one in the project's ``.pi/settings.json``; project values win.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pi.diff_review.constants import (
    DIFF_CONTEXT_LINES,
    MAX_WIDGET_FILES,
    SIDE_BY_SIDE_MIN_WIDTH,
)

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".pi"
SETTINGS_KEY = "diffReview"


@dataclass
class DiffReviewSettings:
    side_by_side_min_width: int = SIDE_BY_SIDE_MIN_WIDTH
    context_lines: int = DIFF_CONTEXT_LINES
    max_widget_files: int = MAX_WIDGET_FILES

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DiffReviewSettings:
        """Build settings from camelCase keys, ignoring unusable values."""
        defaults = cls()
        return cls(
            side_by_side_min_width=_non_negative_int(
                data.get("sideBySideMinWidth"), defaults.side_by_side_min_width
            ),
            context_lines=_non_negative_int(data.get("contextLines"), defaults.context_lines),
            max_widget_files=_non_negative_int(
                data.get("maxWidgetFiles"), defaults.max_widget_files
            ),
        )


def _non_negative_int(value: Any, default: int) -> int:
    # bool is an int subclass; "true" is not a width
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        if value is not None:
            logger.warning("Ignoring invalid diff review setting value %r", value)
        return default
    return value


def deep_merge_settings(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge overrides into base.  ``None`` overrides are skipped."""
    result = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge_settings(result[key], value)
        else:
            result[key] = value
    return result


def _load_from_file(path: str) -> dict[str, Any]:
    """Load a settings file.  Missing or unreadable files yield ``{}``."""
    if not os.path.exists(path):
        return {}
    try:
        settings = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not load settings from %s: %s", path, e)
        return {}
    if not isinstance(settings, dict):
        logger.warning("Settings file %s does not contain an object", path)
        return {}
    return settings


def _section(settings: dict[str, Any]) -> dict[str, Any]:
    section = settings.get(SETTINGS_KEY)
    return section if isinstance(section, dict) else {}


def _default_agent_dir() -> str:
    """Default agent data directory (~/.pi)."""
    return os.path.join(os.path.expanduser("~"), CONFIG_DIR_NAME)


def load_diff_review_settings(cwd: str, agent_dir: str | None = None) -> DiffReviewSettings:
    """Load settings for *cwd*: global ``settings.json`` then the project's."""
    global_path = os.path.join(agent_dir or _default_agent_dir(), "settings.json")
    project_path = os.path.join(cwd, CONFIG_DIR_NAME, "settings.json")

    merged = deep_merge_settings(
        _section(_load_from_file(global_path)),
        _section(_load_from_file(project_path)),
    )
    return DiffReviewSettings.from_dict(merged)
