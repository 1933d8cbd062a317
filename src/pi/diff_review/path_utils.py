"""Resolve tool-call file paths the way the agent's tools do."""

from __future__ import annotations

import os


def expand_path(file_path: str) -> str:
    """Expand a leading ``~`` or ``~/`` to the user's home directory.

    ``~`` anywhere else (including ``~user``) is left untouched.
    """
    if file_path == "~":
        return os.path.expanduser("~")
    if file_path.startswith("~/"):
        return os.path.join(os.path.expanduser("~"), file_path[2:])
    return file_path


def resolve_path(file_path: str, cwd: str) -> str:
    """Expand *file_path* and make it absolute, relative to *cwd*."""
    expanded = expand_path(file_path)
    if os.path.isabs(expanded):
        return os.path.normpath(expanded)
    return os.path.normpath(os.path.join(os.path.abspath(cwd), expanded))
