"""Line-level diff between a baseline and the current content of a file."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal, Union

from pi.diff_review.constants import DIFF_CONTEXT_LINES

DiffLineType = Literal["context", "added", "removed"]


@dataclass(frozen=True)
class ContextLine:
    """Unchanged line, present on both sides."""

    content: str
    old_line_number: int
    new_line_number: int

    type: Literal["context"] = field(default="context", init=False)


@dataclass(frozen=True)
class AddedLine:
    """Line present only in the current content."""

    content: str
    new_line_number: int

    type: Literal["added"] = field(default="added", init=False)

    @property
    def old_line_number(self) -> None:
        return None


@dataclass(frozen=True)
class RemovedLine:
    """Line present only in the baseline."""

    content: str
    old_line_number: int

    type: Literal["removed"] = field(default="removed", init=False)

    @property
    def new_line_number(self) -> None:
        return None


DiffLine = Union[ContextLine, AddedLine, RemovedLine]


@dataclass
class FileDiff:
    """Diff of one tracked file.

    Unchanged stretches longer than the context window are left out of
    ``hunks``; consumers spot them as jumps in the line numbers.
    """

    file_path: str
    is_new_file: bool = False
    additions: int = 0
    deletions: int = 0
    hunks: list[DiffLine] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.hunks)


def split_lines(text: str) -> list[str]:
    """Split *text* on ``\\n`` only; a final newline does not add a line."""
    if not text:
        return []
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return lines


def _context_slice(
    start: int, end: int, *, first: bool, last: bool, context_lines: int
) -> list[tuple[int, int]]:
    """Return the ``(start, end)`` sub-ranges of an equal run worth showing."""
    length = end - start
    if first and last:
        return []
    if first:
        return [(max(start, end - context_lines), end)]
    if last:
        return [(start, min(end, start + context_lines))]
    if length <= context_lines * 2:
        return [(start, end)]
    return [(start, start + context_lines), (end - context_lines, end)]


Opcode = tuple[str, int, int, int, int]


def _myers_matches(old: Sequence[str], new: Sequence[str]) -> list[tuple[int, int]]:
    """Index pairs of a longest common subsequence of *old* and *new*.

    Myers' O((N+M)D) greedy search for the shortest edit script, then a
    walk back through the saved frontiers.
    """
    n, m = len(old), len(new)
    if n == 0 or m == 0:
        return []

    # k diagonal -> furthest x reached
    frontier: dict[int, int] = {1: 0}
    trace: list[dict[int, int]] = []

    for d in range(n + m + 1):
        trace.append(dict(frontier))
        for k in range(-d, d + 1, 2):
            if k == -d or (k != d and frontier[k - 1] < frontier[k + 1]):
                x = frontier[k + 1]
            else:
                x = frontier[k - 1] + 1
            y = x - k
            while x < n and y < m and old[x] == new[y]:
                x += 1
                y += 1
            frontier[k] = x
            if x >= n and y >= m:
                return _backtrack(trace, n, m)

    raise AssertionError("edit search did not reach the end of both inputs")


def _backtrack(trace: list[dict[int, int]], n: int, m: int) -> list[tuple[int, int]]:
    matches: list[tuple[int, int]] = []
    x, y = n, m
    for d in range(len(trace) - 1, -1, -1):
        frontier = trace[d]
        k = x - y
        if k == -d or (k != d and frontier[k - 1] < frontier[k + 1]):
            prev_k = k + 1
        else:
            prev_k = k - 1
        prev_x = frontier[prev_k]
        prev_y = prev_x - prev_k
        while x > prev_x and y > prev_y:
            x -= 1
            y -= 1
            matches.append((x, y))
        x, y = prev_x, prev_y
    matches.reverse()
    return matches


def _opcodes(old: Sequence[str], new: Sequence[str]) -> list[Opcode]:
    """Minimal edit script as ``(tag, i1, i2, j1, j2)`` blocks.

    Tags are ``equal``, ``delete``, ``insert`` and ``replace``, with the
    same meaning as :meth:`difflib.SequenceMatcher.get_opcodes`.
    """
    n, m = len(old), len(new)
    prefix = 0
    while prefix < min(n, m) and old[prefix] == new[prefix]:
        prefix += 1
    suffix = 0
    while suffix < min(n, m) - prefix and old[n - 1 - suffix] == new[m - 1 - suffix]:
        suffix += 1

    middle = _myers_matches(old[prefix : n - suffix], new[prefix : m - suffix])
    matches = (
        [(i, i) for i in range(prefix)]
        + [(prefix + i, prefix + j) for i, j in middle]
        + [(n - suffix + t, m - suffix + t) for t in range(suffix)]
    )

    opcodes: list[Opcode] = []
    i = j = 0
    for mi, mj in [*matches, (n, m)]:
        if mi > i and mj > j:
            opcodes.append(("replace", i, mi, j, mj))
        elif mi > i:
            opcodes.append(("delete", i, mi, j, mj))
        elif mj > j:
            opcodes.append(("insert", i, mi, j, mj))
        if (mi, mj) == (n, m):
            break
        last = opcodes[-1] if opcodes else None
        if last is not None and last[0] == "equal" and last[2] == mi and last[4] == mj:
            opcodes[-1] = ("equal", last[1], mi + 1, last[3], mj + 1)
        else:
            opcodes.append(("equal", mi, mi + 1, mj, mj + 1))
        i, j = mi + 1, mj + 1
    return opcodes


def compute_diff(
    baseline: str,
    current: str,
    context_lines: int = DIFF_CONTEXT_LINES,
    file_path: str = "",
) -> FileDiff:
    """Compute the line diff from *baseline* to *current*.

    Runs of unchanged lines are cut down to *context_lines* on each side of
    a change.  Identical inputs produce a diff with no hunks.
    """
    if context_lines < 0:
        raise ValueError(f"context_lines must be >= 0, got {context_lines}")

    old_lines = split_lines(baseline)
    new_lines = split_lines(current)
    diff = FileDiff(
        file_path=file_path,
        is_new_file=baseline == "" and current != "",
    )

    if old_lines == new_lines:
        return diff

    opcodes = _opcodes(old_lines, new_lines)

    for index, (tag, i1, i2, j1, j2) in enumerate(opcodes):
        if tag == "equal":
            ranges = _context_slice(
                i1,
                i2,
                first=index == 0,
                last=index == len(opcodes) - 1,
                context_lines=context_lines,
            )
            offset = j1 - i1
            for start, end in ranges:
                for i in range(start, end):
                    diff.hunks.append(
                        ContextLine(
                            content=old_lines[i],
                            old_line_number=i + 1,
                            new_line_number=i + offset + 1,
                        )
                    )
            continue

        # "replace" shows the removed block before the added one
        if tag in ("delete", "replace"):
            for i in range(i1, i2):
                diff.hunks.append(RemovedLine(content=old_lines[i], old_line_number=i + 1))
            diff.deletions += i2 - i1
        if tag in ("insert", "replace"):
            for j in range(j1, j2):
                diff.hunks.append(AddedLine(content=new_lines[j], new_line_number=j + 1))
            diff.additions += j2 - j1

    return diff
