"""ANSI-aware text layout: width measurement, truncation and padding.

These are the only functions that parse escape sequences.  Both diff views
go through :func:`width_truncate` and :func:`pad_to_width` for every row
they emit, so a colour opened inside a cell never leaks into the next
terminal row.

Widths are measured per grapheme cluster, so an emoji ZWJ sequence or a
flag counts as the two cells a terminal draws, not one per code point.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterator

import grapheme
import wcwidth as _wcwidth

RESET = "\x1b[0m"
DIM = "\x1b[2m"
RED = "\x1b[31m"
GREEN = "\x1b[32m"

# SGR sequences: ESC[ <params> m
_SGR_RE = re.compile(r"\x1b\[[0-9;]*m")

# Everything from ESC up to the next ``m``.  A run cut short by another ESC
# or by the end of the text is incomplete.
_ESCAPE_RUN_RE = re.compile(r"\x1b[^\x1bm]*(?:m|(?=\x1b)|$)")


def _cluster_width(cluster: str) -> int:
    """Cell width of one grapheme cluster.

    Emoji sequences (VS16, ZWJ, skin tones, flags) take two cells.  Wide
    characters take two and combining marks none.  Characters ``wcwidth``
    cannot classify (control characters, tabs) count as one so that
    content stays verbatim and is never silently dropped.
    """
    if len(cluster) == 1:
        if " " <= cluster <= "~":
            return 1
        w = _wcwidth.wcwidth(cluster)
        return 1 if w < 0 else w

    for ch in cluster:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D):  # VS16, ZWJ
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first = cluster[0]
    first_cp = ord(first)
    if first_cp >= 0x1F000 or 0x2600 <= first_cp <= 0x27BF:
        return 2
    if unicodedata.category(first) in ("Mn", "Me", "Mc", "Cf"):
        return 0
    w = _wcwidth.wcwidth(first)
    return 1 if w < 0 else w


def _tokens(styled: str) -> Iterator[tuple[bool, str]]:
    """Yield ``(is_escape, text)`` for each escape sequence and cluster.

    Incomplete escape runs are skipped.
    """
    pos = 0
    for match in _ESCAPE_RUN_RE.finditer(styled):
        for cluster in grapheme.graphemes(styled[pos : match.start()]):
            yield False, cluster
        run = match.group()
        if run.endswith("m"):
            yield True, run
        pos = match.end()
    for cluster in grapheme.graphemes(styled[pos:]):
        yield False, cluster


def strip_ansi(text: str) -> str:
    """Remove SGR escape sequences from *text*."""
    return _SGR_RE.sub("", text)


def visible_width(text: str) -> int:
    """Calculate the visible terminal width of *text*.

    Uses the same rules as :func:`width_truncate`: everything from ESC up to
    the next ``m`` is an escape run and takes no room.
    """
    return sum(_cluster_width(token) for is_escape, token in _tokens(text) if not is_escape)


def width_truncate(styled: str, width: int) -> str:
    """Truncate *styled* to at most *width* visible columns.

    Escape sequences are copied through untouched and do not count
    against *width*.  Text is cut at grapheme cluster boundaries.  Once
    the budget is spent no further visible clusters are taken, but escape
    sequences that come before the first cluster that does not fit are
    kept.  An unterminated sequence is dropped.  When any escape was
    emitted the result is closed with a reset, unless it already ends
    with one.
    """
    out: list[str] = []
    cols = 0
    emitted_escape = False

    for is_escape, token in _tokens(styled):
        if is_escape:
            out.append(token)
            emitted_escape = True
            continue

        w = _cluster_width(token)
        if cols >= width or cols + w > width:
            break
        out.append(token)
        cols += w

    result = "".join(out)
    if emitted_escape and not result.endswith(RESET):
        result += RESET
    return result


def pad_to_width(styled: str, width: int) -> str:
    """Right-pad *styled* with spaces to *width* visible columns.

    Padding goes in front of a trailing reset so that a background colour
    stops exactly where the content does.  Strings that already fill
    *width* are returned unchanged.
    """
    padding = width - visible_width(styled)
    if padding <= 0:
        return styled
    if styled.endswith(RESET):
        return styled[: -len(RESET)] + " " * padding + RESET
    return styled + " " * padding
