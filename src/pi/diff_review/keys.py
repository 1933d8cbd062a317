"""Key matching for the review overlay.

A reduced form of pi-tui's ``matches_key``: named keys, plain characters
and ``ctrl+<letter>``, in both legacy terminal encodings and the kitty
keyboard protocol's ``CSI u`` form.
"""

from __future__ import annotations

import re

KeyId = str


class Key:
    """Named key constants and modifier combinators."""

    escape = "escape"
    enter = "enter"
    tab = "tab"
    up = "up"
    down = "down"

    @staticmethod
    def ctrl(key: str) -> KeyId:
        return f"ctrl+{key}"


MODIFIERS: dict[str, int] = {"shift": 1, "alt": 2, "ctrl": 4}

# Caps lock and num lock bits reported by kitty
LOCK_MASK = 64 | 128

CODEPOINTS: dict[str, int] = {"escape": 27, "enter": 13, "tab": 9}

LEGACY_SEQUENCES: dict[str, list[str]] = {
    "escape": ["\x1b"],
    "enter": ["\r", "\n"],
    "tab": ["\t"],
    "up": ["\x1b[A", "\x1bOA"],
    "down": ["\x1b[B", "\x1bOB"],
}

# CSI u format: \x1b[<codepoint>(:<shifted>(:<base>))?(;<modifier>(:<event>))?u
_KITTY_CSI_U_RE = re.compile(r"\x1b\[(\d+)(?::\d*)*(?:;(\d+)(?::(\d+))?)?u")


def _parse_key_id(key_id: str) -> tuple[int, str] | None:
    modifiers = 0
    key = ""
    for part in key_id.split("+"):
        lower = part.lower()
        if lower in MODIFIERS:
            modifiers |= MODIFIERS[lower]
        else:
            key = part
    if not key:
        return None
    return modifiers, key


def _matches_kitty(data: str, codepoint: int, modifiers: int) -> bool:
    m = _KITTY_CSI_U_RE.fullmatch(data)
    if m is None:
        return False
    event_type = int(m.group(3)) if m.group(3) else 1
    if event_type == 3:  # release
        return False
    actual_mod = (int(m.group(2) or 1) - 1) & ~LOCK_MASK
    return int(m.group(1)) == codepoint and actual_mod == modifiers


def _raw_ctrl_char(key: str) -> str | None:
    if len(key) == 1 and "a" <= key.lower() <= "z":
        return chr(ord(key.lower()) & 0x1F)
    return None


def matches_key(data: str, key_id: KeyId) -> bool:
    """Return ``True`` if raw terminal input *data* is the key *key_id*."""
    parsed = _parse_key_id(key_id)
    if parsed is None:
        return False
    modifiers, key = parsed

    if key in LEGACY_SEQUENCES:
        if key in CODEPOINTS and _matches_kitty(data, CODEPOINTS[key], modifiers):
            return True
        return modifiers == 0 and data in LEGACY_SEQUENCES[key]

    if len(key) != 1:
        return False

    if _matches_kitty(data, ord(key.lower()), modifiers):
        return True
    if modifiers == 0:
        return data == key
    if modifiers == MODIFIERS["ctrl"]:
        return data == _raw_ctrl_char(key)
    return False
