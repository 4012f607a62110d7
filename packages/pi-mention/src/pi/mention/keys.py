"""Raw terminal key matching for the mention edit surface.

Understands legacy escape sequences and the kitty CSI-u form for the keys the
edit surface binds: arrows, home/end, enter, escape, tab, backspace, delete
and ctrl+letter chords. ``matches_key`` checks raw input against a key id
such as ``"shift+enter"`` or ``"ctrl+a"``.
"""

from __future__ import annotations

import re

KeyId = str

MODIFIERS: dict[str, int] = {
    "shift": 1,
    "alt": 2,
    "ctrl": 4,
}

LOCK_MASK = 64 + 128

CODEPOINTS: dict[str, int] = {
    "escape": 27,
    "tab": 9,
    "enter": 13,
    "backspace": 127,
}

# Legacy escape sequences -> key names (no modifiers)
LEGACY_KEY_SEQUENCES: dict[str, str] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[1~": "home",
    "\x1b[4~": "end",
    "\x1b[3~": "delete",
}

_CSI_LETTERS: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
}

# \x1b[<codepoint>(;<modifier>)?u
_KITTY_CSI_U_RE = re.compile(r"\x1b\[(\d+)(?::\d+)*(?:;(\d+)(?::(\d+))?)?u")
# \x1b[1;<modifier>[ABCDHF]
_MODIFIED_CSI_RE = re.compile(r"\x1b\[1;(\d+)(?::\d+)?([ABCDHF])")
# \x1b[3;<modifier>~
_MODIFIED_DELETE_RE = re.compile(r"\x1b\[3;(\d+)(?::\d+)?~")


def parse_key_id(key_id: str) -> tuple[int, str] | None:
    """Split ``"ctrl+shift+a"`` into ``(modifier_bits, "a")``."""
    if not key_id:
        return None

    modifier = 0
    key_parts: list[str] = []
    for part in key_id.split("+"):
        lower = part.lower()
        if lower in MODIFIERS:
            modifier |= MODIFIERS[lower]
        else:
            key_parts.append(part)

    key = "+".join(key_parts)
    if not key:
        return None
    return modifier, key


def _kitty_modifier(raw: str | None) -> int:
    return ((int(raw) if raw else 1) - 1) & ~LOCK_MASK


def _matches_kitty(data: str, codepoint: int, modifier: int) -> bool:
    m = _KITTY_CSI_U_RE.fullmatch(data)
    if m is None:
        return False
    if m.group(3) == "3":  # key release
        return False
    return int(m.group(1)) == codepoint and _kitty_modifier(m.group(2)) == modifier


def _matches_csi_key(data: str, name: str, modifier: int) -> bool:
    if modifier == 0:
        return LEGACY_KEY_SEQUENCES.get(data) == name
    if name == "delete":
        m = _MODIFIED_DELETE_RE.fullmatch(data)
        return m is not None and _kitty_modifier(m.group(1)) == modifier
    m = _MODIFIED_CSI_RE.fullmatch(data)
    if m is None:
        return False
    return _CSI_LETTERS.get(m.group(2)) == name and _kitty_modifier(m.group(1)) == modifier


def _ctrl_char(key: str) -> str | None:
    if len(key) != 1:
        return None
    code = ord(key.lower())
    if ord("a") <= code <= ord("z"):
        return chr(code & 0x1F)
    return None


def matches_key(data: str, key_id: KeyId) -> bool:  # noqa: C901
    """Return ``True`` if *data* (raw terminal input) matches *key_id*."""
    parsed = parse_key_id(key_id)
    if parsed is None:
        return False
    modifier, key = parsed
    key = key.lower() if len(key) > 1 else key
    plain = modifier == 0

    if key in ("escape", "esc"):
        if _matches_kitty(data, CODEPOINTS["escape"], modifier):
            return True
        return plain and data == "\x1b"

    if key in ("enter", "return"):
        if _matches_kitty(data, CODEPOINTS["enter"], modifier):
            return True
        if plain:
            return data in ("\r", "\n")
        if modifier == MODIFIERS["alt"]:
            return data in ("\x1b\r", "\x1b\n")
        return False

    if key == "tab":
        if _matches_kitty(data, CODEPOINTS["tab"], modifier):
            return True
        if plain:
            return data == "\t"
        return modifier == MODIFIERS["shift"] and data == "\x1b[Z"

    if key == "backspace":
        if _matches_kitty(data, CODEPOINTS["backspace"], modifier):
            return True
        if plain:
            return data in ("\x7f", "\x08")
        if modifier == MODIFIERS["alt"]:
            return data in ("\x1b\x7f", "\x1b\x08")
        return False

    if key in ("up", "down", "left", "right", "home", "end", "delete"):
        return _matches_csi_key(data, key, modifier)

    if len(key) != 1:
        return False

    if _matches_kitty(data, ord(key.lower()), modifier):
        return True
    if plain:
        return data == key
    if modifier == MODIFIERS["ctrl"]:
        ctrl = _ctrl_char(key)
        return ctrl is not None and data == ctrl
    if modifier == MODIFIERS["alt"]:
        return data == "\x1b" + key
    return False


def is_printable_input(data: str) -> bool:
    """True when *data* carries no control characters and can be inserted."""
    if not data:
        return False
    return not any(
        ord(ch) < 32 or ord(ch) == 0x7F or (0x80 <= ord(ch) <= 0x9F) for ch in data
    )
