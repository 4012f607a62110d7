"""Text utilities: grapheme stepping and terminal width measurement.

Caret movement and single-character deletion step over whole grapheme
clusters; the dropdown truncates display names to a column width.
"""

from __future__ import annotations

import re
import unicodedata

import grapheme
import wcwidth as _wcwidth

# SGR sequences only; the dropdown never emits anything else.
_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Grapheme stepping
# ---------------------------------------------------------------------------


def grapheme_len_before(text: str, offset: int) -> int:
    """Length in code points of the grapheme cluster ending at *offset*."""
    if offset <= 0:
        return 0
    clusters = list(grapheme.graphemes(text[:offset]))
    return len(clusters[-1]) if clusters else 1


def grapheme_len_after(text: str, offset: int) -> int:
    """Length in code points of the grapheme cluster starting at *offset*."""
    if offset >= len(text):
        return 0
    for cluster in grapheme.graphemes(text[offset:]):
        return len(cluster)
    return 1


# ---------------------------------------------------------------------------
# Width measurement
# ---------------------------------------------------------------------------


def _grapheme_width(g: str) -> int:
    """Terminal display width of a single grapheme cluster."""
    if not g:
        return 0

    first = g[0]
    cp = ord(first)
    if cp < 0x20 or (0x7F <= cp <= 0x9F):
        return 0

    if len(g) > 1:
        # VS16 and ZWJ sequences render as wide emoji
        if "\ufe0f" in g or "\u200d" in g:
            return 2
        if unicodedata.category(first).startswith("M"):
            return 0

    return max(_wcwidth.wcwidth(first), 0)


def visible_width(text: str) -> int:
    """Visible terminal width of *text*, ignoring SGR escape sequences."""
    if not text:
        return 0

    stripped = _ANSI_RE.sub("", text)
    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = sum(_grapheme_width(g) for g in grapheme.graphemes(stripped))
    return _cache_width(stripped, total)


def truncate_to_width(text: str, max_width: int, ellipsis: str = "...") -> str:
    """Truncate plain *text* to *max_width* columns, appending *ellipsis*.

    The ellipsis counts towards the width.
    """
    if max_width <= 0:
        return ""
    if visible_width(text) <= max_width:
        return text

    target = max_width - visible_width(ellipsis)
    if target <= 0:
        return ellipsis[:max_width]

    result: list[str] = []
    cols = 0
    for g in grapheme.graphemes(text):
        w = _grapheme_width(g)
        if cols + w > target:
            break
        result.append(g)
        cols += w
    return "".join(result) + ellipsis


def normalize_to_single_line(text: str) -> str:
    return re.sub(r"[\r\n]+", " ", text).strip()
