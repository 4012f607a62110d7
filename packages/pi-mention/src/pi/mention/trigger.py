"""Trigger detection: is the caret composing an ``@`` mention?

Detection is recomputed from scratch on every buffer or caret change. The
broad-match helpers below cover text that only looks like a mention.
"""

from __future__ import annotations

import re
from typing import Iterable

from pi.mention.types import TRIGGER_CHAR, MentionToken, TriggerContext

_WORD_CHAR_RE = re.compile(r"[A-Za-z0-9_]")

# "@" + word, then any number of single-space separated words, optional trailing space.
_MENTION_SHAPED_RE = re.compile(r"@[A-Za-z0-9_]+(?:[ \t][A-Za-z0-9_]+)*[ \t]?$")

# Partial query left behind when a mention is inserted without a formal trigger.
_PARTIAL_QUERY_RE = re.compile(r"@[A-Za-z0-9_ ]*$")


def clamp_caret(buffer: str, caret: int) -> int:
    return max(0, min(caret, len(buffer)))


def detect(
    buffer: str,
    caret: int,
    tokens: Iterable[MentionToken] = (),
) -> TriggerContext | None:
    """Return the active trigger before *caret*, or None.

    Walks back over ``[A-Za-z0-9_]`` from the caret; the character before that
    run must be ``@``. Whatever precedes the ``@`` is irrelevant. A caret
    strictly inside a committed token never triggers.
    """
    caret = clamp_caret(buffer, caret)

    start = caret
    while start > 0 and _WORD_CHAR_RE.match(buffer[start - 1]):
        start -= 1

    if start == 0 or buffer[start - 1] != TRIGGER_CHAR:
        return None

    if any(token.contains(caret) for token in tokens):
        return None

    query = buffer[start:caret].strip().lower()
    return TriggerContext(anchor_offset=start - 1, query=query)


def match_mention_shaped_run(text: str, floor: int = 0) -> tuple[int, int] | None:
    """Find a mention-shaped run ending exactly at ``len(text)``.

    Only ``text[floor:]`` is searched, so a run never reaches back into a
    committed token. Returns ``(start, end)`` offsets into *text*.
    """
    m = _MENTION_SHAPED_RE.search(text, floor)
    if m is None:
        return None
    return m.start(), m.end()


def strip_partial_query(text: str, floor: int = 0) -> int:
    """Offset where a best-effort ``@query`` suffix of *text* begins.

    Returns ``len(text)`` when there is no such suffix after *floor*.
    """
    m = _PARTIAL_QUERY_RE.search(text, floor)
    if m is None:
        return len(text)
    return m.start()
