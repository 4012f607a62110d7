"""Token locator: derive mention token ranges from the buffer on demand.

Ranges are never stored. Every caller recomputes them from the current
buffer and the mention set, so free-form edits cannot leave stale offsets.
"""

from __future__ import annotations

from typing import Iterable

from pi.mention.types import Candidate, MentionToken


def _overlaps(start: int, end: int, claimed: list[tuple[int, int]]) -> bool:
    return any(start < c_end and c_start < end for c_start, c_end in claimed)


def locate(buffer: str, mentions: Iterable[Candidate]) -> list[MentionToken]:
    """Return every token occurrence in *buffer*, sorted by start offset.

    Candidates are scanned in insertion order; for each one, occurrences of
    ``"@" + display_name`` are collected left to right without overlapping
    each other. A span already claimed by an earlier-inserted candidate wins
    over a later candidate whose token text would overlap it.
    """
    claimed: list[tuple[int, int]] = []
    tokens: list[MentionToken] = []

    for candidate in mentions:
        needle = candidate.token_text
        pos = buffer.find(needle)
        while pos != -1:
            end = pos + len(needle)
            if _overlaps(pos, end, claimed):
                pos = buffer.find(needle, pos + 1)
                continue
            claimed.append((pos, end))
            tokens.append(MentionToken(candidate_id=candidate.id, start=pos, end=end))
            pos = buffer.find(needle, end)

    tokens.sort(key=lambda t: t.start)
    return tokens


def count_occurrences(tokens: Iterable[MentionToken], candidate_id: str) -> int:
    return sum(1 for t in tokens if t.candidate_id == candidate_id)


def find_enclosing_token(tokens: Iterable[MentionToken], caret: int) -> MentionToken | None:
    """Token with ``start < caret < end``, if any."""
    for token in tokens:
        if token.contains(caret):
            return token
    return None


def find_token_ending_at(tokens: Iterable[MentionToken], caret: int) -> MentionToken | None:
    for token in tokens:
        if token.end == caret:
            return token
    return None


def find_token_starting_at(tokens: Iterable[MentionToken], caret: int) -> MentionToken | None:
    for token in tokens:
        if token.start == caret:
            return token
    return None


def last_token_end_before(tokens: Iterable[MentionToken], caret: int) -> int:
    """End offset of the last token ending at or before *caret* (0 if none)."""
    floor = 0
    for token in tokens:
        if token.end <= caret:
            floor = max(floor, token.end)
    return floor
