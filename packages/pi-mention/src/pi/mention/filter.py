"""Candidate filtering for the mention dropdown."""

from __future__ import annotations

from typing import Container, Iterable

from pi.mention.types import Candidate


def filter_candidates(
    candidates: Iterable[Candidate],
    query: str,
    mentioned_ids: Container[str],
) -> list[Candidate]:
    """Filter *candidates* by case-folded substring match on the display name.

    Already-mentioned ids are always excluded. An empty query keeps every
    remaining candidate. Directory order is preserved; there is no scoring.
    """
    needle = query.strip().lower()
    return [
        c
        for c in candidates
        if c.id not in mentioned_ids and needle in c.display_name.lower()
    ]
