"""Insertion-ordered set of mentioned candidates, keyed by id."""

from __future__ import annotations

from typing import Iterator

from pi.mention.locator import count_occurrences, locate
from pi.mention.types import Candidate, MentionRef


class MentionSet:
    """Candidates currently considered mentioned.

    Adding is idempotent: the first candidate seen for an id is kept.
    Membership is cached rather than authoritative; ``prune`` drops any
    entry whose token no longer appears in the buffer.
    """

    def __init__(self, candidates: list[Candidate] | None = None) -> None:
        self._entries: dict[str, Candidate] = {}
        for candidate in candidates or []:
            self.add(candidate)

    def add(self, candidate: Candidate) -> bool:
        """Add *candidate*; returns False if its id was already present."""
        if candidate.id in self._entries:
            return False
        self._entries[candidate.id] = candidate
        return True

    def remove(self, candidate_id: str) -> Candidate | None:
        return self._entries.pop(candidate_id, None)

    def get(self, candidate_id: str) -> Candidate | None:
        return self._entries.get(candidate_id)

    def ids(self) -> set[str]:
        return set(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def prune(self, buffer: str) -> list[Candidate]:
        """Remove members with zero token occurrences in *buffer*.

        Returns the removed candidates in insertion order.
        """
        tokens = locate(buffer, self)
        stale = [c for c in self if count_occurrences(tokens, c.id) == 0]
        for candidate in stale:
            del self._entries[candidate.id]
        return stale

    def to_refs(self) -> list[MentionRef]:
        return [MentionRef.from_candidate(c) for c in self]

    def __contains__(self, candidate_id: object) -> bool:
        return candidate_id in self._entries

    def __iter__(self) -> Iterator[Candidate]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        names = ", ".join(c.display_name for c in self)
        return f"MentionSet([{names}])"
