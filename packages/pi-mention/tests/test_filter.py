"""Tests for pi.mention.filter."""

from __future__ import annotations

from pi.mention.directory import FALLBACK_CANDIDATES
from pi.mention.filter import filter_candidates
from pi.mention.types import Candidate


def _names(candidates: list[Candidate]) -> list[str]:
    return [c.display_name for c in candidates]


class TestFilterCandidates:
    def test_empty_query_returns_all_in_order(self) -> None:
        result = filter_candidates(FALLBACK_CANDIDATES, "", set())
        assert result == FALLBACK_CANDIDATES

    def test_substring_not_prefix(self) -> None:
        result = filter_candidates(FALLBACK_CANDIDATES, "njeri", set())
        assert _names(result) == ["Caroline Njeri"]

    def test_case_insensitive(self) -> None:
        result = filter_candidates(FALLBACK_CANDIDATES, "CAR", set())
        assert _names(result) == [
            "Carole Mutemi",
            "Carole Wanjiku",
            "Carole Kim",
            "Caroline Njeri",
        ]

    def test_excludes_mentioned_ids(self) -> None:
        result = filter_candidates(FALLBACK_CANDIDATES, "car", {"2", "5"})
        assert _names(result) == ["Carole Wanjiku", "Carole Kim"]

    def test_all_matches_already_mentioned(self) -> None:
        candidates = [
            Candidate(id="1", display_name="Carole Mutemi"),
            Candidate(id="2", display_name="Carole Wanjiku"),
        ]
        assert filter_candidates(candidates, "car", {"1", "2"}) == []

    def test_no_match(self) -> None:
        assert filter_candidates(FALLBACK_CANDIDATES, "zed", set()) == []
