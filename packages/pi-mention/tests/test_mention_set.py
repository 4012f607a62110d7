"""Tests for pi.mention.mention_set."""

from __future__ import annotations

from pi.mention.mention_set import MentionSet
from pi.mention.types import Candidate

CAROLE = Candidate(id="2", display_name="Carole Mutemi")
KIM = Candidate(id="4", display_name="Carole Kim")


class TestMentionSet:
    def test_add_is_idempotent(self) -> None:
        mentions = MentionSet()
        assert mentions.add(CAROLE) is True
        assert mentions.add(CAROLE) is False
        assert len(mentions) == 1

    def test_first_seen_wins(self) -> None:
        mentions = MentionSet([CAROLE])
        mentions.add(Candidate(id="2", display_name="Someone Else"))
        assert mentions.get("2") == CAROLE

    def test_insertion_order(self) -> None:
        mentions = MentionSet([KIM, CAROLE])
        assert [c.id for c in mentions] == ["4", "2"]

    def test_membership_by_id(self) -> None:
        mentions = MentionSet([CAROLE])
        assert "2" in mentions
        assert "4" not in mentions

    def test_remove_and_clear(self) -> None:
        mentions = MentionSet([CAROLE, KIM])
        assert mentions.remove("2") == CAROLE
        assert mentions.remove("2") is None
        mentions.clear()
        assert len(mentions) == 0


class TestPrune:
    """prune() drops entries whose token text is gone from the buffer."""

    def test_keeps_present_tokens(self) -> None:
        mentions = MentionSet([CAROLE, KIM])
        removed = mentions.prune("@Carole Mutemi and @Carole Kim")
        assert removed == []
        assert mentions.ids() == {"2", "4"}

    def test_drops_missing_tokens(self) -> None:
        mentions = MentionSet([CAROLE, KIM])
        removed = mentions.prune("@Carole Mutemi and Carole Kim")
        assert removed == [KIM]
        assert mentions.ids() == {"2"}

    def test_to_refs_serializes_as_id_and_name(self) -> None:
        mentions = MentionSet([CAROLE])
        refs = mentions.to_refs()
        assert [r.model_dump(by_alias=True) for r in refs] == [
            {"id": "2", "name": "Carole Mutemi"}
        ]
