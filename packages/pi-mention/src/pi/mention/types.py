"""Core types for the mention editing engine.

Directory-facing records (``Candidate``, ``MentionRef``, ``NotePayload``) are
Pydantic models with camelCase aliases, matching the JSON the host exchanges.
Positional types derived from the buffer are plain dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

TRIGGER_CHAR = "@"

DeleteDirection = Literal["backward", "forward"]

CaretContextKind = Literal["free", "triggering", "at_token_boundary", "inside_token"]


# --- Directory records ---


class Candidate(BaseModel):
    """An entity eligible to be mentioned. Immutable once issued."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    display_name: str = Field(alias="displayName", min_length=1)

    @property
    def token_text(self) -> str:
        return f"{TRIGGER_CHAR}{self.display_name}"


class MentionRef(BaseModel):
    """A mention as it appears in a submitted note: ``{"id", "name"}``."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    display_name: str = Field(alias="name")

    @classmethod
    def from_candidate(cls, candidate: Candidate) -> MentionRef:
        return cls(id=candidate.id, display_name=candidate.display_name)


class NotePayload(BaseModel):
    """What ``submit()`` hands to the submission sink."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    text: str
    mentions: list[MentionRef] = Field(default_factory=list)


# --- Buffer-derived positions ---


@dataclass(frozen=True)
class MentionToken:
    """Half-open range ``[start, end)`` whose text is ``"@" + display name``."""

    candidate_id: str
    start: int
    end: int

    def contains(self, offset: int) -> bool:
        """True when *offset* lies strictly between start and end."""
        return self.start < offset < self.end


@dataclass(frozen=True)
class TriggerContext:
    """An open ``@`` run immediately before the caret."""

    anchor_offset: int
    query: str


@dataclass(frozen=True)
class CaretContext:
    """Classification of the caret against tokens and triggers for one event."""

    kind: CaretContextKind
    token: MentionToken | None = None
    trigger: TriggerContext | None = None


@dataclass(frozen=True)
class EditResult:
    """Outcome of an edit intent.

    ``handled`` is False when the host should apply its native behaviour
    (plain character insertion or single-character deletion). ``caret`` is
    the caret position the host must restore after a programmatic splice.
    """

    handled: bool
    caret: int | None = None
