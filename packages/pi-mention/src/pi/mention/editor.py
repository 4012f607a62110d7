"""Mention editor: the text state machine behind the note input.

The editor owns ``(buffer, caret, trigger, mentions)`` and keeps them
mutually consistent across every edit intent the host forwards. Token
ranges are derived on demand (see ``pi.mention.locator``) and the caret
context is classified fresh for each event:

- ``free``: caret not in or at any token, no trigger
- ``triggering``: an ``@query`` run ends at the caret
- ``at_token_boundary``: caret exactly at a token's end
- ``inside_token``: caret strictly between a token's start and end

Operations that splice the buffer return an ``EditResult`` carrying the
caret the host must restore. Operations the host should perform natively
(plain typing, single-character deletion) return ``handled=False``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pi.mention.filter import filter_candidates
from pi.mention.locator import (
    find_enclosing_token,
    find_token_ending_at,
    find_token_starting_at,
    last_token_end_before,
    locate,
)
from pi.mention.mention_set import MentionSet
from pi.mention.navigation import NavigationController
from pi.mention.trigger import clamp_caret, detect, match_mention_shaped_run, strip_partial_query
from pi.mention.types import (
    Candidate,
    CaretContext,
    DeleteDirection,
    EditResult,
    MentionToken,
    NotePayload,
    TriggerContext,
)

logger = logging.getLogger(__name__)


@dataclass
class EditorState:
    """Single source of truth for one note being composed."""

    buffer: str = ""
    caret: int = 0
    trigger: TriggerContext | None = None
    mentions: MentionSet = field(default_factory=MentionSet)


def classify(state: EditorState, tokens: list[MentionToken]) -> CaretContext:
    """Classify the caret of *state* against *tokens* and the trigger rule."""
    token = find_enclosing_token(tokens, state.caret)
    if token is not None:
        return CaretContext(kind="inside_token", token=token)

    token = find_token_ending_at(tokens, state.caret)
    if token is not None:
        return CaretContext(kind="at_token_boundary", token=token)

    trigger = detect(state.buffer, state.caret, tokens)
    if trigger is not None:
        return CaretContext(kind="triggering", trigger=trigger)

    return CaretContext(kind="free")


class MentionEditor:
    """Applies edit intents to an ``EditorState`` and drives the dropdown."""

    def __init__(
        self,
        candidates: list[Candidate] | None = None,
        max_visible: int = 5,
    ) -> None:
        self._state = EditorState()
        self._candidates: list[Candidate] = list(candidates or [])
        self._navigation = NavigationController(max_visible)
        # Dropdown opened from the picker action, without an "@" in the buffer
        self._picker_open = False

    # --- Accessors ---

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def buffer(self) -> str:
        return self._state.buffer

    @property
    def caret(self) -> int:
        return self._state.caret

    @property
    def trigger(self) -> TriggerContext | None:
        return self._state.trigger

    @property
    def mentions(self) -> MentionSet:
        return self._state.mentions

    @property
    def navigation(self) -> NavigationController:
        return self._navigation

    @property
    def candidates(self) -> list[Candidate]:
        return list(self._candidates)

    @property
    def is_dropdown_open(self) -> bool:
        return self._navigation.is_open

    @property
    def is_picker_open(self) -> bool:
        return self._picker_open

    @property
    def visible_candidates(self) -> list[Candidate]:
        return self._navigation.items

    @property
    def highlight_index(self) -> int:
        return self._navigation.highlight_index

    def tokens(self) -> list[MentionToken]:
        return locate(self._state.buffer, self._state.mentions)

    def classify(self) -> CaretContext:
        return classify(self._state, self.tokens())

    # --- Candidates ---

    def set_candidates(self, candidates: list[Candidate]) -> bool:
        """Replace the full candidate set.

        If a trigger or the picker is active, the visible list is re-filtered
        and the highlight reset. Returns True when the dropdown was refreshed.
        """
        self._candidates = list(candidates)
        if self._state.trigger is not None:
            self._navigation.refresh(self._filtered(self._state.trigger.query))
            return True
        if self._picker_open:
            self._navigation.refresh(self._filtered(""))
            return True
        return False

    def _filtered(self, query: str) -> list[Candidate]:
        return filter_candidates(self._candidates, query, self._state.mentions)

    # --- Edit intents ---

    def restore(
        self,
        buffer: str,
        caret: int | None = None,
        mentions: list[Candidate] | None = None,
    ) -> EditResult:
        """Load a draft: buffer, caret (default end) and committed mentions."""
        self._state = EditorState(mentions=MentionSet(mentions))
        return self.on_text_change(buffer, len(buffer) if caret is None else caret)

    def on_text_change(self, new_buffer: str, new_caret: int) -> EditResult:
        """Accept a buffer change made by the host (typing, paste, programmatic)."""
        self._state.buffer = new_buffer
        self._state.caret = clamp_caret(new_buffer, new_caret)

        removed = self._state.mentions.prune(new_buffer)
        for candidate in removed:
            logger.debug("Dropped stale mention %s", candidate.id)

        self._sync_trigger()
        return EditResult(handled=True, caret=self._state.caret)

    def on_caret_move(self, new_caret: int) -> EditResult:
        """Move the caret, snapping out of any token it would land inside."""
        caret = clamp_caret(self._state.buffer, new_caret)
        token = find_enclosing_token(self.tokens(), caret)
        if token is not None:
            caret = token.end
        self._state.caret = caret
        self._sync_trigger()
        return EditResult(handled=True, caret=caret)

    def on_typing_key(self, char: str, caret: int | None = None) -> EditResult:
        """Gate a printable keystroke; typing inside a token is rejected.

        *caret*, when the host forwards one, replaces the stored caret (clamped).
        """
        if caret is not None:
            self._state.caret = clamp_caret(self._state.buffer, caret)
        context = self.classify()
        if context.kind == "inside_token" and context.token is not None:
            logger.debug("Rejected %r inside mention token", char)
            self._state.caret = context.token.end
            self._sync_trigger()
            return EditResult(handled=True, caret=context.token.end)
        return EditResult(handled=False)

    def on_delete_key(
        self,
        direction: DeleteDirection,
        caret: int | None = None,
    ) -> EditResult:
        """Backspace/Delete: whole-token deletion where the caret touches a token."""
        if caret is not None:
            self._state.caret = clamp_caret(self._state.buffer, caret)
        tokens = self.tokens()
        context = classify(self._state, tokens)
        caret = self._state.caret
        logger.debug("Delete %s at %d (%s)", direction, caret, context.kind)

        if context.kind == "inside_token" and context.token is not None:
            return self._remove_span(context.token.start, context.token.end)

        if direction == "backward":
            if context.kind == "at_token_boundary" and context.token is not None:
                return self._remove_span(context.token.start, context.token.end)

            # A token followed by its own trailing space goes in one keystroke
            if caret > 0 and self._state.buffer[caret - 1] in " \t":
                token = find_token_ending_at(tokens, caret - 1)
                if token is not None:
                    return self._remove_span(token.start, caret)

            floor = last_token_end_before(tokens, caret)
            run = match_mention_shaped_run(self._state.buffer[:caret], floor)
            if run is not None:
                return self._remove_span(run[0], caret)
        else:
            token = find_token_starting_at(tokens, caret)
            if token is not None:
                return self._remove_span(token.start, token.end)

        return EditResult(handled=False)

    def insert_mention(self, candidate: Candidate) -> EditResult:
        """Replace the partial query with ``"@" + name + " "`` and commit it.

        With an active trigger the query is replaced from its ``@`` anchor.
        Without one, a best-effort ``@query`` suffix before the caret is
        replaced; text belonging to committed tokens is never touched.
        """
        buffer = self._state.buffer
        caret = self._state.caret

        if self._state.trigger is not None:
            start = self._state.trigger.anchor_offset
        else:
            floor = last_token_end_before(self.tokens(), caret)
            start = strip_partial_query(buffer[:caret], floor)

        inserted = f"{candidate.token_text} "
        before = buffer[:start]
        self._state.buffer = before + inserted + buffer[caret:]
        self._state.caret = len(before) + len(inserted)

        self._state.mentions.add(candidate)
        logger.info("%s | %s was mentioned", candidate.id, candidate.display_name)

        self._state.mentions.prune(self._state.buffer)
        if candidate.id not in self._state.mentions:
            # An earlier mention's token claims the start of this one
            logger.warning(
                "Mention %s | %s is shadowed by an earlier mention and was dropped",
                candidate.id,
                candidate.display_name,
            )
        self._state.trigger = None
        self._close_dropdown()
        return EditResult(handled=True, caret=self._state.caret)

    # --- Dropdown ---

    def open_picker(self) -> None:
        """Show every not-yet-mentioned candidate without a trigger."""
        self._picker_open = True
        self._navigation.open(self._filtered(""))

    def close_dropdown(self) -> None:
        """Dismiss the dropdown; the trigger stays dismissed until the next edit."""
        self._state.trigger = None
        self._close_dropdown()

    def move_highlight(self, delta: int) -> None:
        self._navigation.move_highlight(delta)

    def set_highlight(self, index: int) -> None:
        self._navigation.set_highlight(index)

    def select(self, index: int | None = None) -> EditResult:
        """Insert the highlighted entry, or the entry at *index*."""
        if not self._navigation.is_open:
            return EditResult(handled=False)
        candidate = (
            self._navigation.highlighted()
            if index is None
            else self._navigation.item_at(index)
        )
        if candidate is None:
            return EditResult(handled=False)
        return self.insert_mention(candidate)

    # --- Submission ---

    def can_submit(self) -> bool:
        return bool(self._state.buffer.strip())

    def submit(self) -> NotePayload | None:
        """Produce the note payload and reset; None when the buffer is blank."""
        if not self.can_submit():
            return None

        self._state.mentions.prune(self._state.buffer)
        payload = NotePayload(
            text=self._state.buffer.strip(),
            mentions=self._state.mentions.to_refs(),
        )
        logger.info("NOTE_SUBMITTED: %s", payload.model_dump_json(by_alias=True))
        self.reset()
        return payload

    def reset(self) -> None:
        self._state = EditorState()
        self._close_dropdown()

    # --- Internals ---

    def _remove_span(self, start: int, end: int) -> EditResult:
        buffer = self._state.buffer
        before = buffer[:start]
        after = buffer[end:]
        if before.endswith(" ") and after.startswith(" "):
            after = after[1:]

        self._state.buffer = before + after
        self._state.caret = start

        for candidate in self._state.mentions.prune(self._state.buffer):
            logger.debug("Removed mention %s with its last token", candidate.id)

        self._sync_trigger()
        return EditResult(handled=True, caret=start)

    def _sync_trigger(self) -> None:
        tokens = self.tokens()
        if find_token_ending_at(tokens, self._state.caret) is not None:
            trigger = None
        else:
            trigger = detect(self._state.buffer, self._state.caret, tokens)
        self._state.trigger = trigger
        self._picker_open = False
        if trigger is None:
            self._navigation.close()
        else:
            self._navigation.open(self._filtered(trigger.query))

    def _close_dropdown(self) -> None:
        self._picker_open = False
        self._navigation.close()
