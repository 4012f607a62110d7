"""Note session: one modal lifetime of the mention editor.

A session owns the editor, the candidate directory and the submission sink.
It starts the fetch-once directory load, feeds late results into the editor
and resets everything on submit or close.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from pi.mention.directory import CandidateDirectory, HttpCandidateFetcher
from pi.mention.editor import MentionEditor
from pi.mention.keybindings import MentionKeybindingsManager
from pi.mention.settings import SettingsManager
from pi.mention.types import Candidate, NotePayload

logger = logging.getLogger(__name__)

SubmitSink = Callable[[NotePayload], None]


class NoteSession:
    def __init__(
        self,
        directory: CandidateDirectory | None = None,
        *,
        on_submit: SubmitSink | None = None,
        max_visible: int = 5,
        keybindings: MentionKeybindingsManager | None = None,
    ) -> None:
        self._directory = directory or CandidateDirectory()
        self._editor = MentionEditor(self._directory.candidates, max_visible=max_visible)
        self._keybindings = keybindings
        self.on_submit = on_submit
        self._open = True
        self._load_task: asyncio.Task[None] | None = None

    @classmethod
    def from_settings(
        cls,
        settings: SettingsManager,
        *,
        on_submit: SubmitSink | None = None,
        initial: list[Candidate] | None = None,
    ) -> NoteSession:
        """Build a session whose directory, fallback, dropdown size and keys come from settings."""
        url = settings.get_directory_url()
        fetcher = (
            HttpCandidateFetcher(url, timeout=settings.get_fetch_timeout())
            if url
            else None
        )
        directory = CandidateDirectory(
            fetcher,
            initial=initial,
            fallback=settings.get_fallback_candidates(),
        )
        return cls(
            directory,
            on_submit=on_submit,
            max_visible=settings.get_autocomplete_max_visible(),
            keybindings=MentionKeybindingsManager(settings.get_keybindings()),
        )

    @property
    def editor(self) -> MentionEditor:
        return self._editor

    @property
    def keybindings(self) -> MentionKeybindingsManager | None:
        return self._keybindings

    @property
    def directory(self) -> CandidateDirectory:
        return self._directory

    @property
    def is_open(self) -> bool:
        return self._open

    def start(self) -> asyncio.Task[None]:
        """Schedule the directory load on the running loop; safe to call twice."""
        if self._load_task is None:
            self._load_task = asyncio.ensure_future(self.load_candidates())
        return self._load_task

    async def load_candidates(self) -> None:
        candidates = await self._directory.fetch_once()
        self.deliver_candidates(candidates)

    def deliver_candidates(self, candidates: list[Candidate]) -> bool:
        """Hand a (possibly late) candidate list to the editor.

        Returns True when the visible dropdown was refreshed. Deliveries after
        ``close`` are dropped.
        """
        if not self._open:
            logger.debug("Dropped %d candidates delivered after close", len(candidates))
            return False
        refreshed = self._editor.set_candidates(candidates)
        if refreshed:
            logger.debug("Refreshed open dropdown with %d late candidates", len(candidates))
        return refreshed

    def submit(self) -> NotePayload | None:
        """Submit the note to the sink; a blank buffer is refused."""
        if not self._open:
            return None
        payload = self._editor.submit()
        if payload is None:
            return None
        self._editor.set_candidates(self._directory.candidates)
        if self.on_submit is not None:
            self.on_submit(payload)
        return payload

    def close(self) -> None:
        self._open = False
        self._editor.reset()
