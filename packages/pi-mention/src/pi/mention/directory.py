"""Candidate directory: fetch-once access to the people who can be mentioned.

The fetch itself is injected as an async callable. ``HttpCandidateFetcher``
is the stock implementation backed by httpx. Any fetch failure falls back to
a static list so the dropdown is never left empty.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pi.mention.types import Candidate

logger = logging.getLogger(__name__)

CandidateFetcher = Callable[[], Awaitable[list[Candidate]]]

FALLBACK_CANDIDATES: list[Candidate] = [
    Candidate(id="1", display_name="Abdulraheem Fareed"),
    Candidate(id="2", display_name="Carole Mutemi"),
    Candidate(id="3", display_name="Carole Wanjiku"),
    Candidate(id="4", display_name="Carole Kim"),
    Candidate(id="5", display_name="Caroline Njeri"),
]


class DirectoryError(Exception):
    """The directory service could not produce a candidate list."""


class DirectoryUser(BaseModel):
    """A user record as served by the directory endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    id: str
    name: str
    email: str = ""
    phone_number: str = Field(default="", alias="phoneNumber")
    role: str = ""
    status: str = ""

    def to_candidate(self) -> Candidate:
        return Candidate(id=self.id, display_name=self.name.strip())


def parse_directory_payload(data: Any) -> list[Candidate]:
    """Turn a ``[{...}]`` or ``{"users": [{...}]}`` payload into candidates.

    Records with a blank name are skipped.
    """
    records = data.get("users") if isinstance(data, dict) else data
    if not isinstance(records, list):
        raise DirectoryError("Directory payload is not a list of users")

    try:
        users = [DirectoryUser.model_validate(record) for record in records]
    except ValidationError as e:
        raise DirectoryError(f"Malformed directory record: {e}") from e

    return [user.to_candidate() for user in users if user.name.strip()]


class HttpCandidateFetcher:
    """Fetch candidates with a single GET against the directory URL."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._headers = headers or {}
        self._transport = transport

    async def __call__(self) -> list[Candidate]:
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            ) as client:
                resp = await client.get(self._url, headers=self._headers)
                resp.raise_for_status()
        except httpx.HTTPError as e:
            raise DirectoryError(f"Directory request failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise DirectoryError("Directory response is not JSON") from e

        return parse_directory_payload(data)


class CandidateDirectory:
    """Candidate source for one modal lifetime.

    ``fetch_once`` runs the fetcher at most once; concurrent and later
    callers share the same result. A failed or empty fetch resolves to the
    fallback list.
    """

    def __init__(
        self,
        fetcher: CandidateFetcher | None = None,
        *,
        initial: list[Candidate] | None = None,
        fallback: list[Candidate] | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._fallback: list[Candidate] = list(fallback) if fallback else list(FALLBACK_CANDIDATES)
        self._candidates: list[Candidate] = list(initial) if initial else list(self._fallback)
        self._task: asyncio.Task[list[Candidate]] | None = None

    @property
    def candidates(self) -> list[Candidate]:
        return list(self._candidates)

    @property
    def fallback(self) -> list[Candidate]:
        return list(self._fallback)

    @property
    def fetch_started(self) -> bool:
        return self._task is not None

    async def fetch_once(self) -> list[Candidate]:
        if self._task is None:
            self._task = asyncio.ensure_future(self._fetch())
        return await self._task

    async def _fetch(self) -> list[Candidate]:
        if self._fetcher is None:
            return list(self._candidates)

        try:
            result = await self._fetcher()
        except Exception as e:
            logger.warning("Candidate directory fetch failed, using fallback list: %s", e)
            result = []

        if not result:
            result = list(self._fallback)

        self._candidates = list(result)
        logger.debug("Candidate directory loaded %d entries", len(result))
        return list(result)
