"""
Common interface implemented by every site scraper.
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar

from ..challenge import ChallengeSolver
from ..errors import NotFoundError, TemporarilyBlockedError, UnsupportedSource
from ..fetcher import PageFetcher
from ..models import Fields, RawPage, SearchCandidate


@dataclass(slots=True)
class ScrapeContext:
    """Collaborators handed to a scraper for one resolution."""

    fetcher: PageFetcher
    solver: ChallengeSolver


class SiteScraper(ABC):
    """Fetch, validate, extract and format one source site.

    Subclasses declare ``name`` and ``pattern`` and implement :meth:`load`,
    :meth:`extract` and :meth:`format`. Not-found and ban detection default to
    substring markers and can be overridden for status based checks.
    """

    name: ClassVar[str]
    pattern: ClassVar[re.Pattern[str]]
    not_found_marker: ClassVar[str | None] = None
    blocked_marker: ClassVar[str | None] = None
    blocked_message: ClassVar[str | None] = None
    searchable: ClassVar[bool] = False

    def identify(self, url: str) -> str | None:
        match = self.pattern.search(url)
        return match.group(1) if match else None

    def is_not_found(self, page: RawPage) -> bool:
        return bool(self.not_found_marker) and self.not_found_marker in page.text

    def is_blocked(self, page: RawPage) -> bool:
        return bool(self.blocked_marker) and self.blocked_marker in page.text

    @abstractmethod
    async def load(self, sid: str, ctx: ScrapeContext) -> RawPage:
        """Fetch the subject page."""

    @abstractmethod
    def extract(self, page: RawPage, sid: str) -> Fields:
        """Pull the normalized field set out of the page."""

    @abstractmethod
    def format(self, fields: Fields) -> str:
        """Render the site-styled description."""

    async def enrich(self, fields: Fields, ctx: ScrapeContext) -> None:
        """Optional follow-up lookups after extraction."""

    async def search(self, query: str, ctx: ScrapeContext) -> list[SearchCandidate]:
        raise UnsupportedSource(f"Unknown source: {self.name}")

    async def generate(self, sid: str, ctx: ScrapeContext) -> tuple[Fields, str]:
        page = await self.load(sid, ctx)
        if self.is_not_found(page):
            raise NotFoundError()
        if self.is_blocked(page):
            raise TemporarilyBlockedError(self.blocked_message)
        fields = self.extract(page, sid)
        await self.enrich(fields, ctx)
        return fields, self.format(fields)


def join_lines(lines: list[str]) -> str:
    """Concatenate template fragments and strip surrounding whitespace."""

    return "".join(lines).strip()
