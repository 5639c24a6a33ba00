"""
Resolution pipeline: identify, cache lookup, scrape, format, cache store.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from .cache import CacheFacade
from .challenge import DEFAULT_DIFFICULTY, DEFAULT_MAX_ATTEMPTS, ChallengeSolver
from .errors import MissingIdentifier, ResolverError
from .fetcher import PageFetcher
from .models import NormalizedRecord, SubjectReference
from .registry import DEFAULT_SEARCH_SOURCE, get_search_source, get_site, identify
from .scrapers import ScrapeContext

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 86400 * 2
SEARCH_DISABLED_ERROR = "this ptgen disallow search"


class Resolver:
    """Resolves subject references and search queries into record dicts.

    Taxonomy errors end as ``success: false`` records. Anything else, transport
    failures included, propagates to the caller.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        cache: CacheFacade | None = None,
        *,
        info_ttl: int = DEFAULT_CACHE_TTL,
        search_ttl: int = DEFAULT_CACHE_TTL,
        disable_search: bool = False,
        challenge_difficulty: int = DEFAULT_DIFFICULTY,
        challenge_max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self._fetcher = fetcher
        self._cache = cache
        self.info_ttl = info_ttl
        self.search_ttl = search_ttl
        self.disable_search = disable_search
        self._context = ScrapeContext(
            fetcher=fetcher,
            solver=ChallengeSolver(
                fetcher,
                difficulty=challenge_difficulty,
                max_attempts=challenge_max_attempts,
            ),
        )

    # ------------------------------------------------------------------ #
    # Cache helpers
    # ------------------------------------------------------------------ #

    async def _restore(self, key: str) -> dict[str, Any] | None:
        if self._cache is None:
            return None
        raw = await self._cache.get(key)
        if raw is None:
            logger.debug("Cache miss for %s", key)
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Discarding undecodable cache entry %s", key)
            return None
        logger.debug("Cache hit for %s", key)
        return data if isinstance(data, dict) else None

    async def _store(self, key: str, data: dict[str, Any], ttl: int) -> None:
        if self._cache is None or not data.get("success"):
            return
        await self._cache.put(key, json.dumps(data, ensure_ascii=False), ttl)

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    @staticmethod
    def reference_for(url: str | None = None, site: str | None = None, sid: str | None = None) -> SubjectReference:
        if url:
            ref = identify(url)
            if ref is None:
                raise MissingIdentifier()
            return ref
        if not site or not sid:
            raise MissingIdentifier()
        get_site(site)
        return SubjectReference(site=site, sid=sid)

    async def resolve(self, url: str | None = None, site: str | None = None, sid: str | None = None) -> dict[str, Any]:
        try:
            ref = self.reference_for(url, site, sid)
        except ResolverError as exc:
            return NormalizedRecord.from_error(site, sid, exc).to_dict()

        cached = await self._restore(ref.cache_key)
        if cached is not None:
            return cached

        try:
            fields, description = await get_site(ref.site).generate(ref.sid, self._context)
        except ResolverError as exc:
            logger.info("Resolving %s/%s failed: %s", ref.site, ref.sid, exc.message)
            return NormalizedRecord.from_error(ref.site, ref.sid, exc).to_dict()

        data = NormalizedRecord.resolved(ref.site, ref.sid, description, fields).to_dict()
        await self._store(ref.cache_key, data, self.info_ttl)
        return data

    async def search(self, query: str, source: str | None = None) -> dict[str, Any]:
        if self.disable_search:
            return NormalizedRecord.failure(None, None, SEARCH_DISABLED_ERROR).to_dict()

        source = source or DEFAULT_SEARCH_SOURCE
        key = f"search-{source}-{query}"
        try:
            scraper = get_search_source(source)
        except ResolverError as exc:
            return NormalizedRecord.from_error(None, None, exc).to_dict()

        cached = await self._restore(key)
        if cached is not None:
            return cached

        try:
            candidates = await scraper.search(query, self._context)
        except ResolverError as exc:
            logger.info("Search %r on %s failed: %s", query, source, exc.message)
            return NormalizedRecord.from_error(None, None, exc).to_dict()

        data = NormalizedRecord.resolved(None, None, "", {"data": [c.to_dict() for c in candidates]}).to_dict()
        await self._store(key, data, self.search_ttl)
        return data

    async def handle(self, params: Mapping[str, str | None]) -> dict[str, Any]:
        """Dispatch a parsed front-door request (``search`` takes precedence)."""

        if params.get("search"):
            return await self.search(params["search"] or "", params.get("source"))
        return await self.resolve(url=params.get("url"), site=params.get("site"), sid=params.get("sid"))
