"""Shared state container for the PT-Gen API."""
from __future__ import annotations

from dataclasses import dataclass

from ..resolver import MemoryCache, PageFetcher, RedisCache, Resolver
from ..resolver.cache import CacheFacade
from .settings import PtGenSettings


def create_cache(settings: PtGenSettings) -> CacheFacade | None:
    """Build the cache backend selected by ``cache_backend``."""

    if settings.cache_backend == "redis":
        return RedisCache.from_url(settings.redis_url)
    if settings.cache_backend == "memory":
        return MemoryCache()
    return None


@dataclass(slots=True)
class AppState:
    """Encapsulates the collaborators shared across routers."""

    settings: PtGenSettings
    fetcher: PageFetcher
    cache: CacheFacade | None
    resolver: Resolver

    def __init__(
        self,
        settings: PtGenSettings,
        *,
        fetcher: PageFetcher | None = None,
        cache: CacheFacade | None = None,
    ) -> None:
        self.settings = settings
        self.fetcher = fetcher or PageFetcher(
            timeout=settings.request_timeout,
            user_agent=settings.user_agent,
            proxy=settings.proxy_url,
        )
        self.cache = cache if cache is not None else create_cache(settings)
        self.resolver = Resolver(
            self.fetcher,
            self.cache,
            info_ttl=settings.info_cache_ttl,
            search_ttl=settings.search_cache_ttl,
            disable_search=settings.disable_search,
            challenge_difficulty=settings.challenge_difficulty,
            challenge_max_attempts=settings.challenge_max_attempts,
        )

    @property
    def cache_kind(self) -> str:
        if isinstance(self.cache, RedisCache):
            return "redis"
        if self.cache is None:
            return "disabled"
        return "memory"

    async def aclose(self) -> None:
        """Release outbound HTTP and cache connections."""

        await self.fetcher.aclose()
        if isinstance(self.cache, RedisCache):
            await self.cache.aclose()
