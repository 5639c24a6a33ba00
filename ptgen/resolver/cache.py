"""TTL key-value caches consulted by the resolver."""
from __future__ import annotations

import logging
import time
from typing import Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError

try:  # pragma: no cover - optional dependency for test environments
    import fakeredis
except ModuleNotFoundError:  # pragma: no cover - runtime path without fakeredis
    fakeredis = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


class CacheError(RuntimeError):
    """Raised when a cache backend cannot be constructed."""


class CacheFacade(Protocol):
    """Minimal async get/put interface with per-entry expiry."""

    async def get(self, key: str) -> str | None: ...

    async def put(self, key: str, value: str, ttl_seconds: int) -> None: ...


class MemoryCache:
    """Process-local cache; expired entries are dropped when read."""

    def __init__(self) -> None:
        self._entries: dict[str, tuple[str, float]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _cleanup_expired(self) -> None:
        now = time.time()
        expired = [key for key, (_, expires_at) in self._entries.items() if expires_at <= now]
        for key in expired:
            self._entries.pop(key, None)

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= time.time():
            self._entries.pop(key, None)
            return None
        return value

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        self._cleanup_expired()
        self._entries[key] = (value, time.time() + ttl_seconds)


class RedisCache:
    """Redis-backed cache. Backend errors degrade to misses and skipped writes."""

    def __init__(self, connection: Redis, *, prefix: str = "ptgen:") -> None:
        self._connection = connection
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, **kwargs: str) -> "RedisCache":
        """Instantiate a Redis connection, supporting fakeredis for tests."""

        if url.startswith("fakeredis://"):
            if fakeredis is None:  # pragma: no cover - safety branch
                msg = "fakeredis is required for fakeredis:// URLs"
                raise CacheError(msg)
            return cls(fakeredis.FakeAsyncRedis(decode_responses=True), **kwargs)
        return cls(Redis.from_url(url, decode_responses=True), **kwargs)

    async def get(self, key: str) -> str | None:
        try:
            return await self._connection.get(self._prefix + key)
        except RedisError as exc:
            logger.warning("Cache read for %s failed: %s", key, exc)
            return None

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._connection.set(self._prefix + key, value, ex=ttl_seconds)
        except RedisError as exc:
            logger.warning("Cache write for %s failed: %s", key, exc)

    async def ping(self) -> bool:
        try:
            return bool(await self._connection.ping())
        except RedisError:
            return False

    async def aclose(self) -> None:
        await self._connection.aclose()
