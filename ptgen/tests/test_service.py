"""Tests for the resolution pipeline and cache backends."""
from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from ptgen.resolver import MemoryCache, RedisCache, Resolver
from ptgen.resolver.errors import NONE_EXIST_ERROR, FetchError
from ptgen.resolver.service import SEARCH_DISABLED_ERROR
from ptgen.tests.pages import (
    DOUBAN_GATE,
    DOUBAN_NOT_FOUND,
    DOUBAN_SUBJECT,
    DOUBAN_SUBJECT_URL,
    DOUBAN_SUGGEST,
    UpstreamRouter,
    html,
    json_response,
)


def _resolver(router: UpstreamRouter, cache=None, **kwargs) -> Resolver:
    return Resolver(router.fetcher(), cache, challenge_difficulty=1, **kwargs)


def test_resolve_by_url_returns_success_record_and_caches_it() -> None:
    router = UpstreamRouter({"movie.douban.com/subject/1292052/": html(DOUBAN_SUBJECT)})
    cache = MemoryCache()
    resolver = _resolver(router, cache)

    record = asyncio.run(resolver.resolve(url=DOUBAN_SUBJECT_URL))

    assert record["success"] is True
    assert record["site"] == "douban"
    assert record["sid"] == "1292052"
    assert record["chinese_title"] == "肖申克的救赎"
    assert record["format"].startswith("[img]")
    assert "error" not in record
    assert json.loads(asyncio.run(cache.get("info-douban-1292052"))) == record


def test_cache_hit_skips_all_fetches() -> None:
    router = UpstreamRouter()
    cache = MemoryCache()
    cached = {"site": "douban", "sid": "1292052", "success": True, "format": "cached"}
    asyncio.run(cache.put("info-douban-1292052", json.dumps(cached), 60))

    record = asyncio.run(_resolver(router, cache).resolve(site="douban", sid="1292052"))

    assert record == cached
    assert router.requests == []


def test_not_found_is_reported_and_never_cached() -> None:
    router = UpstreamRouter({"movie.douban.com/subject/1/": html(DOUBAN_NOT_FOUND)})
    cache = MemoryCache()
    resolver = _resolver(router, cache)

    first = asyncio.run(resolver.resolve(site="douban", sid="1"))
    second = asyncio.run(resolver.resolve(site="douban", sid="1"))

    assert first == second
    assert first["success"] is False
    assert first["error"] == NONE_EXIST_ERROR
    assert first["error_code"] == "NotFound"
    assert "format" not in first
    assert len(cache) == 0
    assert len(router.requests) == 2


def test_missing_identifier_and_unknown_site_become_failures() -> None:
    resolver = _resolver(UpstreamRouter())

    missing = asyncio.run(resolver.resolve())
    unsupported_url = asyncio.run(resolver.resolve(url="https://example.com/title/1"))
    unknown_site = asyncio.run(resolver.resolve(site="netflix", sid="1"))

    assert missing["error"] == "Miss key of site or sid, or input unsupported resource url."
    assert unsupported_url["error"] == missing["error"]
    assert unknown_site["error"] == "Unknown site: netflix"
    assert unknown_site["site"] == "netflix"


def test_challenge_failure_becomes_failure_record() -> None:
    router = UpstreamRouter(
        {
            "movie.douban.com/subject/1292052/": html(DOUBAN_GATE),
            "sec.douban.com/c": httpx.Response(200, text="rejected"),
        }
    )

    record = asyncio.run(_resolver(router).resolve(url=DOUBAN_SUBJECT_URL))

    assert record["success"] is False
    assert record["error"] == "No cookies received from challenge submission"
    assert record["error_code"] == "ChallengeSubmissionFailed"


def test_resolve_through_challenge_gate() -> None:
    def _subject(request: httpx.Request) -> httpx.Response:
        if "dbcl2=s1" in request.headers.get("cookie", ""):
            return html(DOUBAN_SUBJECT)
        return html(DOUBAN_GATE)

    router = UpstreamRouter(
        {
            "movie.douban.com/subject/1292052/": _subject,
            "sec.douban.com/c": httpx.Response(
                302,
                headers=[("Location", DOUBAN_SUBJECT_URL), ("Set-Cookie", "dbcl2=s1; Path=/")],
            ),
        }
    )

    record = asyncio.run(_resolver(router).resolve(url=DOUBAN_SUBJECT_URL))

    assert record["success"] is True
    assert record["imdb_id"] == "tt0111161"


def test_transport_errors_propagate() -> None:
    def _boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    router = UpstreamRouter({"movie.douban.com": _boom})

    with pytest.raises(FetchError):
        asyncio.run(_resolver(router).resolve(url=DOUBAN_SUBJECT_URL))


def test_search_returns_candidates_and_caches() -> None:
    router = UpstreamRouter({"movie.douban.com/j/subject_suggest": json_response(DOUBAN_SUGGEST)})
    cache = MemoryCache()
    resolver = _resolver(router, cache)

    first = asyncio.run(resolver.search("肖申克"))
    second = asyncio.run(resolver.search("肖申克", "douban"))

    assert first["success"] is True
    assert first["format"] == ""
    assert first["data"] == [
        {
            "year": "1994",
            "subtype": "movie",
            "title": "肖申克的救赎",
            "subtitle": "The Shawshank Redemption",
            "link": DOUBAN_SUBJECT_URL,
        }
    ]
    assert second == first
    assert len(router.requests) == 1
    assert router.requests[0].url.params["q"] == "肖申克"


def test_search_on_unknown_source() -> None:
    record = asyncio.run(_resolver(UpstreamRouter()).search("portal", "steam"))

    assert record == {"success": False, "error": "Unknown source: steam", "error_code": "UnsupportedSource"}


def test_disabled_search_never_calls_upstream() -> None:
    router = UpstreamRouter()

    record = asyncio.run(_resolver(router, disable_search=True).search("肖申克"))

    assert record["success"] is False
    assert record["error"] == SEARCH_DISABLED_ERROR
    assert router.requests == []


def test_handle_prefers_search_over_url() -> None:
    router = UpstreamRouter({"movie.douban.com/j/subject_suggest": json_response([])})

    record = asyncio.run(_resolver(router).handle({"search": "x", "url": DOUBAN_SUBJECT_URL}))

    assert record == {"data": [], "success": True, "format": ""}
    assert [r.url.path for r in router.requests] == ["/j/subject_suggest"]


def test_memory_cache_expires_entries() -> None:
    cache = MemoryCache()

    asyncio.run(cache.put("k", "v", 0))

    assert asyncio.run(cache.get("k")) is None


def test_redis_cache_round_trip_with_fakeredis() -> None:
    pytest.importorskip("fakeredis")
    cache = RedisCache.from_url("fakeredis://")

    async def _exercise() -> tuple[str | None, str | None, bool]:
        await cache.put("info-douban-1", '{"success": true}', 60)
        return await cache.get("info-douban-1"), await cache.get("info-douban-2"), await cache.ping()

    hit, miss, alive = asyncio.run(_exercise())

    assert hit == '{"success": true}'
    assert miss is None
    assert alive is True
