"""Tests for URL identification and site lookup."""
from __future__ import annotations

import pytest

from ptgen.resolver import SEARCH_SOURCES, SUPPORTED_SITES, identify
from ptgen.resolver.errors import MissingIdentifier, UnsupportedSource
from ptgen.resolver.models import SubjectReference
from ptgen.resolver.registry import get_search_source, get_site


@pytest.mark.parametrize(
    ("url", "site", "sid"),
    [
        ("https://movie.douban.com/subject/1292052/", "douban", "1292052"),
        ("https://www.douban.com/movie/1292052", "douban", "1292052"),
        ("https://www.imdb.com/title/tt0111161/", "imdb", "tt0111161"),
        ("https://bgm.tv/subject/253", "bangumi", "253"),
        ("https://bangumi.tv/subject/253/", "bangumi", "253"),
        ("https://store.steampowered.com/app/620/Portal_2/", "steam", "620"),
        ("https://indienova.com/game/eastward", "indienova", "eastward"),
        ("https://www.epicgames.com/store/zh-CN/product/control/home", "epic", "control"),
    ],
)
def test_identify_supported_urls(url: str, site: str, sid: str) -> None:
    assert identify(url) == SubjectReference(site=site, sid=sid)


def test_identify_unknown_url_returns_none() -> None:
    assert identify("https://example.com/subject/1") is None


def test_site_order_and_search_sources() -> None:
    assert SUPPORTED_SITES == ("douban", "imdb", "bangumi", "steam", "indienova", "epic")
    assert SEARCH_SOURCES == ("douban", "imdb", "bangumi")


def test_subject_reference_requires_both_parts() -> None:
    with pytest.raises(MissingIdentifier):
        SubjectReference(site="douban", sid="")

    assert SubjectReference(site="douban", sid="1").cache_key == "info-douban-1"


def test_unknown_site_and_source_lookups() -> None:
    with pytest.raises(UnsupportedSource) as excinfo:
        get_site("netflix")
    assert excinfo.value.message == "Unknown site: netflix"

    with pytest.raises(UnsupportedSource) as excinfo:
        get_search_source("steam")
    assert excinfo.value.message == "Unknown source: steam"
