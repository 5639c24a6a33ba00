"""
Supported sites, in URL matching order.
"""
from __future__ import annotations

from .errors import UnsupportedSource
from .models import SubjectReference
from .scrapers import (
    BangumiScraper,
    DoubanScraper,
    EpicScraper,
    IMDbScraper,
    IndienovaScraper,
    SiteScraper,
    SteamScraper,
)

SITES: tuple[SiteScraper, ...] = (
    DoubanScraper(),
    IMDbScraper(),
    BangumiScraper(),
    SteamScraper(),
    IndienovaScraper(),
    EpicScraper(),
)
SUPPORTED_SITES = tuple(site.name for site in SITES)
SEARCH_SOURCES = tuple(site.name for site in SITES if site.searchable)
DEFAULT_SEARCH_SOURCE = "douban"

_BY_NAME = {site.name: site for site in SITES}


def identify(url: str) -> SubjectReference | None:
    """Match ``url`` against each site pattern; the first match wins."""

    for site in SITES:
        sid = site.identify(url)
        if sid:
            return SubjectReference(site=site.name, sid=sid)
    return None


def get_site(name: str) -> SiteScraper:
    try:
        return _BY_NAME[name]
    except KeyError:
        raise UnsupportedSource(f"Unknown site: {name}") from None


def get_search_source(name: str) -> SiteScraper:
    site = _BY_NAME.get(name)
    if site is None or not site.searchable:
        raise UnsupportedSource(f"Unknown source: {name}")
    return site
