"""
Resolver core for PT-Gen.

This package bundles the site scrapers, the Douban challenge solver and the
resolution pipeline that turns a catalog URL into a formatted description.
"""

from .cache import CacheFacade, MemoryCache, RedisCache
from .fetcher import PageFetcher
from .registry import SEARCH_SOURCES, SUPPORTED_SITES, identify
from .service import Resolver

__all__ = [
    "CacheFacade",
    "MemoryCache",
    "PageFetcher",
    "RedisCache",
    "Resolver",
    "SEARCH_SOURCES",
    "SUPPORTED_SITES",
    "identify",
]
