"""Site scrapers, one per supported catalog."""

from .bangumi import BangumiScraper
from .base import ScrapeContext, SiteScraper
from .douban import DoubanScraper
from .epic import EpicScraper
from .imdb import IMDbScraper
from .indienova import IndienovaScraper
from .steam import SteamScraper

__all__ = [
    "BangumiScraper",
    "DoubanScraper",
    "EpicScraper",
    "IMDbScraper",
    "IndienovaScraper",
    "ScrapeContext",
    "SiteScraper",
    "SteamScraper",
]
