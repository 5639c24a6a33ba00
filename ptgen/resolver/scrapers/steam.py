"""
Steam store scraper.
"""
from __future__ import annotations

import re

from ..models import Fields, RawPage
from ..parsing import attr_of, page_parser, text_of, texts
from .base import ScrapeContext, SiteScraper, join_lines

STORE_URL = "https://store.steampowered.com/app/{sid}/"
AGE_CHECK_COOKIES = (
    "lastagecheckage=1-January-1975; birthtime=157737601; "
    "mature_content=1; wants_mature_content=1; Steam_Language=schinese"
)

_CACHE_BUSTER_RE = re.compile(r"\?t=\d+$")


def _strip_cache_buster(url: str) -> str:
    return _CACHE_BUSTER_RE.sub("", url)


class SteamScraper(SiteScraper):
    name = "steam"
    pattern = re.compile(r"(?:https?://)?(?:store\.)?steam(?:powered|community)\.com/app/(\d+)/?")
    blocked_message = "Steam Server ban"

    def is_not_found(self, page: RawPage) -> bool:
        return page.status_code == 302

    def is_blocked(self, page: RawPage) -> bool:
        return page.status_code == 403

    async def load(self, sid: str, ctx: ScrapeContext) -> RawPage:
        return await ctx.fetcher.fetch(
            STORE_URL.format(sid=sid),
            params={"l": "schinese"},
            headers={"Cookie": AGE_CHECK_COOKIES},
            follow_redirects=False,
        )

    def extract(self, page: RawPage, sid: str) -> Fields:
        soup = page_parser(page.text)
        name = text_of(soup.select_one("div.apphub_AppName")) or text_of(soup.select_one("span[itemprop='name']"))
        poster = attr_of(soup.select_one("img.game_header_image_full[src]"), "src")
        description = soup.select_one("div#game_area_description")
        if description is not None:
            heading = description.select_one("h2")
            if heading is not None:
                heading.decompose()

        return {
            "steam_id": sid,
            "steam_link": STORE_URL.format(sid=sid),
            "name": name,
            "poster": _strip_cache_buster(poster) if poster else None,
            "tags": texts(soup, "a.app_tag"),
            "release_date": text_of(soup.select_one("div.release_date > div.date")),
            "developer": texts(soup, "#developers_list > a"),
            "publisher": texts(soup, "div.dev_row:nth-of-type(2) > div.summary > a"),
            "descr": text_of(description),
            "screenshot": [
                _strip_cache_buster(attr_of(a, "href"))
                for a in soup.select("a.highlight_screenshot_link")
                if attr_of(a, "href")
            ],
        }

    def format(self, fields: Fields) -> str:
        lines = [
            f"[img]{fields['poster']}[/img]\n\n" if fields.get("poster") else "",
            f"游戏名称: {fields['name']}\n" if fields.get("name") else "",
            f"Steam页面: {fields['steam_link']}\n" if fields.get("steam_link") else "",
            f"发行日期: {fields['release_date']}\n" if fields.get("release_date") else "",
            f"开发商: {' / '.join(fields['developer'])}\n" if fields.get("developer") else "",
            f"发行商: {' / '.join(fields['publisher'])}\n" if fields.get("publisher") else "",
            f"标签: {' | '.join(fields['tags'])}\n" if fields.get("tags") else "",
            f"\n【游戏简介】\n\n{fields['descr']}\n" if fields.get("descr") else "",
            "\n【游戏截图】\n\n" + "\n".join(f"[img]{s}[/img]" for s in fields["screenshot"]) + "\n"
            if fields.get("screenshot")
            else "",
        ]
        return join_lines(lines)
