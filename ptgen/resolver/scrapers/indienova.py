"""
Indienova game page scraper.
"""
from __future__ import annotations

import re

from ..models import Fields, RawPage
from ..parsing import attr_of, page_parser, text_of, texts
from .base import ScrapeContext, SiteScraper, join_lines

GAME_URL = "https://indienova.com/game/{sid}"


class IndienovaScraper(SiteScraper):
    name = "indienova"
    pattern = re.compile(r"(?:https?://)?indienova\.com/game/(\S+)")
    not_found_marker = "出现错误"

    async def load(self, sid: str, ctx: ScrapeContext) -> RawPage:
        return await ctx.fetcher.fetch(GAME_URL.format(sid=sid))

    def extract(self, page: RawPage, sid: str) -> Fields:
        soup = page_parser(page.text)
        title = text_of(soup.title)
        return {
            "indienova_link": GAME_URL.format(sid=sid),
            "poster": attr_of(soup.select_one("div.cover-image img"), "src") or None,
            "chinese_title": title.split("|")[0].split("-")[0].strip(),
            "another_title": text_of(soup.select_one("div.title-holder h1 small")),
            "intro": text_of(soup.select_one("#tabs-intro div.indienova-intro, #tabs-intro p")),
            "tags": texts(soup, "div.indienova-tags a"),
        }

    def format(self, fields: Fields) -> str:
        lines = [
            f"[img]{fields['poster']}[/img]\n\n" if fields.get("poster") else "",
            f"中文名称：{fields['chinese_title']}\n" if fields.get("chinese_title") else "",
            f"英文名称：{fields['another_title']}\n" if fields.get("another_title") else "",
            f"标签：{' | '.join(fields['tags'])}\n" if fields.get("tags") else "",
            f"游戏链接：{fields['indienova_link']}\n" if fields.get("indienova_link") else "",
            f"\n【游戏简介】\n\n{fields['intro']}\n" if fields.get("intro") else "",
        ]
        return join_lines(lines)
