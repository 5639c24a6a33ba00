"""
Bangumi (bgm.tv) subject scraper.
"""
from __future__ import annotations

import re
from urllib.parse import quote

from ..models import Fields, RawPage, SearchCandidate
from ..parsing import attr_of, json_body, page_parser, text_of, texts
from .base import ScrapeContext, SiteScraper, join_lines

SUBJECT_URL = "https://bgm.tv/subject/{sid}"
SEARCH_URL = "http://api.bgm.tv/search/subject/{query}"
SUBJECT_TYPES = {1: "漫画/小说", 2: "动画/二次元番", 3: "音乐", 4: "游戏", 6: "三次元番"}
STAFF_LIMIT = 15

_COVER_SIZE_RE = re.compile(r"/cover/[lcmsg]/")
_DETAIL_LABEL_RE = re.compile(r"^(中文名|话数|放送开始|放送星期|别名|官方网站|播放电视台|其他电视台|Copyright)")


class BangumiScraper(SiteScraper):
    name = "bangumi"
    pattern = re.compile(r"(?:https?://)?(?:bgm\.tv|bangumi\.tv|chii\.in)/subject/(\d+)/?")
    not_found_marker = "呜咕，出错了"
    searchable = True

    async def load(self, sid: str, ctx: ScrapeContext) -> RawPage:
        return await ctx.fetcher.fetch(SUBJECT_URL.format(sid=sid))

    def extract(self, page: RawPage, sid: str) -> Fields:
        soup = page_parser(page.text)
        cover = attr_of(soup.select_one("div#bangumiInfo a.thickbox.cover"), "href")
        poster = "https:" + _COVER_SIZE_RE.sub("/cover/l/", cover) if cover else ""

        infobox = [li.get_text() for li in soup.select("div#bangumiInfo ul#infobox li")]
        staff = [line for line in infobox if not _DETAIL_LABEL_RE.match(line)]

        return {
            "alt": SUBJECT_URL.format(sid=sid),
            "poster": poster,
            "story": text_of(soup.select_one("div#subject_summary")),
            "staff": staff,
            "info": [line for line in infobox if line not in staff],
            "bangumi_votes": text_of(soup.select_one('span[property="v:votes"]')),
            "bangumi_rating_average": text_of(soup.select_one('div.global_score > span[property="v:average"]')),
            "tags": texts(soup, "#subject_detail > div.subject_tag_section > div > a > span"),
        }

    def format(self, fields: Fields) -> str:
        staff = (fields.get("staff") or [])[:STAFF_LIMIT]
        lines = [
            f"[img]{fields['poster']}[/img]\n\n" if fields.get("poster") else "",
            f"[b]Story: [/b]\n\n{fields['story']}\n\n" if fields.get("story") else "",
            f"[b]Staff: [/b]\n\n{chr(10).join(staff)}\n\n" if staff else "",
            f"(来源于 {fields['alt']})\n" if fields.get("alt") else "",
        ]
        return join_lines(lines)

    async def search(self, query: str, ctx: ScrapeContext) -> list[SearchCandidate]:
        page = await ctx.fetcher.fetch(
            SEARCH_URL.format(query=quote(query, safe="")),
            params={"responseGroup": "large"},
        )
        payload = json_body(page, "Failed to parse search results")
        if not isinstance(payload, dict):
            return []
        results = []
        for d in payload.get("list") or []:
            if not isinstance(d, dict):
                continue
            air_date = d.get("air_date") or ""
            results.append(
                SearchCandidate(
                    year=air_date[:4] or None,
                    subtype=SUBJECT_TYPES.get(d.get("type")),
                    title=d.get("name_cn") or d.get("name"),
                    subtitle=d.get("name"),
                    link=d.get("url") or SUBJECT_URL.format(sid=d.get("id")),
                )
            )
        return results
