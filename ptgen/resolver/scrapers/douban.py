"""
Douban movie scraper.
"""
from __future__ import annotations

import logging
import re
from typing import Any

from ..challenge import GATE_HOOK
from ..errors import ChallengeParametersMissing, FetchError, ParseFailure
from ..models import Fields, RawPage, SearchCandidate
from ..parsing import anchor_text, json_body, jsonp_parser, ld_json, page_parser, text_of, texts
from .base import ScrapeContext, SiteScraper, join_lines

logger = logging.getLogger(__name__)

SUBJECT_URL = "https://movie.douban.com/subject/{sid}/"
SEARCH_URL = "https://movie.douban.com/j/subject_suggest"
IMDB_RATING_URL = (
    "https://p.media-imdb.com/static-content/documents/v1/title/{imdb_id}"
    "/ratings%3Fjsonp=imdb.rating.run:imdb.api.title.ratings/data.json"
)
NO_INTRODUCTION = "暂无相关剧情介绍"
INTRO_SELECTOR = ", ".join(
    (
        "#link-report-intra > span.all.hidden",
        '#link-report-intra > [property="v:summary"]',
        "#link-report > span.all.hidden",
        '#link-report > [property="v:summary"]',
    )
)

_POSTER_SIZE_RE = re.compile(r"s(_ratio_poster|pic)")
_DATE_RE = re.compile(r"(\d{4})(?:-(\d{1,2}))?(?:-(\d{1,2}))?")
_CAST_JOINER = "\n" + "　" * 4 + "  　"


def release_date_key(value: str) -> tuple[int, int, int]:
    """Sort key for entries like ``1994-09-10(多伦多电影节)``; undated entries sort last."""

    match = _DATE_RE.match(value)
    if not match:
        return (9999, 99, 99)
    year, month, day = match.groups()
    return (int(year), int(month or 0), int(day or 0))


def sort_aka(raw: str) -> str:
    return "/".join(sorted(raw.split(" / ")))


def _split_slash(value: str | None) -> list[str]:
    return value.split(" / ") if value else []


def _names(people: Any) -> list[str]:
    if isinstance(people, dict):
        people = [people]
    if not isinstance(people, list):
        return []
    return [p.get("name", "") for p in people if isinstance(p, dict)]


class DoubanScraper(SiteScraper):
    name = "douban"
    pattern = re.compile(r"(?:https?://)?(?:(?:movie|www)\.)?douban\.com/(?:subject|movie)/(\d+)/?")
    not_found_marker = "你想访问的页面不存在"
    blocked_marker = "检测到有异常请求"
    blocked_message = "GenHelp was temporary banned by Douban"
    searchable = True

    async def _pass_gate(self, page: RawPage, ctx: ScrapeContext, link: str | None = None) -> RawPage:
        result = await ctx.solver.solve(page)
        if result.error:
            raise ChallengeParametersMissing(debug={"final_url": page.url})
        if not result.solved:
            return page

        landed = result.url.split("?", 1)[0].rstrip("/")
        if link and result.session_cookie and landed != link.rstrip("/"):
            logger.info("Challenge redirected to %s, re-fetching %s with session cookie", result.url, link)
            return await ctx.fetcher.fetch(link, headers={"Cookie": result.session_cookie})
        return RawPage(url=result.url or page.url, status_code=200, text=result.text)

    async def load(self, sid: str, ctx: ScrapeContext) -> RawPage:
        link = SUBJECT_URL.format(sid=sid)
        logger.info("Fetching douban subject %s", sid)
        page = await ctx.fetcher.fetch(link)
        return await self._pass_gate(page, ctx, link)

    def extract(self, page: RawPage, sid: str) -> Fields:
        text = page.text
        soup = page_parser(text)
        douban_link = SUBJECT_URL.format(sid=sid)
        title = text_of(soup.title).replace("(豆瓣)", "").strip()

        data = ld_json(
            soup,
            missing="Could not find movie data",
            malformed="Failed to parse movie data",
            debug={
                "final_url": page.url,
                "title": title,
                "has_challenge": GATE_HOOK in text,
                "page_length": len(text),
                "page_preview": text[:2000],
            },
        )

        imdb_id = anchor_text(soup, "IMDb")
        imdb_link = f"https://www.imdb.com/title/{imdb_id}/" if imdb_id else None

        chinese_title = title
        foreign_title = text_of(soup.select_one('span[property="v:itemreviewed"]'))
        if chinese_title:
            foreign_title = foreign_title.replace(chinese_title, "")
        foreign_title = foreign_title.strip()

        aka_raw = anchor_text(soup, "又名")
        aka = sort_aka(aka_raw) if aka_raw else ""

        if foreign_title:
            trans_title = chinese_title + (f"/{aka}" if aka else "")
            this_title = foreign_title
        else:
            trans_title = aka
            this_title = chinese_title

        year = text_of(soup.select_one("#content > h1 > span.year"))[1:5]
        runtime = anchor_text(soup, "单集片长")
        if runtime is None:
            runtime = text_of(soup.select_one("#info span[property='v:runtime']"))

        intro_nodes = soup.select(INTRO_SELECTOR)
        if intro_nodes:
            raw_intro = "".join(node.get_text() for node in intro_nodes)
            introduction = "\n".join(line.strip() for line in raw_intro.split("\n") if line.strip())
        else:
            introduction = NO_INTRODUCTION

        rating = data.get("aggregateRating") or {}
        average = rating.get("ratingValue") or 0
        votes = rating.get("ratingCount") or 0

        image = data.get("image") or ""
        poster = _POSTER_SIZE_RE.sub(r"l\1", image).replace("img3", "img1") if isinstance(image, str) else ""

        return {
            "douban_link": douban_link,
            "chinese_title": chinese_title,
            "foreign_title": foreign_title,
            "aka": aka.split("/") if aka else [],
            "trans_title": trans_title.split("/"),
            "this_title": this_title.split("/"),
            "year": year,
            "region": _split_slash(anchor_text(soup, "制片国家/地区")),
            "genre": texts(soup, "#info span[property='v:genre']"),
            "language": _split_slash(anchor_text(soup, "语言")),
            "playdate": sorted(texts(soup, "#info span[property='v:initialReleaseDate']"), key=release_date_key),
            "episodes": anchor_text(soup, "集数") or "",
            "duration": runtime,
            "introduction": introduction,
            "douban_rating_average": average,
            "douban_votes": votes,
            "douban_rating": f"{average}/10 from {votes} users",
            "poster": poster,
            "director": data.get("director") or [],
            "writer": data.get("author") or [],
            "cast": data.get("actor") or [],
            "tags": texts(soup, 'div.tags-body > a[href^="/tag"]'),
            "imdb_id": imdb_id,
            "imdb_link": imdb_link,
        }

    async def enrich(self, fields: Fields, ctx: ScrapeContext) -> None:
        imdb_id = fields.get("imdb_id")
        if not imdb_id:
            return
        try:
            page = await ctx.fetcher.fetch(IMDB_RATING_URL.format(imdb_id=imdb_id))
        except FetchError as exc:
            logger.warning("IMDb rating lookup for %s failed: %s", imdb_id, exc)
            return
        resource = jsonp_parser(page.text).get("resource") or {}
        average = resource.get("rating")
        if not average:
            return
        votes = resource.get("ratingCount") or 0
        fields["imdb_rating_average"] = average
        fields["imdb_votes"] = votes
        fields["imdb_rating"] = f"{average}/10 from {votes} users"

    def format(self, fields: Fields) -> str:
        trans_title = "/".join(fields.get("trans_title") or [])
        this_title = "/".join(fields.get("this_title") or [])
        region = fields.get("region") or []
        genre = fields.get("genre") or []
        language = fields.get("language") or []
        playdate = fields.get("playdate") or []
        director = _names(fields.get("director"))
        writer = _names(fields.get("writer"))
        cast = _names(fields.get("cast"))
        tags = fields.get("tags") or []
        introduction = fields.get("introduction") or ""

        lines = [
            f"[img]{fields['poster']}[/img]\n\n" if fields.get("poster") else "",
            f"◎译　　名　{trans_title}\n" if trans_title else "",
            f"◎片　　名　{this_title}\n" if this_title else "",
            f"◎年　　代　{fields['year'].strip()}\n" if (fields.get("year") or "").strip() else "",
            f"◎产　　地　{' / '.join(region)}\n" if region else "",
            f"◎类　　别　{' / '.join(genre)}\n" if genre else "",
            f"◎语　　言　{' / '.join(language)}\n" if language else "",
            f"◎上映日期　{' / '.join(playdate)}\n" if playdate else "",
            f"◎IMDb评分  {fields['imdb_rating']}\n" if fields.get("imdb_rating") else "",
            f"◎IMDb链接  {fields['imdb_link']}\n" if fields.get("imdb_link") else "",
            f"◎豆瓣评分　{fields['douban_rating']}\n" if fields.get("douban_rating") else "",
            f"◎豆瓣链接　{fields['douban_link']}\n" if fields.get("douban_link") else "",
            f"◎集　　数　{fields['episodes']}\n" if fields.get("episodes") else "",
            f"◎片　　长　{fields['duration']}\n" if fields.get("duration") else "",
            f"◎导　　演　{' / '.join(director)}\n" if director else "",
            f"◎编　　剧　{' / '.join(writer)}\n" if writer else "",
            f"◎主　　演　{_CAST_JOINER.join(cast).strip()}\n" if cast else "",
            f"\n◎标　　签　{' | '.join(tags)}\n" if tags else "",
            f"\n◎简　　介\n\n　　{introduction.replace(chr(10), chr(10) + '　' * 2)}\n" if introduction else "",
        ]
        return join_lines(lines)

    async def search(self, query: str, ctx: ScrapeContext) -> list[SearchCandidate]:
        page = await ctx.fetcher.fetch(SEARCH_URL, params={"q": query})
        page = await self._pass_gate(page, ctx)
        data = json_body(page, "Failed to parse search results")
        if not isinstance(data, list):
            raise ParseFailure("Failed to parse search results", debug={"response_preview": page.text[:2000]})
        return [
            SearchCandidate(
                year=d.get("year"),
                subtype=d.get("type"),
                title=d.get("title"),
                subtitle=d.get("sub_title"),
                link=SUBJECT_URL.format(sid=d.get("id")),
            )
            for d in data
            if isinstance(d, dict)
        ]
