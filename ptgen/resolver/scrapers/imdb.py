"""
IMDb title scraper.
"""
from __future__ import annotations

import re
from typing import Any

from ..models import Fields, RawPage, SearchCandidate
from ..parsing import json_body, ld_json, page_parser
from .base import ScrapeContext, SiteScraper, join_lines

TITLE_URL = "https://www.imdb.com/title/{imdb_id}/"
SUGGEST_URL = "https://v2.sg.media-imdb.com/suggestion/{initial}/{query}.json"


def normalize_imdb_id(sid: str) -> str:
    """``tt111161`` / ``111161`` -> ``tt0111161``."""

    if sid.startswith("tt"):
        sid = sid[2:]
    return "tt" + sid.zfill(7)


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _people(value: Any) -> list[str]:
    return [p["name"] for p in _as_list(value) if isinstance(p, dict) and p.get("name")]


class IMDbScraper(SiteScraper):
    name = "imdb"
    pattern = re.compile(r"(?:https?://)?(?:www\.)?imdb\.com/title/(tt\d+)/?")
    not_found_marker = "404 Error - IMDb"
    searchable = True

    async def load(self, sid: str, ctx: ScrapeContext) -> RawPage:
        return await ctx.fetcher.fetch(TITLE_URL.format(imdb_id=normalize_imdb_id(sid)))

    def extract(self, page: RawPage, sid: str) -> Fields:
        imdb_id = normalize_imdb_id(sid)
        data = ld_json(
            page_parser(page.text),
            missing="Could not find title data",
            malformed="Failed to parse title data",
            debug={"final_url": page.url, "page_length": len(page.text)},
        )
        published = data.get("datePublished") or ""
        keywords = data.get("keywords") or ""

        fields: Fields = {
            "imdb_id": imdb_id,
            "imdb_link": TITLE_URL.format(imdb_id=imdb_id),
            "name": data.get("name"),
            "genre": _as_list(data.get("genre")),
            "contentRating": data.get("contentRating"),
            "datePublished": published or None,
            "description": data.get("description"),
            "duration": data.get("duration"),
            "poster": data.get("image"),
            "year": published[:4] or None,
            "keywords": [k.strip() for k in keywords.split(",") if k.strip()] if isinstance(keywords, str) else [],
            "directors": _people(data.get("director")),
            "creators": _people([c for c in _as_list(data.get("creator")) if isinstance(c, dict) and c.get("@type") == "Person"]),
            "actors": _people(data.get("actor")),
        }

        rating = data.get("aggregateRating")
        if isinstance(rating, dict):
            fields["imdb_votes"] = rating.get("ratingCount") or 0
            fields["imdb_rating_average"] = rating.get("ratingValue") or 0
            fields["imdb_rating"] = f"{fields['imdb_rating_average']}/10 from {fields['imdb_votes']} users"
        return fields

    def format(self, fields: Fields) -> str:
        lines = [
            f"[img]{fields['poster']}[/img]\n\n" if fields.get("poster") else "",
            f"Title: {fields['name']}\n" if fields.get("name") else "",
            f"Keywords: {', '.join(fields['keywords'])}\n" if fields.get("keywords") else "",
            f"Genres: {', '.join(fields['genre'])}\n" if fields.get("genre") else "",
            f"Date Published: {fields['datePublished']}\n" if fields.get("datePublished") else "",
            f"IMDb Rating: {fields['imdb_rating']}\n" if fields.get("imdb_rating") else "",
            f"IMDb Link: {fields['imdb_link']}\n" if fields.get("imdb_link") else "",
            f"Directors: {' / '.join(fields['directors'])}\n" if fields.get("directors") else "",
            f"Creators: {' / '.join(fields['creators'])}\n" if fields.get("creators") else "",
            f"Actors: {' / '.join(fields['actors'])}\n" if fields.get("actors") else "",
            f"\nIntroduction\n    {fields['description']}\n" if fields.get("description") else "",
        ]
        return join_lines(lines)

    async def search(self, query: str, ctx: ScrapeContext) -> list[SearchCandidate]:
        query = query.lower()
        page = await ctx.fetcher.fetch(SUGGEST_URL.format(initial=query[:1], query=query))
        payload = json_body(page, "Failed to parse search results")
        if not isinstance(payload, dict):
            return []
        return [
            SearchCandidate(
                year=d.get("y"),
                subtype=d.get("q"),
                title=d.get("l"),
                subtitle=d.get("s"),
                link=f"https://www.imdb.com/title/{d['id']}",
            )
            for d in payload.get("d") or []
            if isinstance(d, dict) and str(d.get("id", "")).startswith("tt")
        ]
