"""
Epic Games Store scraper (JSON content API).
"""
from __future__ import annotations

import re
from typing import Any

from ..errors import ParseFailure
from ..models import Fields, RawPage
from ..parsing import json_body
from .base import ScrapeContext, SiteScraper, join_lines

CONTENT_URL = "https://store-content.ak.epicgames.com/api/zh-CN/content/products/{sid}"
PRODUCT_URL = "https://www.epicgames.com/store/zh-CN/product/{sid}/home"


def _dig(data: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


class EpicScraper(SiteScraper):
    name = "epic"
    pattern = re.compile(r"(?:https?://)?www\.epicgames\.com/store/[a-zA-Z-]+/product/(\S+)/\S?")

    def is_not_found(self, page: RawPage) -> bool:
        return page.status_code == 404

    async def load(self, sid: str, ctx: ScrapeContext) -> RawPage:
        return await ctx.fetcher.fetch(CONTENT_URL.format(sid=sid))

    def extract(self, page: RawPage, sid: str) -> Fields:
        payload = json_body(page, "Invalid response")
        pages = _dig(payload, "pages")
        if not isinstance(pages, list) or not pages or not isinstance(pages[0], dict):
            raise ParseFailure("Invalid response", debug={"status": page.status_code})
        product = pages[0]
        gallery = _dig(product, "data", "gallery", "galleryImages") or []
        return {
            "name": product.get("productName"),
            "epic_link": PRODUCT_URL.format(sid=sid),
            "desc": _dig(product, "data", "about", "description"),
            "poster": _dig(product, "data", "hero", "logoImage", "src"),
            "screenshot": [img["src"] for img in gallery if isinstance(img, dict) and img.get("src")],
        }

    def format(self, fields: Fields) -> str:
        lines = [
            f"[img]{fields['poster']}[/img]\n\n" if fields.get("poster") else "",
            f"游戏名称：{fields['name']}\n" if fields.get("name") else "",
            f"商店链接：{fields['epic_link']}\n" if fields.get("epic_link") else "",
            f"\n【游戏简介】\n\n{fields['desc']}\n" if fields.get("desc") else "",
            "\n【游戏截图】\n\n" + "\n".join(f"[img]{s}[/img]" for s in fields["screenshot"]) + "\n"
            if fields.get("screenshot")
            else "",
        ]
        return join_lines(lines)
