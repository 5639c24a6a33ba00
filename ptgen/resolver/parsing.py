"""HTML and JSON helpers shared by the site scrapers."""
from __future__ import annotations

import json
import re
from typing import Any

from bs4 import BeautifulSoup, NavigableString, Tag

from .errors import ParseFailure
from .models import RawPage

_JSONP_RE = re.compile(r"[^(]+\((.+)\)", re.DOTALL)
_CONTROL_WS_RE = re.compile(r"[\r\n\t]")


def page_parser(text: str) -> BeautifulSoup:
    return BeautifulSoup(text, "lxml")


def jsonp_parser(text: str) -> dict[str, Any]:
    """Decode a ``callback({...})`` body; anything unparsable yields ``{}``."""

    match = _JSONP_RE.match(text.replace("\n", ""))
    if not match:
        return {}
    try:
        data = json.loads(match.group(1))
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def ld_json(soup: BeautifulSoup, *, missing: str, malformed: str, debug: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return the page's ``application/ld+json`` block or raise :class:`ParseFailure`."""

    script = soup.select_one('script[type="application/ld+json"]')
    raw = script.string if script is not None else None
    if not raw:
        raise ParseFailure(missing, debug=debug)
    try:
        data = json.loads(_CONTROL_WS_RE.sub("", raw), strict=False)
    except ValueError as exc:
        info = dict(debug or {})
        info.update({"ld_script_preview": raw[:1000], "parse_error": str(exc)})
        raise ParseFailure(malformed, debug=info) from exc
    if not isinstance(data, dict):
        raise ParseFailure(malformed, debug=debug)
    return data


def text_of(node: Tag | None) -> str:
    return node.get_text().strip() if node is not None else ""


def texts(soup: BeautifulSoup | Tag, selector: str) -> list[str]:
    return [el.get_text().strip() for el in soup.select(selector)]


def attr_of(node: Tag | None, name: str) -> str:
    if node is None:
        return ""
    value = node.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    return (value or "").strip()


def anchor_text(soup: BeautifulSoup, label: str) -> str | None:
    """Text following a ``<span class="pl">label</span>`` in Douban's info box.

    Returns None when the label is absent.
    """

    anchor = soup.select_one(f'#info span.pl:-soup-contains("{label}")')
    if anchor is None:
        return None
    sibling = anchor.next_sibling
    if isinstance(sibling, NavigableString):
        return str(sibling).strip()
    return ""


def json_body(page: RawPage, message: str) -> Any:
    """Decode a JSON response body, raising :class:`ParseFailure` on garbage."""

    try:
        return page.json()
    except ValueError as exc:
        raise ParseFailure(
            message,
            debug={"response_preview": page.text[:2000], "parse_error": str(exc)},
        ) from exc
