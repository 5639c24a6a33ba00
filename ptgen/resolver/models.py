"""Value objects shared by the resolver components."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import httpx

from .errors import MissingIdentifier, ResolverError

Fields = dict[str, Any]


@dataclass(frozen=True, slots=True)
class SubjectReference:
    """A site name paired with the site-specific subject id."""

    site: str
    sid: str

    def __post_init__(self) -> None:
        if not self.site or not self.sid:
            raise MissingIdentifier()

    @property
    def cache_key(self) -> str:
        return f"info-{self.site}-{self.sid}"


@dataclass(slots=True)
class RawPage:
    """One upstream HTTP response as seen by the extractors."""

    url: str
    status_code: int
    text: str
    headers: httpx.Headers = field(default_factory=httpx.Headers)

    def json(self) -> Any:
        return json.loads(self.text)

    def header_values(self, name: str) -> list[str]:
        """Return every value of a repeated header (``set-cookie``)."""

        return self.headers.get_list(name)


@dataclass(frozen=True, slots=True)
class ChallengeState:
    """Parameters lifted from a gate page plus the solving progress."""

    token: str
    challenge: str
    redirect_target: str
    solution: int | None = None
    session_cookie: str | None = None


@dataclass(slots=True)
class ChallengeResult:
    """Outcome of a challenge solve attempt."""

    solved: bool
    text: str = ""
    url: str = ""
    session_cookie: str | None = None
    error: str | None = None


@dataclass(slots=True)
class SearchCandidate:
    """A single search hit."""

    year: str | None
    subtype: str | None
    title: str | None
    link: str
    subtitle: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "subtype": self.subtype,
            "title": self.title,
            "subtitle": self.subtitle,
            "link": self.link,
        }


@dataclass(slots=True)
class NormalizedRecord:
    """Source-agnostic resolution result.

    Build instances through :meth:`resolved` or :meth:`failure` so a successful
    record never carries an error and a failed one never carries a description.
    """

    site: str | None
    sid: str | None
    success: bool
    error: str | None = None
    format: str = ""
    fields: Fields = field(default_factory=dict)

    @classmethod
    def resolved(cls, site: str | None, sid: str | None, format: str, fields: Fields) -> "NormalizedRecord":
        return cls(site=site, sid=sid, success=True, format=format, fields=dict(fields))

    @classmethod
    def failure(
        cls,
        site: str | None,
        sid: str | None,
        error: str,
        *,
        code: str | None = None,
        debug: dict[str, Any] | None = None,
    ) -> "NormalizedRecord":
        extra: Fields = {}
        if code:
            extra["error_code"] = code
        if debug:
            extra["debug_info"] = debug
        return cls(site=site, sid=sid, success=False, error=error, fields=extra)

    @classmethod
    def from_error(cls, site: str | None, sid: str | None, exc: ResolverError) -> "NormalizedRecord":
        return cls.failure(site, sid, exc.message, code=exc.code, debug=exc.debug)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.site is not None:
            payload["site"] = self.site
        if self.sid is not None:
            payload["sid"] = self.sid
        payload.update(self.fields)
        payload["success"] = self.success
        if self.success:
            payload["format"] = self.format
        else:
            payload["error"] = self.error
        return payload
