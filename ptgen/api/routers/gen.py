"""Description generation and search endpoint."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ...resolver import Resolver
from ..dependencies import get_resolver, get_settings
from ..schemas import ResponseEnvelope
from ..settings import PtGenSettings

router = APIRouter(tags=["gen"])

APIKEY_REQUIRED = "apikey required."


@router.get("/", summary="Resolve a subject or run a search")
async def generate(
    url: str | None = Query(default=None, description="Subject page URL on a supported site."),
    site: str | None = Query(default=None),
    sid: str | None = Query(default=None),
    search: str | None = Query(default=None, description="Free-text query; takes precedence over url."),
    source: str | None = Query(default=None),
    apikey: str | None = Query(default=None),
    settings: PtGenSettings = Depends(get_settings),
    resolver: Resolver = Depends(get_resolver),
) -> JSONResponse:
    """Return the resolver record wrapped in the response envelope."""

    if settings.apikey and apikey != settings.apikey:
        return JSONResponse(status_code=403, content={"error": APIKEY_REQUIRED})

    record = await resolver.handle({"url": url, "site": site, "sid": sid, "search": search, "source": source})
    envelope = ResponseEnvelope.wrap(record, author=settings.author)
    return JSONResponse(content=envelope.model_dump())
