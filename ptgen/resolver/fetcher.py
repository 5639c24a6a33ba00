"""Async page fetcher shared by every site scraper."""
from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from .errors import FetchError
from .models import RawPage

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"


class PageFetcher:
    """Thin wrapper over :class:`httpx.AsyncClient` returning :class:`RawPage` objects.

    Error statuses are passed through as data. Only transport level failures
    raise, as :class:`FetchError`.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
        proxy: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.user_agent = user_agent
        self._owns_client = client is None
        if client is None:
            kwargs: dict[str, Any] = {"timeout": timeout, "headers": {"User-Agent": user_agent}}
            if transport is not None:
                kwargs["transport"] = transport
            elif proxy:
                kwargs["proxy"] = proxy
            client = httpx.AsyncClient(**kwargs)
        self._client = client

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
        data: Mapping[str, str] | None = None,
        follow_redirects: bool = True,
    ) -> RawPage:
        logger.debug("%s %s", method, url)
        try:
            response = await self._client.request(
                method,
                url,
                headers=dict(headers) if headers else None,
                params=dict(params) if params else None,
                data=dict(data) if data else None,
                follow_redirects=follow_redirects,
            )
        except httpx.HTTPError as exc:
            logger.warning("Request to %s failed: %s", url, exc)
            raise FetchError(url, str(exc) or exc.__class__.__name__) from exc

        logger.debug("%s %s -> %s (%d bytes)", method, url, response.status_code, len(response.content))
        return RawPage(
            url=str(response.url),
            status_code=response.status_code,
            text=response.text,
            headers=response.headers,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "PageFetcher":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
