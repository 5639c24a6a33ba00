"""Application factory for the PT-Gen API."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..resolver import PageFetcher
from ..resolver.cache import CacheFacade
from .routers import gen, health
from .schemas import ResponseEnvelope
from .settings import PtGenSettings
from .state import AppState

logger = logging.getLogger(__name__)


def create_app(
    settings: PtGenSettings | None = None,
    *,
    fetcher: PageFetcher | None = None,
    cache: CacheFacade | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application."""

    resolved_settings = settings or PtGenSettings()
    app_state = AppState(resolved_settings, fetcher=fetcher, cache=cache)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        await app_state.aclose()

    app = FastAPI(title="PT-Gen API", version=__version__, lifespan=lifespan)
    app.state.app_state = app_state
    app.state.settings = app_state.settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def internal_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error while serving %s %s", request.method, request.url)
        envelope = ResponseEnvelope.wrap(
            {
                "success": False,
                "error": f"Internal Error: {exc}",
                "debug": {
                    "message": str(exc),
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    "request": {"method": request.method, "url": str(request.url)},
                },
            },
            author=resolved_settings.author,
        )
        return JSONResponse(status_code=500, content=envelope.model_dump())

    for router in (gen.router, health.router):
        app.include_router(router)

    return app
