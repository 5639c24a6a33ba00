"""Pydantic models exposed by the PT-Gen API."""
from __future__ import annotations

import time
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .. import __version__


class ResponseEnvelope(BaseModel):
    """JSON envelope wrapped around every resolver record."""

    model_config = ConfigDict(extra="allow")

    success: bool = Field(default=False)
    error: str | None = Field(default=None)
    format: str = Field(default="", description="Rendered BBCode description.")
    copyright: str = Field(default="", description="Attribution line.")
    version: str = Field(default=__version__)
    generate_at: int = Field(default=0, description="Generation time in epoch milliseconds.")

    @classmethod
    def wrap(cls, record: dict[str, Any], *, author: str) -> "ResponseEnvelope":
        body = dict(record)
        body.update(copyright=f"Powered by @{author}", version=__version__, generate_at=int(time.time() * 1000))
        return cls.model_validate(body)


class HealthStatus(BaseModel):
    """Service health payload."""

    status: Literal["ok"] = Field(default="ok")
    version: str = Field(default=__version__, description="Semantic version of the API service.")
    cache: Literal["memory", "redis", "disabled"] = Field(default="memory")
