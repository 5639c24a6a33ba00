"""Runtime configuration for the PT-Gen API."""
from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..resolver.challenge import DEFAULT_DIFFICULTY, DEFAULT_MAX_ATTEMPTS
from ..resolver.fetcher import DEFAULT_USER_AGENT
from ..resolver.service import DEFAULT_CACHE_TTL


class PtGenSettings(BaseSettings):
    """Environment-aware settings for the PT-Gen service."""

    apikey: str | None = Field(
        default=None, description="When set, requests must carry a matching ?apikey= value."
    )
    disable_search: bool = Field(default=False, description="Reject every search request.")
    author: str = Field(default="Rhilip", description="Name shown in the copyright line.")
    cache_backend: Literal["memory", "redis", "none"] = Field(
        default="memory", description="Where resolved records are cached."
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Connection URL used when cache_backend is redis.",
    )
    info_cache_ttl: int = Field(default=DEFAULT_CACHE_TTL, description="TTL in seconds for info records.")
    search_cache_ttl: int = Field(default=DEFAULT_CACHE_TTL, description="TTL in seconds for search results.")
    request_timeout: float = Field(default=30.0, description="Outbound request timeout in seconds.")
    proxy_url: str | None = Field(default=None, description="Optional HTTP(S) proxy for outbound requests.")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent sent to source sites.")
    challenge_difficulty: int = Field(
        default=DEFAULT_DIFFICULTY, description="Leading hex zeros required by the Douban proof-of-work."
    )
    challenge_max_attempts: int = Field(
        default=DEFAULT_MAX_ATTEMPTS, description="Nonce attempts before the challenge is abandoned."
    )
    log_level: str = Field(default="INFO", description="Root logging level.")
    host: str = Field(default="0.0.0.0", description="Bind address for the development server.")
    port: int = Field(default=8787, description="Bind port for the development server.")

    model_config = SettingsConfigDict(
        env_prefix="PTGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
    )
