"""Typed configuration for the search service."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    candidate_source: Literal["static", "postgres", "rest"] = Field(
        default="static", alias="CANDIDATE_SOURCE"
    )
    catalog_path: Path = Field(default=Path("catalog.yaml"), alias="CATALOG_FILE")
    database_url: str | None = Field(default=None, alias="DATABASE_URL")
    catalog_api_url: str | None = Field(default=None, alias="CATALOG_API_URL")
    catalog_api_key: str | None = Field(default=None, alias="CATALOG_API_KEY")
    default_locale: str = Field(default="EN", alias="DEFAULT_LOCALE")
    search_max_limit: int = Field(default=50, alias="SEARCH_MAX_LIMIT")
    search_default_limit: int = Field(default=20, alias="SEARCH_DEFAULT_LIMIT")
    search_cache_ttl_seconds: float = Field(default=30.0, alias="SEARCH_CACHE_TTL_SECONDS")
    search_cache_max_entries: int = Field(default=500, alias="SEARCH_CACHE_MAX_ENTRIES")
    fetch_max_attempts: int = Field(default=3, alias="FETCH_MAX_ATTEMPTS")
    fetch_base_delay_seconds: float = Field(default=0.2, alias="FETCH_BASE_DELAY_SECONDS")
    max_candidates: int = Field(default=5000, alias="SEARCH_MAX_CANDIDATES")
    fastapi_api_key: str | None = Field(default=None, alias="FASTAPI_API_KEY")
    api_key_required: bool = Field(default=False, alias="API_KEY_REQUIRED")
    rate_limit_window_seconds: int = Field(default=60, alias="RATE_LIMIT_WINDOW_SECONDS")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )


settings = Settings()
