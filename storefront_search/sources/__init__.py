"""Candidate source selection."""

from __future__ import annotations

from storefront_search.config import Settings
from storefront_search.errors import SourceConfigError
from storefront_search.sources.base import CandidateSource
from storefront_search.sources.postgres import PostgresCandidateSource
from storefront_search.sources.rest import RestCandidateSource
from storefront_search.sources.static import StaticCandidateSource


def build_candidate_source(settings: Settings) -> CandidateSource:
    if settings.candidate_source == "postgres":
        return PostgresCandidateSource(settings.database_url)
    if settings.candidate_source == "rest":
        if not settings.catalog_api_url:
            raise SourceConfigError("CATALOG_API_URL is required for the rest candidate source")
        return RestCandidateSource(settings.catalog_api_url, api_key=settings.catalog_api_key)
    return StaticCandidateSource(path=settings.catalog_path)


__all__ = [
    "CandidateSource",
    "PostgresCandidateSource",
    "RestCandidateSource",
    "StaticCandidateSource",
    "build_candidate_source",
]
