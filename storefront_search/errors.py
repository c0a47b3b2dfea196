"""Shared error types for the search service."""

from __future__ import annotations


class SearchError(Exception):
    """Base class for search service failures."""


class SourceConfigError(SearchError):
    """Raised when the candidate source is misconfigured."""


class CandidateFetchError(SearchError):
    """Raised when a candidate source returns an unusable payload."""


class RateLimitError(SearchError):
    """Raised when a tool exceeds its request budget for the current window."""
