"""Search service: cached, retried candidate fetch feeding the ranking engine."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal, Optional

from storefront_search.config import Settings
from storefront_search.models import Candidate, ScoredResult
from storefront_search.services.cache import SearchCache, build_cache_key
from storefront_search.services.normalizer import normalize
from storefront_search.services.ranking import MIN_SCORE, distinct_names, rank_candidates
from storefront_search.services.retry import call_with_retry
from storefront_search.services.scoring import build_context
from storefront_search.services.simple_scoring import (
    SIMPLE_MIN_SCORE,
    rank_candidates_simple,
    simple_normalize,
)
from storefront_search.services.synonyms import SynonymExpander
from storefront_search.sources.base import CandidateSource

logger = logging.getLogger(__name__)

SearchMode = Literal["smart", "simple"]

MIN_QUERY_LENGTH: Dict[str, int] = {"smart": 1, "simple": 2}
SUGGESTION_COUNT = 5


class SearchService:
    def __init__(
        self,
        source: CandidateSource,
        *,
        cache: Optional[SearchCache[Dict[str, Any]]] = None,
        expander: Optional[SynonymExpander] = None,
        default_locale: str = "EN",
        default_limit: int = 20,
        max_limit: int = 50,
        max_candidates: int = 5000,
        fetch_max_attempts: int = 3,
        fetch_base_delay: float = 0.2,
    ) -> None:
        self.source = source
        self.cache: SearchCache[Dict[str, Any]] = cache if cache is not None else SearchCache()
        self.expander = expander or SynonymExpander.default()
        self.default_locale = default_locale.upper()
        self.default_limit = default_limit
        self.max_limit = max_limit
        self.max_candidates = max_candidates
        self.fetch_max_attempts = fetch_max_attempts
        self.fetch_base_delay = fetch_base_delay

    @classmethod
    def from_settings(cls, source: CandidateSource, settings: Settings) -> "SearchService":
        return cls(
            source,
            cache=SearchCache(
                max_entries=settings.search_cache_max_entries,
                ttl_seconds=settings.search_cache_ttl_seconds,
            ),
            default_locale=settings.default_locale,
            default_limit=settings.search_default_limit,
            max_limit=settings.search_max_limit,
            max_candidates=settings.max_candidates,
            fetch_max_attempts=settings.fetch_max_attempts,
            fetch_base_delay=settings.fetch_base_delay_seconds,
        )

    def clamp_limit(self, limit: Optional[int]) -> int:
        if limit is None:
            limit = self.default_limit
        return max(1, min(int(limit), self.max_limit))

    async def _fetch_candidates(self) -> List[Candidate]:
        candidates = await call_with_retry(
            self.source.fetch_candidates,
            max_attempts=self.fetch_max_attempts,
            base_delay=self.fetch_base_delay,
        )
        if len(candidates) > self.max_candidates:
            logger.warning(
                "Candidate snapshot truncated from %s to %s",
                len(candidates),
                self.max_candidates,
            )
            candidates = candidates[: self.max_candidates]
        return candidates

    def _rank(
        self,
        candidates: List[Candidate],
        query: str,
        locale: str,
        mode: str,
        min_score: Optional[float],
    ) -> List[ScoredResult]:
        if mode == "simple":
            return rank_candidates_simple(
                candidates,
                query,
                locale=locale,
                default_locale=self.default_locale,
                min_score=SIMPLE_MIN_SCORE if min_score is None else min_score,
            )
        context = build_context(query, self.expander)
        return rank_candidates(
            candidates,
            context,
            locale=locale,
            default_locale=self.default_locale,
            min_score=MIN_SCORE,
        )

    async def search(
        self,
        query: str,
        locale: Optional[str] = None,
        limit: Optional[int] = None,
        *,
        mode: str = "smart",
        autocomplete: bool = False,
        min_score: Optional[float] = None,
    ) -> Dict[str, Any]:
        if mode not in MIN_QUERY_LENGTH:
            raise ValueError(f"Unknown search mode '{mode}'")
        query = query or ""
        resolved_locale = (locale or self.default_locale).upper()
        resolved_limit = self.clamp_limit(limit)
        trimmed = query.strip()

        if len(trimmed) < MIN_QUERY_LENGTH[mode]:
            return {
                "success": True,
                "results": [],
                "total": 0,
                "query": query,
                "locale": resolved_locale,
                "mode": mode,
                "message": "Query too short",
            }

        key_query = simple_normalize(trimmed) if mode == "simple" else normalize(trimmed)
        cache_key = build_cache_key(
            key_query,
            resolved_locale,
            resolved_limit,
            mode,
            autocomplete=autocomplete,
            min_score=min_score if mode == "simple" else None,
        )
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info("search cache hit key=%s", cache_key)
            return {**cached, "query": query, "cache": "hit"}

        try:
            candidates = await self._fetch_candidates()
            ranked = self._rank(candidates, trimmed, resolved_locale, mode, min_score)
        except Exception as exc:  # noqa: BLE001
            logger.exception("search_failed", extra={"query": query, "mode": mode})
            return {
                "success": False,
                "error": "Search failed",
                "message": str(exc) or type(exc).__name__,
                "results": [],
                "total": 0,
                "query": query,
                "locale": resolved_locale,
                "mode": mode,
            }

        top = ranked[:resolved_limit]
        payload: Dict[str, Any] = {
            "success": True,
            "results": [result.to_dict() for result in top],
            "total": len(ranked),
            "query": query,
            "locale": resolved_locale,
            "mode": mode,
        }
        if autocomplete:
            payload["suggestions"] = distinct_names(top, SUGGESTION_COUNT)
        self.cache.set(cache_key, payload)
        logger.info(
            "search cache miss key=%s candidates=%s matched=%s returned=%s",
            cache_key,
            len(candidates),
            len(ranked),
            len(top),
        )
        return {**payload, "cache": "miss"}

    def explain_query(self, query: str) -> Dict[str, Any]:
        context = build_context(query, self.expander)
        return {
            "query": context.query,
            "normalized": context.query_normalized,
            "words": list(context.query_words),
            "synonyms": sorted(context.synonyms),
        }

    async def close(self) -> None:
        await self.source.close()
