"""Lightweight word-overlap scorer behind the ``simple`` search mode."""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import Iterable, List

from rapidfuzz.distance import Levenshtein

from storefront_search.models import Candidate, ScoredResult

logger = logging.getLogger(__name__)

SIMPLE_MIN_SCORE = 0.3

_COMBINING_RE = re.compile(r"[\u0300-\u036f]")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_SPACE_RE = re.compile(r"\s+")


def simple_normalize(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = _COMBINING_RE.sub("", decomposed)
    return _SPACE_RE.sub(" ", _NON_ALNUM_RE.sub(" ", stripped)).strip()


def levenshtein_distance(a: str, b: str) -> int:
    return Levenshtein.distance(a, b)


def simple_similarity(query: str, text: str) -> float:
    normalized_query = simple_normalize(query)
    normalized_text = simple_normalize(text)
    if not normalized_query or not normalized_text:
        return 0.0
    if normalized_query in normalized_text:
        return 1.0

    query_words = normalized_query.split(" ")
    text_words = normalized_text.split(" ")
    matched = 0
    fuzzy_matched = 0
    for query_word in query_words:
        if any(query_word in word or word in query_word for word in text_words):
            matched += 1
            continue
        max_distance = 1 if len(query_word) <= 4 else 2
        if any(levenshtein_distance(query_word, word) <= max_distance for word in text_words):
            fuzzy_matched += 1

    exact_score = matched / len(query_words)
    fuzzy_score = fuzzy_matched / len(query_words) * 0.7
    return min(1.0, exact_score + fuzzy_score)


def score_candidate_simple(candidate: Candidate, query: str, locale: str, default_locale: str) -> float:
    total = simple_similarity(query, candidate.display_name(locale, default_locale)) * 10
    total += simple_similarity(query, candidate.display_description(locale, default_locale)) * 5
    total += simple_similarity(query, candidate.category.display_name(locale, default_locale)) * 3

    colors = ", ".join(
        color.display_label(locale, default_locale) for color in candidate.distinct_colors()
    )
    if colors:
        color_score = simple_similarity(query, colors)
        if color_score > 0.5:
            total += color_score * 4

    if candidate.is_featured:
        total *= 1.1
    if candidate.sales_count > 50:
        total *= 1.05
    if candidate.avg_rating >= 4.5:
        total *= 1.05
    return total


def rank_candidates_simple(
    candidates: Iterable[Candidate],
    query: str,
    *,
    locale: str,
    default_locale: str,
    min_score: float = SIMPLE_MIN_SCORE,
) -> List[ScoredResult]:
    scored: List[ScoredResult] = []
    for candidate in candidates:
        try:
            total = score_candidate_simple(candidate, query, locale, default_locale)
            if total < min_score or total <= 0:
                continue
            scored.append(
                ScoredResult.from_candidate(
                    candidate,
                    score=total,
                    match_reasons=["simple"],
                    locale=locale,
                    default_locale=default_locale,
                )
            )
        except Exception:  # noqa: BLE001
            logger.exception(
                "candidate_scoring_failed",
                extra={"candidate_id": getattr(candidate, "id", None)},
            )
    return sorted(scored, key=lambda result: result.score, reverse=True)
