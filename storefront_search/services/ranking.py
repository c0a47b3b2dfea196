"""Weighted multi-field relevance ranking over a candidate snapshot."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from storefront_search.models import TAG_TYPES, Candidate, ScoredResult, ScoringContext
from storefront_search.services.scoring import score_text

logger = logging.getLogger(__name__)

MIN_SCORE = 0.2


@dataclass(frozen=True)
class FieldWeights:
    name: float = 10.0
    description: float = 5.0
    slug: float = 5.0
    category: float = 3.0
    tag: float = 3.0
    color: float = 3.0
    size: float = 1.0


@dataclass(frozen=True)
class BoostPolicy:
    featured: float = 1.1
    popular: float = 1.05
    popular_sales_threshold: int = 50
    top_rated: float = 1.03
    rating_threshold: float = 4.5

    def apply(self, score: float, candidate: Candidate) -> float:
        if candidate.is_featured:
            score *= self.featured
        if candidate.sales_count > self.popular_sales_threshold:
            score *= self.popular
        if candidate.avg_rating >= self.rating_threshold:
            score *= self.top_rated
        return score


DEFAULT_WEIGHTS = FieldWeights()
DEFAULT_BOOSTS = BoostPolicy()


def _dehyphenate(slug: str) -> str:
    return slug.replace("-", " ").replace("_", " ")


def candidate_fields(
    candidate: Candidate,
    weights: FieldWeights = DEFAULT_WEIGHTS,
) -> List[Tuple[str, float, List[str]]]:
    """List every scorable field as ``(reason, weight, texts)``."""
    names = [t.name for t in candidate.translations.values() if t.name] or [candidate.slug]
    descriptions = [t.description for t in candidate.translations.values() if t.description]
    category = candidate.category
    fields: List[Tuple[str, float, List[str]]] = [
        ("name", weights.name, names),
        ("description", weights.description, descriptions),
        ("slug", weights.slug, [_dehyphenate(candidate.slug)]),
        (
            "category",
            weights.category,
            [*category.names.values(), _dehyphenate(category.slug)],
        ),
    ]

    tags_by_type: Dict[str, List[str]] = {}
    for tag in candidate.tags:
        texts = tags_by_type.setdefault(tag.type, [])
        texts.extend(tag.labels.values())
        texts.append(_dehyphenate(tag.slug))
    for tag_type in (*TAG_TYPES, *sorted(set(tags_by_type) - set(TAG_TYPES))):
        if tag_type in tags_by_type:
            fields.append((f"tag:{tag_type.lower()}", weights.tag, tags_by_type[tag_type]))

    color_texts: List[str] = []
    for color in candidate.distinct_colors():
        color_texts.append(color.code)
        color_texts.extend(color.labels.values())
    fields.append(("color", weights.color, color_texts))
    fields.append(("size", weights.size, [size.code for size in candidate.distinct_sizes()]))
    return fields


def score_candidate(
    candidate: Candidate,
    context: ScoringContext,
    weights: FieldWeights = DEFAULT_WEIGHTS,
    boosts: BoostPolicy = DEFAULT_BOOSTS,
) -> Tuple[float, List[str]]:
    total = 0.0
    reasons: List[str] = []
    for reason, weight, texts in candidate_fields(candidate, weights):
        best = max((score_text(text, context, weight) for text in texts), default=0.0)
        if best > 0:
            total += best
            reasons.append(reason)
    if total > 0:
        total = boosts.apply(total, candidate)
    return total, reasons


def rank_candidates(
    candidates: Iterable[Candidate],
    context: ScoringContext,
    *,
    locale: str,
    default_locale: str,
    weights: FieldWeights = DEFAULT_WEIGHTS,
    boosts: BoostPolicy = DEFAULT_BOOSTS,
    min_score: float = MIN_SCORE,
    limit: Optional[int] = None,
) -> List[ScoredResult]:
    """Score, filter and order candidates; ties keep their fetch order."""
    scored: List[ScoredResult] = []
    for candidate in candidates:
        try:
            total, reasons = score_candidate(candidate, context, weights, boosts)
            if total < min_score or total <= 0:
                continue
            scored.append(
                ScoredResult.from_candidate(
                    candidate,
                    score=total,
                    match_reasons=reasons,
                    locale=locale,
                    default_locale=default_locale,
                )
            )
        except Exception:  # noqa: BLE001
            logger.exception(
                "candidate_scoring_failed",
                extra={"candidate_id": getattr(candidate, "id", None)},
            )
    ranked = sorted(scored, key=lambda result: result.score, reverse=True)
    return ranked if limit is None else ranked[:limit]


def distinct_names(results: Sequence[ScoredResult], limit: int = 5) -> List[str]:
    """Autocomplete suggestions: distinct result names in rank order."""
    seen: List[str] = []
    for result in results:
        if result.name and result.name not in seen:
            seen.append(result.name)
        if len(seen) >= limit:
            break
    return seen
