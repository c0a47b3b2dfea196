from __future__ import annotations

import pytest

from storefront_search.services.simple_scoring import (
    levenshtein_distance,
    rank_candidates_simple,
    score_candidate_simple,
    simple_normalize,
    simple_similarity,
)


def test_simple_normalize_strips_accents_and_punctuation() -> None:
    assert simple_normalize("  Robe d'Été! ") == "robe d ete"


def test_levenshtein_distance() -> None:
    assert levenshtein_distance("", "abc") == 3
    assert levenshtein_distance("kitten", "sitting") == 3
    assert levenshtein_distance("ab", "ba") == 2


def test_simple_similarity_grades() -> None:
    assert simple_similarity("dress", "Floral Dress") == 1.0
    assert simple_similarity("drss", "dress") == pytest.approx(0.7)
    assert simple_similarity("red dress", "Floral Dress") == pytest.approx(0.5)
    assert simple_similarity("xyz", "Floral Dress") == 0.0
    assert simple_similarity("", "Floral Dress") == 0.0


def test_simple_score_weights_and_boosts(make_candidate) -> None:
    plain = make_candidate("a", "Floral Dress")
    boosted = make_candidate("b", "Floral Dress", is_featured=True, sales_count=80, avg_rating=4.8)
    assert score_candidate_simple(plain, "dress", "EN", "EN") == pytest.approx(10.0)
    assert score_candidate_simple(boosted, "dress", "EN", "EN") == pytest.approx(10.0 * 1.1 * 1.05 * 1.05)


def test_simple_color_bonus_needs_strong_match(make_candidate) -> None:
    candidate = make_candidate(
        "a",
        "Sweater",
        variants=[{"stock": 1, "color": {"code": "navy", "labels": {"EN": "Navy"}}}],
    )
    assert score_candidate_simple(candidate, "navy", "EN", "EN") == pytest.approx(4.0)


def test_rank_candidates_simple_filters_and_orders(make_candidate) -> None:
    ranked = rank_candidates_simple(
        [
            make_candidate("coat", "Wool Coat"),
            make_candidate("partial", "Summer Dress Collection", description="Cotton"),
            make_candidate("exact", "Dress", is_featured=True),
        ],
        "dress",
        locale="EN",
        default_locale="EN",
    )
    assert [result.id for result in ranked] == ["exact", "partial"]
    assert ranked[0].match_reasons == frozenset({"simple"})
