from __future__ import annotations

import pytest

from storefront_search.services.scoring import build_context, score_text


def test_build_context_collects_query_views() -> None:
    context = build_context("  Robe  Été ")
    assert context.query_normalized == "robe ete"
    assert context.query_words == ("robe", "ete")
    assert {"robe ete", "dress", "summer"} <= context.synonyms


def test_exact_prefix_and_contains_tiers() -> None:
    context = build_context("dress")
    assert score_text("Dress", context, 2.0) == pytest.approx(2.0)
    assert score_text("Dress with bow", context, 2.0) == pytest.approx(1.9)
    assert score_text("Floral Dress", context, 2.0) == pytest.approx(1.7)


def test_all_query_words_as_whole_words() -> None:
    context = build_context("dress floral")
    assert score_text("Floral summer dress", context) == pytest.approx(0.9)


def test_some_query_words_as_whole_words() -> None:
    context = build_context("dress red")
    assert score_text("Floral dress", context) == pytest.approx(0.7 + 0.5 * 0.15)


def test_prefix_overlap_between_words() -> None:
    context = build_context("dresses")
    assert score_text("Summer dress", context) == pytest.approx(0.7)


def test_synonym_substring_match() -> None:
    context = build_context("dress")
    assert score_text("Robe Fleurie", context) == pytest.approx(0.65)


def test_multi_word_synonym_matches_as_whole_words() -> None:
    context = build_context("pois")
    assert score_text("Polka-Dot Skirt", context) == pytest.approx(0.6)


def test_single_word_of_a_multi_word_synonym_is_not_a_match() -> None:
    assert score_text("Blue Jeans", build_context("marine"), 10.0) == 0.0
    assert score_text("Polka Skirt", build_context("pois")) == 0.0


def test_ngram_tier_for_near_miss() -> None:
    context = build_context("dresss")
    assert score_text("dresses", context) == pytest.approx(2 * 3 / 9 * 0.55)


def test_typo_scores_through_fuzzy_tier() -> None:
    context = build_context("drss")
    assert score_text("Dress", context) == pytest.approx(0.8 * 0.5)


def test_unrelated_text_scores_zero() -> None:
    context = build_context("xyz123")
    assert score_text("Floral Dress", context, 10.0) == 0.0


def test_missing_text_scores_zero() -> None:
    context = build_context("dress")
    assert score_text("", context) == 0.0
    assert score_text(None, context) == 0.0


def test_tiers_are_monotonic_for_same_weight() -> None:
    context = build_context("dress")
    exact = score_text("dress", context, 3.0)
    prefix = score_text("dress for girls", context, 3.0)
    contains = score_text("summer dress", context, 3.0)
    synonym = score_text("robe longue", context, 3.0)
    fuzzy = score_text("dres", build_context("drss"), 3.0)
    assert exact >= prefix >= contains >= synonym >= fuzzy > 0


@pytest.mark.parametrize(
    "query,text",
    [
        ("dress", "Floral Dress"),
        ("robe", "فستان صيفي"),
        ("drss", "dress"),
        ("cotton pants", "Pantalon en coton"),
        ("xyz", "abc"),
    ],
)
def test_scores_are_bounded_by_weight(query: str, text: str) -> None:
    score = score_text(text, build_context(query), 4.0)
    assert 0.0 <= score <= 4.0
