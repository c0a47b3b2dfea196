"""Character n-gram and edit-distance matchers used as scoring fallbacks."""

from __future__ import annotations

from typing import FrozenSet

from rapidfuzz.distance import OSA

from storefront_search.services.normalizer import normalize


def ngrams(text: str, n: int = 3) -> FrozenSet[str]:
    normalized = normalize(text)
    if not normalized:
        return frozenset()
    if len(normalized) < n:
        return frozenset([normalized])
    return frozenset(normalized[idx : idx + n] for idx in range(len(normalized) - n + 1))


def ngram_similarity(a: str, b: str, n: int = 3) -> float:
    """Dice coefficient over the character n-gram sets of both strings."""
    grams_a = ngrams(a, n)
    grams_b = ngrams(b, n)
    if not grams_a or not grams_b:
        return 0.0
    return 2 * len(grams_a & grams_b) / (len(grams_a) + len(grams_b))


def damerau_levenshtein(a: str, b: str) -> int:
    """Optimal string alignment distance: insert, delete, substitute, adjacent swap."""
    return OSA.distance(a, b)


def max_edit_distance(length: int) -> int:
    if length <= 3:
        return 1
    if length <= 6:
        return 2
    return 3


def fuzzy_match(query: str, target: str) -> float:
    """Score ``target`` against ``query``; distances above the length threshold score 0."""
    q = normalize(query)
    t = normalize(target)
    if not q or not t:
        return 0.0
    if q == t:
        return 1.0
    if t.startswith(q):
        return 0.95
    if q in t:
        return 0.9

    max_len = max(len(q), len(t))
    threshold = max_edit_distance(max_len)
    if abs(len(q) - len(t)) > threshold:
        return 0.0
    distance = damerau_levenshtein(q, t)
    if distance > threshold:
        return 0.0
    return 1 - distance / max_len
