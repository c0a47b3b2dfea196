"""Tiered text-field scoring.

A field is scored against the query with a fixed precedence; the first tier
that matches wins and its grade is multiplied by the field weight:

1. exact match                      1.0
2. text starts with the query       0.95
3. text contains the query          0.85
4. every query word is a text word  0.9
5. some query words are text words  0.7 + matched_fraction * 0.15
6. prefix overlap between words     0.6 + prefix_fraction * 0.1
7. a synonym occurs in the text     0.65 (substring) / 0.6 (as whole words)
8. trigram similarity above 0.4     similarity * 0.55
9. best fuzzy word match            fuzzy * 0.5

The cheap tiers run first so edit distance is only computed for fields that
nothing else matched.
"""

from __future__ import annotations

from typing import List, Optional

from storefront_search.models import ScoringContext
from storefront_search.services.normalizer import normalize, tokenize
from storefront_search.services.similarity import fuzzy_match, ngram_similarity
from storefront_search.services.synonyms import SynonymExpander

NGRAM_MIN_SIMILARITY = 0.4


def build_context(query: str, expander: Optional[SynonymExpander] = None) -> ScoringContext:
    expander = expander or SynonymExpander.default()
    return ScoringContext(
        query=query,
        query_normalized=normalize(query),
        query_words=tuple(tokenize(query)),
        synonyms=expander.expand(query),
    )


def _is_prefix_pair(query_word: str, text_word: str) -> bool:
    if text_word.startswith(query_word):
        return True
    # a one-letter text word would otherwise prefix almost every query word
    return len(text_word) >= 2 and query_word.startswith(text_word)


def _contains_phrase(words: List[str], phrase: List[str]) -> bool:
    size = len(phrase)
    if not size:
        return False
    return any(words[idx : idx + size] == phrase for idx in range(len(words) - size + 1))


def score_text(text: Optional[str], context: ScoringContext, weight: float = 1.0) -> float:
    if not text or weight <= 0:
        return 0.0
    normalized = normalize(text)
    query = context.query_normalized
    if not normalized or not query:
        return 0.0

    if normalized == query:
        return weight
    if normalized.startswith(query):
        return 0.95 * weight
    if query in normalized:
        return 0.85 * weight

    text_words = tokenize(normalized)
    text_word_set = set(text_words)
    query_words = context.query_words

    if query_words:
        matched = sum(1 for word in query_words if word in text_word_set)
        if matched == len(query_words):
            return 0.9 * weight
        if matched:
            return (0.7 + (matched / len(query_words)) * 0.15) * weight

        prefixed = sum(
            1
            for word in query_words
            if any(_is_prefix_pair(word, text_word) for text_word in text_words)
        )
        if prefixed:
            return (0.6 + (prefixed / len(query_words)) * 0.1) * weight

    for synonym in context.synonyms:
        if synonym in normalized:
            return 0.65 * weight
    for synonym in context.synonyms:
        if _contains_phrase(text_words, tokenize(synonym)):
            return 0.6 * weight

    ngram_score = ngram_similarity(query, normalized)
    if ngram_score > NGRAM_MIN_SIMILARITY:
        return ngram_score * 0.55 * weight

    best_fuzzy = 0.0
    for word in query_words:
        for text_word in text_words:
            best_fuzzy = max(best_fuzzy, fuzzy_match(word, text_word))
            if best_fuzzy >= 1.0:
                break
    if best_fuzzy > 0:
        return best_fuzzy * 0.5 * weight
    return 0.0
