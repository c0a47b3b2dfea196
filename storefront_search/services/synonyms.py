"""Cross-language synonym expansion backed by the packaged synonym table."""

from __future__ import annotations

from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Mapping, Sequence, Set

import yaml

from storefront_search.errors import SourceConfigError
from storefront_search.services.normalizer import normalize, tokenize


def _flatten_entries(raw: Any) -> Dict[str, List[str]]:
    """Collapse the optional domain grouping (garments, colors, ...) into one mapping."""
    entries: Dict[str, List[str]] = {}
    if not isinstance(raw, Mapping):
        return entries
    for key, value in raw.items():
        if isinstance(value, Mapping):
            entries.update(_flatten_entries(value))
        elif isinstance(value, list):
            entries[str(key)] = [str(item) for item in value]
    return entries


class SynonymExpander:
    """Expands a query into every term sharing a synonym group with one of its words."""

    def __init__(self, table: Mapping[str, Sequence[str]]) -> None:
        self.table = dict(table)
        self._index: Dict[str, List[FrozenSet[str]]] = {}
        for key, synonyms in self.table.items():
            group = frozenset(
                term for term in (normalize(key), *(normalize(s) for s in synonyms)) if term
            )
            for term in group:
                self._index.setdefault(term, []).append(group)

    @classmethod
    def from_yaml(cls, path: Path) -> "SynonymExpander":
        if not path.exists():
            raise SourceConfigError(f"Synonym table not found: {path}")
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        return cls(_flatten_entries(raw))

    @classmethod
    def default(cls) -> "SynonymExpander":
        return _default_expander()

    def __len__(self) -> int:
        return len(self.table)

    def groups_for(self, term: str) -> List[FrozenSet[str]]:
        return list(self._index.get(normalize(term), []))

    def expand(self, query: str) -> FrozenSet[str]:
        normalized = normalize(query)
        expanded: Set[str] = set()
        terms: Set[str] = set(tokenize(normalized))
        if normalized:
            expanded.add(normalized)
            # entries such as "polka dot" or "t-shirt" only match the full phrase
            terms.add(normalized)
        for term in terms:
            for group in self._index.get(term, ()):
                expanded.update(group)
        return frozenset(expanded)


@lru_cache(maxsize=1)
def _default_expander() -> SynonymExpander:
    text = resources.files("storefront_search.data").joinpath("synonyms.yaml").read_text(
        encoding="utf-8"
    )
    return SynonymExpander(_flatten_entries(yaml.safe_load(text) or {}))


def expand_synonyms(query: str) -> FrozenSet[str]:
    return _default_expander().expand(query)
