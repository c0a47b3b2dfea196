"""File-backed candidate source for development and tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence

import yaml

from storefront_search.errors import CandidateFetchError, SourceConfigError
from storefront_search.models import Candidate
from storefront_search.sources.base import CandidateSource


class StaticCandidateSource(CandidateSource):
    """Serves products from a YAML/JSON catalog file or an in-memory list."""

    name = "static"

    def __init__(
        self,
        path: Optional[Path] = None,
        records: Optional[Sequence[Mapping[str, Any]]] = None,
    ) -> None:
        if path is None and records is None:
            raise SourceConfigError("Static source needs a catalog path or records")
        self.path = path
        self._records = records
        self._candidates: Optional[List[Candidate]] = None
        self.fetch_count = 0

    def _load_records(self) -> List[Any]:
        if self._records is not None:
            return list(self._records)
        if self.path is None or not self.path.exists():
            raise SourceConfigError(f"Catalog file not found: {self.path}")
        try:
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8")) or []
        except yaml.YAMLError as exc:
            raise CandidateFetchError(f"Catalog file is not valid YAML/JSON: {self.path}") from exc
        if isinstance(raw, Mapping):
            raw = raw.get("products", [])
        if not isinstance(raw, list):
            raise CandidateFetchError(f"Catalog file must hold a list of products: {self.path}")
        return raw

    async def fetch_candidates(self) -> List[Candidate]:
        self.fetch_count += 1
        if self._candidates is None:
            self._candidates = self._parse_records(self._load_records())
        return list(self._candidates)
