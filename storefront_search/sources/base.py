"""Shared candidate source base types."""

from __future__ import annotations

from abc import ABC, abstractmethod
from http import HTTPStatus
from typing import Any, Iterable, List, Mapping

from storefront_search.errors import CandidateFetchError
from storefront_search.models import Candidate, candidate_from_mapping


class CandidateSource(ABC):
    name = "base"

    @abstractmethod
    async def fetch_candidates(self) -> List[Candidate]:
        """Return every published, active product as a read-only snapshot."""

    async def close(self) -> None:
        return None

    @staticmethod
    def _parse_records(records: Iterable[Any]) -> List[Candidate]:
        candidates: List[Candidate] = []
        for record in records:
            if not isinstance(record, Mapping):
                raise CandidateFetchError(f"Expected a product object, got {type(record).__name__}")
            candidates.append(candidate_from_mapping(record))
        return candidates

    def _raise_for_status(self, status_code: int) -> None:
        if status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
            raise RuntimeError(f"Upstream error ({status_code}) from {self.name}")
