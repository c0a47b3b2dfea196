from __future__ import annotations

from typing import Any, Callable, Dict

import pytest

from storefront_search.models import Candidate, candidate_from_mapping

RecordFactory = Callable[..., Dict[str, Any]]


def _record(
    product_id: str,
    name: str = "",
    *,
    locale: str = "EN",
    description: str = "",
    slug: str | None = None,
    category: str = "clothing",
    **extra: Any,
) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        "id": product_id,
        "slug": slug or product_id,
        "category": {"slug": category},
        "translations": (
            [{"locale": locale, "name": name, "description": description}] if name else []
        ),
    }
    record.update(extra)
    return record


@pytest.fixture
def make_record() -> RecordFactory:
    return _record


@pytest.fixture
def make_candidate() -> Callable[..., Candidate]:
    def factory(*args: Any, **kwargs: Any) -> Candidate:
        return candidate_from_mapping(_record(*args, **kwargs))

    return factory
