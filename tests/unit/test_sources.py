from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest

from storefront_search.config import Settings
from storefront_search.errors import CandidateFetchError, SourceConfigError
from storefront_search.services.retry import is_transient_error
from storefront_search.sources import (
    PostgresCandidateSource,
    RestCandidateSource,
    StaticCandidateSource,
    build_candidate_source,
)


class DummyResponse:
    def __init__(self, status_code: int, body: Any, text: str | None = None):
        self.status_code = status_code
        self._body = body
        self._text = text

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise CandidateFetchError("bad response")

    def json(self) -> Any:
        if self._text is not None:
            raise ValueError("not json")
        return self._body

    @property
    def text(self) -> str:
        return self._text if self._text is not None else str(self._body)


@pytest.mark.asyncio
async def test_static_source_reads_yaml_catalog(tmp_path):
    catalog = tmp_path / "catalog.yaml"
    catalog.write_text(
        """
        products:
          - id: p1
            slug: floral-dress
            translations:
              - {locale: EN, name: Floral Dress}
        """
    )
    source = StaticCandidateSource(path=catalog)
    first = await source.fetch_candidates()
    second = await source.fetch_candidates()
    assert [c.slug for c in first] == ["floral-dress"]
    assert first == second
    assert source.fetch_count == 2


@pytest.mark.asyncio
async def test_static_source_reads_json_list(tmp_path, make_record):
    catalog = tmp_path / "catalog.json"
    catalog.write_text(json.dumps([make_record("p1", "Dress"), make_record("p2", "Coat")]))
    candidates = await StaticCandidateSource(path=catalog).fetch_candidates()
    assert [c.id for c in candidates] == ["p1", "p2"]


@pytest.mark.asyncio
async def test_static_source_errors(tmp_path):
    with pytest.raises(SourceConfigError):
        StaticCandidateSource()
    with pytest.raises(SourceConfigError):
        await StaticCandidateSource(path=tmp_path / "missing.yaml").fetch_candidates()

    broken = tmp_path / "broken.yaml"
    broken.write_text("products: [unclosed")
    with pytest.raises(CandidateFetchError):
        await StaticCandidateSource(path=broken).fetch_candidates()

    with pytest.raises(CandidateFetchError):
        await StaticCandidateSource(records=["not-a-product"]).fetch_candidates()  # type: ignore[list-item]

    unset = StaticCandidateSource(path=tmp_path / "catalog.yaml")
    unset.path = None
    with pytest.raises(SourceConfigError):
        await unset.fetch_candidates()


@pytest.mark.asyncio
async def test_rest_source_sends_api_key_and_parses_products(mocker, make_record):
    source = RestCandidateSource("https://catalog.test/api/", api_key="secret")
    assert source._client.headers["X-API-Key"] == "secret"
    calls: List[Dict[str, Any]] = []

    async def fake_get(url, params=None):
        calls.append({"url": url, "params": params})
        return DummyResponse(200, {"products": [make_record("p1", "Dress")]})

    mocker.patch.object(source._client, "get", fake_get)
    candidates = await source.fetch_candidates()
    await source.close()
    assert [c.id for c in candidates] == ["p1"]
    assert calls[0]["url"] == "https://catalog.test/api/products"
    assert calls[0]["params"]["status"] == "PUBLISHED"


@pytest.mark.asyncio
async def test_rest_source_upstream_failure_is_transient(mocker):
    source = RestCandidateSource("https://catalog.test")

    async def fake_get(url, params=None):
        return DummyResponse(503, {})

    mocker.patch.object(source._client, "get", fake_get)
    with pytest.raises(RuntimeError) as excinfo:
        await source.fetch_candidates()
    await source.close()
    assert is_transient_error(excinfo.value)


@pytest.mark.asyncio
async def test_rest_source_rejects_non_json(mocker):
    source = RestCandidateSource("https://catalog.test")

    async def fake_get(url, params=None):
        return DummyResponse(200, None, text="<html>maintenance</html>")

    mocker.patch.object(source._client, "get", fake_get)
    with pytest.raises(CandidateFetchError, match="non-JSON"):
        await source.fetch_candidates()
    await source.close()


class FakeCursor:
    def __init__(self, rows: List[Dict[str, Any]]):
        self.rows = rows
        self.executed: List[str] = []

    async def __aenter__(self) -> "FakeCursor":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        return None

    async def execute(self, query: str) -> None:
        self.executed.append(query)

    async def fetchall(self) -> List[Dict[str, Any]]:
        return self.rows


class FakeConnection:
    def __init__(self, rows: List[Dict[str, Any]]):
        self._cursor = FakeCursor(rows)
        self.closed = False

    def cursor(self) -> FakeCursor:
        return self._cursor

    async def close(self) -> None:
        self.closed = True


@pytest.mark.asyncio
async def test_postgres_source_parses_rows_and_closes_connection(monkeypatch, make_record):
    connection = FakeConnection([make_record("p1", "Dress", isFeatured=True)])
    connect_kwargs: Dict[str, Any] = {}

    async def fake_connect(url, **kwargs):
        connect_kwargs.update(kwargs, url=url)
        return connection

    monkeypatch.setattr(
        "storefront_search.sources.postgres.psycopg",
        SimpleNamespace(AsyncConnection=SimpleNamespace(connect=fake_connect)),
    )
    source = PostgresCandidateSource("postgresql://user@localhost/shop")
    candidates = await source.fetch_candidates()
    assert [c.id for c in candidates] == ["p1"]
    assert candidates[0].is_featured is True
    assert connection.closed is True
    assert connect_kwargs["autocommit"] is True
    assert '"deletedAt" IS NULL' in connection._cursor.executed[0]


def test_postgres_source_requires_database_url():
    with pytest.raises(SourceConfigError):
        PostgresCandidateSource(None)


def test_build_candidate_source(tmp_path):
    static = build_candidate_source(
        Settings(candidate_source="static", catalog_path=tmp_path / "catalog.yaml")
    )
    assert isinstance(static, StaticCandidateSource)

    rest = build_candidate_source(
        Settings(candidate_source="rest", catalog_api_url="https://catalog.test")
    )
    assert isinstance(rest, RestCandidateSource)

    with pytest.raises(SourceConfigError):
        build_candidate_source(Settings(candidate_source="rest", catalog_api_url=None))
    with pytest.raises(SourceConfigError):
        build_candidate_source(Settings(candidate_source="postgres", database_url=None))
