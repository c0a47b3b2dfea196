"""REST candidate source for a catalog API exposing published products."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from storefront_search.errors import CandidateFetchError
from storefront_search.models import Candidate
from storefront_search.sources.base import CandidateSource


class RestCandidateSource(CandidateSource):
    name = "catalog_api"

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        api_key_header: str = "X-API-Key",
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        headers: Dict[str, str] = {
            "User-Agent": "storefront-search/0.1",
            "Accept": "application/json",
        }
        if api_key:
            headers[api_key_header] = api_key
        self._client = httpx.AsyncClient(timeout=timeout, headers=headers, follow_redirects=True)

    async def close(self) -> None:
        await self._client.aclose()

    async def fetch_candidates(self) -> List[Candidate]:
        response = await self._client.get(
            f"{self.base_url}/products",
            params={"status": "PUBLISHED", "include": "translations,category,tags,variants,media"},
        )
        self._raise_for_status(response.status_code)
        response.raise_for_status()
        try:
            payload: Any = response.json()
        except ValueError as exc:
            snippet = response.text[:300].replace("\n", " ").strip()
            raise CandidateFetchError(f"Catalog API returned non-JSON response: {snippet}") from exc
        if isinstance(payload, dict):
            payload = payload.get("products", payload.get("results"))
        if not isinstance(payload, list):
            raise CandidateFetchError("Catalog API response does not contain a product list")
        return self._parse_records(payload)
