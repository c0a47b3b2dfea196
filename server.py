"""Streamable HTTP MCP server exposing storefront product search."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from cachetools import TTLCache
from fastmcp import FastMCP

from storefront_search.config import settings
from storefront_search.errors import RateLimitError
from storefront_search.logging import configure_logging
from storefront_search.services.search import SearchMode, SearchService
from storefront_search.sources import build_candidate_source

configure_logging()

logger = logging.getLogger(__name__)

RATE_LIMIT_WINDOW = settings.rate_limit_window_seconds
RATE_LIMITS: TTLCache[str, int] = TTLCache(maxsize=512, ttl=RATE_LIMIT_WINDOW)
RATE_LIMITS_PER_TOOL: Dict[str, int] = {
    "search_products": 120,
    "autocomplete": 240,
    "expand_query": 60,
}
_rate_limit_lock = threading.Lock()


def enforce_rate_limit(tool_name: str) -> None:
    limit = RATE_LIMITS_PER_TOOL.get(tool_name, 60)
    with _rate_limit_lock:
        count = RATE_LIMITS.get(tool_name, 0)
        if count >= limit:
            raise RateLimitError(f"Rate limit reached for {tool_name}")
        RATE_LIMITS[tool_name] = count + 1


def audit_tool(tool_name: str, status: str, details: Dict[str, Any] | None = None) -> None:
    logger.info(
        f"tool_event {tool_name}",
        extra={
            "tool": tool_name,
            "status": status,
            "details": details or {},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


mcp = FastMCP("Storefront Search MCP")
search_service = SearchService.from_settings(build_candidate_source(settings), settings)


async def search_products(
    query: str = "",
    locale: str = settings.default_locale,
    limit: int = settings.search_default_limit,
    mode: SearchMode = "smart",
    autocomplete: bool = False,
    min_score: Optional[float] = None,
) -> Dict[str, Any]:
    """Fuzzy multilingual product search ranked by relevance."""
    enforce_rate_limit("search_products")
    result = await search_service.search(
        query,
        locale,
        limit,
        mode=mode,
        autocomplete=autocomplete,
        min_score=min_score,
    )
    audit_tool(
        "search_products",
        "success" if result.get("success") else "error",
        {"total": result.get("total"), "cache": result.get("cache"), "mode": mode},
    )
    return result


async def autocomplete(
    query: str = "",
    locale: str = settings.default_locale,
    limit: int = 10,
) -> Dict[str, Any]:
    """Product name suggestions for a partial query."""
    enforce_rate_limit("autocomplete")
    result = await search_service.search(query, locale, limit, autocomplete=True)
    suggestions = result.get("suggestions", [])
    audit_tool("autocomplete", "success", {"count": len(suggestions), "cache": result.get("cache")})
    return {
        "success": result.get("success", False),
        "query": query,
        "suggestions": suggestions,
    }


async def expand_query(query: str) -> Dict[str, Any]:
    """Show the normalized form, words and synonym expansion of a query."""
    enforce_rate_limit("expand_query")
    result = search_service.explain_query(query)
    audit_tool("expand_query", "success", {"synonyms": len(result["synonyms"])})
    return result


for _tool in (search_products, autocomplete, expand_query):
    mcp.tool()(_tool)


if __name__ == "__main__":
    mcp.run(
        transport="streamable-http",
        host="0.0.0.0",
        port=8000,
    )
