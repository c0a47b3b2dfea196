"""FastAPI wrapper around the search MCP server with optional API-key auth."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Dict, Optional, cast

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

import server
from server import autocomplete, expand_query, mcp, search_products
from storefront_search import __version__
from storefront_search.config import settings
from storefront_search.errors import RateLimitError
from storefront_search.services.search import SearchMode

ToolCallable = Callable[..., Awaitable[Any]]

API_KEY = (settings.fastapi_api_key or "").strip()
API_KEY_REQUIRED = settings.api_key_required

if API_KEY_REQUIRED and not API_KEY:
    raise RuntimeError("FASTAPI_API_KEY must be set and non-empty")

mcp_http_app = cast(Any, mcp).http_app(
    path="/",
    transport="streamable-http",
)

TOOLS: Dict[str, ToolCallable] = {
    "search_products": search_products,
    "autocomplete": autocomplete,
    "expand_query": expand_query,
}

TOOL_BRIEFS: Dict[str, str] = {
    "search_products": "Fuzzy multilingual product search with relevance ranking.",
    "autocomplete": "Distinct product name suggestions for a partial query.",
    "expand_query": "Normalized form and synonym expansion of a query.",
}


class ToolCallRequest(BaseModel):
    arguments: Dict[str, Any] = Field(default_factory=dict)


def require_api_key(x_api_key: str = Header("", alias="X-API-Key")) -> None:
    if not API_KEY_REQUIRED:
        return
    if x_api_key.strip() != API_KEY:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> Any:
    async with mcp_http_app.lifespan(app):
        yield
    await server.search_service.close()


app = FastAPI(
    title="Storefront Search API",
    version=__version__,
    description="FastAPI wrapper around the storefront search MCP with mounted streamable MCP endpoint.",
    lifespan=app_lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount("/mcp", mcp_http_app)


@app.middleware("http")
async def auth_middleware(request: Request, call_next: Callable[..., Awaitable[Any]]) -> Any:
    if not API_KEY_REQUIRED:
        return await call_next(request)
    path = request.url.path
    is_protected = path.startswith("/api") or path.startswith("/mcp")
    is_open = path in {"/health", "/docs", "/openapi.json", "/redoc"}
    if is_protected and not is_open:
        api_key = request.headers.get("X-API-Key", "")
        if api_key.strip() != API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid API key"},
            )
    return await call_next(request)


@app.get("/health")
async def health() -> Dict[str, Any]:
    return {
        "status": "ok",
        "candidate_source": server.search_service.source.name,
        "cache": server.search_service.cache.stats(),
    }


@app.get("/api/search", dependencies=[Depends(require_api_key)])
async def search_api(
    q: str = "",
    locale: str = settings.default_locale,
    limit: int = settings.search_default_limit,
    mode: SearchMode = "smart",
    autocomplete: bool = False,
    min_score: Optional[float] = Query(default=None, alias="minScore"),
) -> JSONResponse:
    try:
        result = await search_products(
            query=q,
            locale=locale,
            limit=limit,
            mode=mode,
            autocomplete=autocomplete,
            min_score=min_score,
        )
    except RateLimitError as exc:
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=str(exc)) from exc
    status_code = status.HTTP_200_OK if result.get("success") else status.HTTP_500_INTERNAL_SERVER_ERROR
    headers = {"X-Cache": str(result["cache"]).upper()} if result.get("cache") else None
    return JSONResponse(status_code=status_code, content=result, headers=headers)


@app.get("/api/tools", dependencies=[Depends(require_api_key)])
async def list_tools_api() -> Dict[str, Any]:
    return {
        "count": len(TOOLS),
        "tools": [{"name": name, "brief": TOOL_BRIEFS[name]} for name in sorted(TOOLS)],
    }


@app.post("/api/tools/{tool_name}", dependencies=[Depends(require_api_key)])
async def call_tool_api(tool_name: str, request: ToolCallRequest) -> Dict[str, Any]:
    tool = TOOLS.get(tool_name)
    if tool is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown tool '{tool_name}'",
        )
    try:
        result = await tool(**request.arguments)
    except (TypeError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid arguments for tool '{tool_name}': {exc}",
        ) from exc
    except RateLimitError as exc:
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=str(exc)) from exc
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Tool '{tool_name}' execution failed: {exc}",
        ) from exc
    return {"tool": tool_name, "result": result}
