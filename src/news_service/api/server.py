"""FastAPI server for the News Service."""

from __future__ import annotations

from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field

from news_service.errors import ConfigurationError, ProviderError, ProviderUnavailable
from news_service.models import Article, QueryParams
from news_service.service import NewsQueryService

app = FastAPI(
    title="News Service API",
    description="Cached news search and top headlines backed by NewsAPI",
    version="0.1.0",
)

# One service per process, built on first use
_service: NewsQueryService | None = None


def get_service() -> NewsQueryService:
    """Get or create the process-wide service instance."""
    global _service
    if _service is None:
        try:
            _service = NewsQueryService.from_env()
        except ConfigurationError as e:
            raise HTTPException(status_code=500, detail=str(e))
    return _service


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------


class SearchRequest(BaseModel):
    """Request model for article search."""

    query: str | None = Field(None, description="Search terms")
    language: str | None = Field(None, description="Two-letter language code (default: en)")
    page_size: int | None = Field(None, ge=1, le=100, description="Articles to return (default: 5)")


class HeadlinesRequest(BaseModel):
    """Request model for top headlines."""

    country: str | None = Field(None, description="Two-letter country code (default: us)")
    category: str | None = Field(None, description="Category; omit for all categories")
    page_size: int | None = Field(None, ge=1, le=100, description="Articles to return (default: 5)")


class ArticlesResponse(BaseModel):
    """Response model for article lists."""

    count: int
    articles: list[dict[str, Any]]


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str
    service: str


def _articles_response(articles: list[Article]) -> ArticlesResponse:
    return ArticlesResponse(count=len(articles), articles=[a.to_dict() for a in articles])


def _provider_http_error(e: ProviderError) -> HTTPException:
    status = 503 if isinstance(e, ProviderUnavailable) else 502
    return HTTPException(status_code=status, detail=str(e))


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", service="news-service")


@app.post("/news/search", response_model=ArticlesResponse)
async def search_news_endpoint(
    request: SearchRequest, service: NewsQueryService = Depends(get_service)
) -> ArticlesResponse:
    """Search news articles, most recent first."""
    params = QueryParams(
        query=request.query, language=request.language, page_size=request.page_size
    )
    try:
        articles = await service.search_news(params)
    except ProviderError as e:
        raise _provider_http_error(e)
    return _articles_response(articles)


@app.post("/news/headlines", response_model=ArticlesResponse)
async def top_headlines_endpoint(
    request: HeadlinesRequest, service: NewsQueryService = Depends(get_service)
) -> ArticlesResponse:
    """Get top headlines for a country and optional category."""
    params = QueryParams(
        country=request.country, category=request.category, page_size=request.page_size
    )
    try:
        articles = await service.get_top_headlines(params)
    except ProviderError as e:
        raise _provider_http_error(e)
    return _articles_response(articles)


@app.post("/cache/clear")
async def clear_cache_endpoint(
    service: NewsQueryService = Depends(get_service),
) -> dict[str, str]:
    """Drop all cached provider responses."""
    await service.clear_cache()
    return {"status": "ok", "message": "Cache cleared"}
