"""News Service - Cached NewsAPI search and headline lookups."""

from news_service.config import ServiceConfig
from news_service.errors import (
    ArticleValidationError,
    ConfigurationError,
    NewsServiceError,
    ProviderError,
    ProviderHttpError,
    ProviderLogicalError,
    ProviderUnavailable,
)
from news_service.models import Article, ProviderResponse, QueryParams
from news_service.service import NewsQueryService

__all__ = [
    "Article",
    "ArticleValidationError",
    "ConfigurationError",
    "NewsQueryService",
    "NewsServiceError",
    "ProviderError",
    "ProviderHttpError",
    "ProviderLogicalError",
    "ProviderResponse",
    "ProviderUnavailable",
    "QueryParams",
    "ServiceConfig",
]
