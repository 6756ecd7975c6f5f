"""Data models for the news service."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import AnyHttpUrl, BaseModel, ValidationError, field_validator

from news_service.errors import ArticleValidationError


class _SourcePayload(BaseModel):
    name: str


class _ArticlePayload(BaseModel):
    """Wire shape of a single article as returned by NewsAPI."""

    title: str
    description: str | None = None
    url: AnyHttpUrl
    publishedAt: str
    source: _SourcePayload

    @field_validator("publishedAt")
    @classmethod
    def _check_timestamp(cls, value: str) -> str:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
        return value


@dataclass(frozen=True)
class Article:
    """A single news article returned by the provider."""

    title: str
    description: str | None  # None when the provider sends null or omits it
    url: str
    published_at: str  # ISO-8601, as sent by the provider
    source_name: str

    @property
    def published_datetime(self) -> datetime:
        """Publication time as an aware datetime."""
        return datetime.fromisoformat(self.published_at.replace("Z", "+00:00"))

    def to_dict(self) -> dict:
        """Serialize to the provider's JSON shape."""
        return {
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "publishedAt": self.published_at,
            "source": {"name": self.source_name},
        }

    @classmethod
    def from_dict(cls, data: Any) -> Article:
        """Validate and build an article from untrusted JSON.

        Raises:
            ArticleValidationError: If required fields are missing or malformed
        """
        try:
            payload = _ArticlePayload.model_validate(data)
        except ValidationError as e:
            raise ArticleValidationError(
                f"Invalid article: {e.error_count()} validation error(s)",
                errors=e.errors(include_url=False),
            ) from e

        return cls(
            title=payload.title,
            description=payload.description or None,
            # Keep the provider's string; AnyHttpUrl may normalise it.
            url=data["url"],
            published_at=payload.publishedAt,
            source_name=payload.source.name,
        )


@dataclass(frozen=True)
class QueryParams:
    """Caller-facing query parameters for search and headline lookups."""

    query: str | None = None
    country: str | None = None
    category: str | None = None
    language: str | None = None
    page_size: int | None = None


@dataclass(frozen=True)
class ProviderResponse:
    """Parsed NewsAPI response envelope."""

    status: str
    total_results: int
    articles: tuple[Article, ...] = field(default_factory=tuple)
    dropped: int = 0  # Articles rejected during parsing

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "status": self.status,
            "totalResults": self.total_results,
            "articles": [a.to_dict() for a in self.articles],
            "dropped": self.dropped,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ProviderResponse:
        """Deserialize a previously stored envelope."""
        return cls(
            status=data["status"],
            total_results=int(data["totalResults"]),
            articles=tuple(Article.from_dict(a) for a in data["articles"]),
            dropped=int(data.get("dropped", 0)),
        )
