"""Public news query operations."""

from __future__ import annotations

import logging
import os

from news_service.config import ServiceConfig
from news_service.models import Article, QueryParams
from news_service.news.cache import CacheStore, MemoryCacheStore, S3CacheStore
from news_service.news.cache_layer import NewsCacheLayer, ProviderClient
from news_service.news.newsapi_client import NewsAPIClient

logger = logging.getLogger(__name__)

SEARCH_ENDPOINT = "everything"
HEADLINES_ENDPOINT = "top-headlines"
DEFAULT_LANGUAGE = "en"
DEFAULT_COUNTRY = "us"
DEFAULT_PAGE_SIZE = 5


class NewsQueryService:
    """Searches news and lists top headlines through a shared cache.

    Build one instance at startup and pass it to whatever needs it.

    Attributes:
        config: Settings this instance was built with.
        cache: The read-through cache layer in front of the provider.
    """

    def __init__(
        self,
        config: ServiceConfig,
        store: CacheStore | None = None,
        client: ProviderClient | None = None,
    ) -> None:
        self.config = config
        self._owns_client = client is None
        self._client = client or NewsAPIClient(config)
        self.cache = NewsCacheLayer(
            store=store if store is not None else MemoryCacheStore(),
            client=self._client,
            ttl_seconds=config.cache_ttl_seconds,
            namespace=config.cache_namespace,
        )

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> NewsQueryService:
        """Build a service from NEWS_* environment variables.

        Uses an S3-backed cache when NEWS_CACHE_BUCKET is set, otherwise an
        in-process one.

        Raises:
            ConfigurationError: If the configuration is missing or invalid
        """
        env = os.environ if environ is None else environ
        config = ServiceConfig.from_env(env)
        bucket = env.get("NEWS_CACHE_BUCKET")
        store: CacheStore = S3CacheStore(bucket=bucket) if bucket else MemoryCacheStore()
        return cls(config, store=store)

    async def search_news(self, params: QueryParams) -> list[Article]:
        """Search all articles, most recent first.

        An empty or absent query is forwarded as-is; the provider decides
        what that means.
        """
        logger.info("Searching news for query %r", params.query)
        provider_params: dict[str, str | int] = {
            "q": params.query or "",
            "language": params.language or DEFAULT_LANGUAGE,
            "pageSize": params.page_size or DEFAULT_PAGE_SIZE,
            "sortBy": "publishedAt",
        }
        envelope = await self.cache.fetch(SEARCH_ENDPOINT, provider_params)
        return list(envelope.articles)

    async def get_top_headlines(self, params: QueryParams) -> list[Article]:
        """List top headlines for a country, optionally narrowed to a category."""
        logger.info(
            "Getting top headlines for country=%s category=%s",
            params.country or DEFAULT_COUNTRY,
            params.category,
        )
        provider_params: dict[str, str | int] = {
            "country": params.country or DEFAULT_COUNTRY,
            "pageSize": params.page_size or DEFAULT_PAGE_SIZE,
        }
        # No category means all categories; never send an empty one.
        if params.category:
            provider_params["category"] = params.category

        envelope = await self.cache.fetch(HEADLINES_ENDPOINT, provider_params)
        return list(envelope.articles)

    async def clear_cache(self) -> None:
        """Drop every cached response. Failures are logged, never raised."""
        try:
            await self.cache.clear_all()
        except Exception:
            logger.warning("Failed to clear news cache", exc_info=True)
            return
        logger.info("News cache cleared")

    async def close(self) -> None:
        """Release the provider client if this service created it."""
        if self._owns_client and isinstance(self._client, NewsAPIClient):
            await self._client.close()

    async def __aenter__(self) -> NewsQueryService:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
