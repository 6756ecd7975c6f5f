"""Provider client, cache stores and the cache layer."""

from news_service.news.cache import CacheStore, MemoryCacheStore, S3CacheStore
from news_service.news.cache_layer import NewsCacheLayer
from news_service.news.keys import build_key
from news_service.news.newsapi_client import NewsAPIClient

__all__ = [
    "CacheStore",
    "MemoryCacheStore",
    "NewsAPIClient",
    "NewsCacheLayer",
    "S3CacheStore",
    "build_key",
]
