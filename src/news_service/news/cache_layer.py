"""Read-through cache in front of the NewsAPI client."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Protocol

from news_service.config import DEFAULT_CACHE_TTL, DEFAULT_NAMESPACE
from news_service.errors import ArticleValidationError
from news_service.models import ProviderResponse
from news_service.news.cache import CacheStore, matches_prefix
from news_service.news.keys import build_key

logger = logging.getLogger(__name__)


class ProviderClient(Protocol):
    """Anything that can answer a provider request."""

    async def request(
        self, endpoint: str, params: Mapping[str, str | int | None]
    ) -> ProviderResponse:
        ...


class NewsCacheLayer:
    """Serves provider responses from the cache, fetching on a miss.

    Failed fetches are never cached, so the next call goes back to the
    provider. Cache read and write failures are logged and otherwise ignored.

    Attributes:
        ttl_seconds: Lifetime of each cache entry.
        namespace: Prefix shared by every key this layer writes.
    """

    def __init__(
        self,
        store: CacheStore,
        client: ProviderClient,
        ttl_seconds: int = DEFAULT_CACHE_TTL,
        namespace: str = DEFAULT_NAMESPACE,
        single_flight: bool = True,
    ) -> None:
        self._store = store
        self._client = client
        self.ttl_seconds = ttl_seconds
        self.namespace = namespace
        self._single_flight = single_flight
        self._in_flight: dict[str, asyncio.Task[ProviderResponse]] = {}
        # Bumped by every invalidation; fetches started earlier skip their write.
        self._generation = 0

    def key_for(self, endpoint: str, params: Mapping[str, str | int | None]) -> str:
        """Cache key for a request in this layer's namespace."""
        return build_key(endpoint, params, namespace=self.namespace)

    async def fetch(
        self, endpoint: str, params: Mapping[str, str | int | None]
    ) -> ProviderResponse:
        """Return the response for a request, from cache when fresh.

        Raises:
            ProviderError: Whatever the client raised on a miss, unchanged
        """
        key = self.key_for(endpoint, params)

        cached = await self._read(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached

        logger.debug("Cache miss for %s", key)
        if not self._single_flight:
            return await self._fetch_and_store(key, endpoint, params)

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch_and_store(key, endpoint, params))
            self._in_flight[key] = task
            task.add_done_callback(lambda t: self._forget(key, t))
        else:
            logger.debug("Joining in-flight request for %s", key)

        # Shielded so a caller that gives up does not cancel the shared fetch.
        return await asyncio.shield(task)

    def _forget(self, key: str, task: asyncio.Task[ProviderResponse]) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        # Retrieve the outcome so a failure nobody awaited is not reported.
        if not task.cancelled():
            task.exception()

    async def _read(self, key: str) -> ProviderResponse | None:
        try:
            data = await self._store.get(key)
        except Exception:
            logger.warning("Cache read failed for %s; treating as miss", key, exc_info=True)
            return None
        if data is None:
            return None

        try:
            return ProviderResponse.from_dict(data)
        except (ArticleValidationError, KeyError, TypeError, ValueError):
            logger.warning("Discarding unreadable cache entry %s", key)
            return None

    async def _fetch_and_store(
        self, key: str, endpoint: str, params: Mapping[str, str | int | None]
    ) -> ProviderResponse:
        generation = self._generation
        envelope = await self._client.request(endpoint, params)

        if generation != self._generation:
            logger.debug("Cache invalidated during fetch; not storing %s", key)
            return envelope

        try:
            await self._store.set(key, envelope.to_dict(), self.ttl_seconds)
        except Exception:
            logger.warning("Cache write failed for %s", key, exc_info=True)

        return envelope

    def _detach_in_flight(self, prefix: str) -> None:
        """Stop later callers from joining fetches that predate an invalidation."""
        self._generation += 1
        for key in [k for k in self._in_flight if matches_prefix(k, prefix)]:
            del self._in_flight[key]

    async def invalidate(self, prefix: str) -> None:
        """Remove every entry stored under a key prefix.

        Fetches already in flight still answer their callers but are not
        written back, and new requests start a fresh provider call.
        """
        self._detach_in_flight(prefix)
        await self._store.delete(prefix)

    async def clear_all(self) -> None:
        """Remove every entry in this layer's namespace."""
        await self.invalidate(self.namespace)
