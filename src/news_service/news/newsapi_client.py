"""Async NewsAPI.org client that classifies provider failures."""

from __future__ import annotations

import logging
from collections.abc import Mapping

import httpx

from news_service.config import ServiceConfig
from news_service.errors import (
    ArticleValidationError,
    ProviderHttpError,
    ProviderLogicalError,
    ProviderUnavailable,
)
from news_service.models import Article, ProviderResponse

logger = logging.getLogger(__name__)


class NewsAPIClient:
    """Client for the NewsAPI ``everything`` and ``top-headlines`` endpoints.

    The client never retries; every failure is raised as one of the typed
    provider errors so the caller decides what to do next.
    """

    def __init__(
        self,
        config: ServiceConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_seconds)

    def _url(self, endpoint: str) -> str:
        return f"{self._config.base_url}/{endpoint.strip('/')}"

    async def request(
        self, endpoint: str, params: Mapping[str, str | int | None]
    ) -> ProviderResponse:
        """Issue a GET request and parse the response envelope.

        Args:
            endpoint: Endpoint path under the base URL (e.g. 'everything')
            params: Query parameters; None values are omitted

        Returns:
            ProviderResponse with every article that passed validation

        Raises:
            ProviderUnavailable: On connection errors or timeouts
            ProviderHttpError: On a non-2xx HTTP status
            ProviderLogicalError: When the envelope status is not "ok"
        """
        query = {k: str(v) for k, v in params.items() if v is not None}
        query["apiKey"] = self._config.api_key
        url = self._url(endpoint)

        # The query string carries the API key, so only the path is logged.
        logger.debug("NewsAPI request: GET %s", url)
        try:
            resp = await self._client.get(
                url, params=query, timeout=self._config.timeout_seconds
            )
        except httpx.TimeoutException as e:
            raise ProviderUnavailable(
                f"NewsAPI request to '{endpoint}' timed out after "
                f"{self._config.timeout_seconds}s",
                cause=e,
            ) from e
        except httpx.TransportError as e:
            raise ProviderUnavailable(
                f"NewsAPI request to '{endpoint}' failed: {type(e).__name__}",
                cause=e,
            ) from e

        if not resp.is_success:
            raise ProviderHttpError(resp.status_code, self._error_message(resp))

        try:
            data = resp.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            raise ProviderLogicalError(
                "Response body is not a JSON object", code="invalidResponse"
            )

        if data.get("status") != "ok":
            raise ProviderLogicalError(
                data.get("message") or "Failed to fetch news",
                code=data.get("code"),
            )

        return self._parse_envelope(endpoint, data)

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        """Best-effort error message from a failed response."""
        try:
            body = resp.json()
        except ValueError:
            return resp.reason_phrase or "Unknown error"
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return resp.reason_phrase or "Unknown error"

    @staticmethod
    def _parse_envelope(endpoint: str, data: dict) -> ProviderResponse:
        """Validate articles, dropping the ones with an invalid shape."""
        raw_articles = data.get("articles") or []
        if not isinstance(raw_articles, list):
            raise ProviderLogicalError(
                "Response 'articles' is not a list", code="invalidResponse"
            )

        articles: list[Article] = []
        dropped = 0
        for item in raw_articles:
            try:
                articles.append(Article.from_dict(item))
            except ArticleValidationError:
                dropped += 1

        if dropped:
            logger.warning(
                "Dropped %d of %d invalid articles from '%s' response",
                dropped,
                len(raw_articles),
                endpoint,
            )

        total = data.get("totalResults")
        return ProviderResponse(
            status="ok",
            total_results=total if isinstance(total, int) else len(articles),
            articles=tuple(articles),
            dropped=dropped,
        )

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> NewsAPIClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
