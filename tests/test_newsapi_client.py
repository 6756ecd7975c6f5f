"""Tests for the NewsAPI client."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

import httpx
import pytest

from news_service.config import ServiceConfig
from news_service.errors import (
    ProviderHttpError,
    ProviderLogicalError,
    ProviderUnavailable,
)
from news_service.news.newsapi_client import NewsAPIClient

API_KEY = "test-api-key-123"


# -- Fixtures & helpers --------------------------------------------------


def _article(title: str = "A", url: str = "https://x/y") -> dict:
    return {
        "source": {"id": None, "name": "Z"},
        "title": title,
        "description": None,
        "url": url,
        "publishedAt": "2024-01-01T00:00:00Z",
    }


def _ok_body(articles: list[dict], total: int | None = None) -> dict:
    return {
        "status": "ok",
        "totalResults": len(articles) if total is None else total,
        "articles": articles,
    }


def _make_client(
    handler: Callable[[httpx.Request], httpx.Response],
    captured: list[httpx.Request] | None = None,
) -> NewsAPIClient:
    def recording_handler(request: httpx.Request) -> httpx.Response:
        if captured is not None:
            captured.append(request)
        return handler(request)

    config = ServiceConfig(api_key=API_KEY, base_url="https://news.test/v2")
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
    return NewsAPIClient(config, http_client=http_client)


# -- Tests ---------------------------------------------------------------


class TestRequestBuilding:
    def test_url_and_query_parameters(self) -> None:
        captured: list[httpx.Request] = []
        client = _make_client(lambda r: httpx.Response(200, json=_ok_body([])), captured)

        asyncio.run(
            client.request("everything", {"q": "climate change", "pageSize": 5, "sortBy": "publishedAt"})
        )

        assert len(captured) == 1
        request = captured[0]
        assert request.method == "GET"
        assert request.url.path == "/v2/everything"
        assert request.url.params["q"] == "climate change"
        assert request.url.params["pageSize"] == "5"
        assert request.url.params["sortBy"] == "publishedAt"
        assert request.url.params["apiKey"] == API_KEY

    def test_none_params_omitted(self) -> None:
        captured: list[httpx.Request] = []
        client = _make_client(lambda r: httpx.Response(200, json=_ok_body([])), captured)

        asyncio.run(client.request("top-headlines", {"country": "us", "category": None}))

        assert "category" not in captured[0].url.params
        assert captured[0].url.params["country"] == "us"


class TestSuccess:
    def test_parses_articles(self) -> None:
        client = _make_client(
            lambda r: httpx.Response(200, json=_ok_body([_article("A"), _article("B")]))
        )

        envelope = asyncio.run(client.request("everything", {"q": "x"}))

        assert envelope.status == "ok"
        assert envelope.total_results == 2
        assert [a.title for a in envelope.articles] == ["A", "B"]
        assert envelope.articles[0].description is None
        assert envelope.dropped == 0

    def test_zero_results(self) -> None:
        client = _make_client(lambda r: httpx.Response(200, json=_ok_body([])))
        envelope = asyncio.run(client.request("everything", {"q": "nothing"}))
        assert envelope.articles == ()
        assert envelope.total_results == 0

    def test_invalid_articles_dropped(self, caplog: pytest.LogCaptureFixture) -> None:
        articles = [_article(str(i)) for i in range(4)] + [_article("bad", url="nope")]
        client = _make_client(lambda r: httpx.Response(200, json=_ok_body(articles)))

        with caplog.at_level(logging.WARNING, logger="news_service.news.newsapi_client"):
            envelope = asyncio.run(client.request("everything", {"q": "x"}))

        assert len(envelope.articles) == 4
        assert envelope.dropped == 1
        assert envelope.total_results == 5
        assert "Dropped 1 of 5" in caplog.text

    def test_missing_articles_field(self) -> None:
        client = _make_client(
            lambda r: httpx.Response(200, json={"status": "ok", "totalResults": 0})
        )
        envelope = asyncio.run(client.request("everything", {"q": "x"}))
        assert envelope.articles == ()


class TestFailures:
    def test_timeout_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = _make_client(handler)
        with pytest.raises(ProviderUnavailable) as exc_info:
            asyncio.run(client.request("everything", {"q": "x"}))
        assert isinstance(exc_info.value.cause, httpx.ReadTimeout)
        assert "timed out" in str(exc_info.value)

    def test_connection_error_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = _make_client(handler)
        with pytest.raises(ProviderUnavailable) as exc_info:
            asyncio.run(client.request("everything", {"q": "x"}))
        assert isinstance(exc_info.value.cause, httpx.ConnectError)

    def test_http_error_with_json_message(self) -> None:
        client = _make_client(
            lambda r: httpx.Response(
                401,
                json={"status": "error", "code": "apiKeyInvalid", "message": "Your API key is invalid."},
            )
        )
        with pytest.raises(ProviderHttpError) as exc_info:
            asyncio.run(client.request("everything", {"q": "x"}))
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Your API key is invalid."

    def test_http_error_without_json_body(self) -> None:
        client = _make_client(lambda r: httpx.Response(502, text="<html>Bad gateway</html>"))
        with pytest.raises(ProviderHttpError) as exc_info:
            asyncio.run(client.request("everything", {"q": "x"}))
        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Bad Gateway"

    def test_rate_limited_is_http_error(self) -> None:
        client = _make_client(
            lambda r: httpx.Response(429, json={"status": "error", "code": "rateLimited", "message": "Slow down"})
        )
        with pytest.raises(ProviderHttpError) as exc_info:
            asyncio.run(client.request("everything", {"q": "x"}))
        assert exc_info.value.status_code == 429

    def test_error_envelope_on_http_200(self) -> None:
        client = _make_client(
            lambda r: httpx.Response(
                200,
                json={"status": "error", "code": "parametersMissing", "message": "Required parameters are missing."},
            )
        )
        with pytest.raises(ProviderLogicalError) as exc_info:
            asyncio.run(client.request("everything", {}))
        assert exc_info.value.code == "parametersMissing"
        assert exc_info.value.message == "Required parameters are missing."

    def test_non_json_success_body(self) -> None:
        client = _make_client(lambda r: httpx.Response(200, text="not json"))
        with pytest.raises(ProviderLogicalError) as exc_info:
            asyncio.run(client.request("everything", {"q": "x"}))
        assert exc_info.value.code == "invalidResponse"

    def test_api_key_never_in_error_messages(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError(f"failed for {request.url}", request=request)

        client = _make_client(handler)
        with pytest.raises(ProviderUnavailable) as exc_info:
            asyncio.run(client.request("everything", {"q": "x"}))
        assert API_KEY not in str(exc_info.value)

    def test_api_key_never_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        client = _make_client(lambda r: httpx.Response(200, json=_ok_body([_article()])))
        with caplog.at_level(logging.DEBUG, logger="news_service"):
            asyncio.run(client.request("everything", {"q": "x"}))
        ours = [r.getMessage() for r in caplog.records if r.name.startswith("news_service")]
        assert ours
        assert all(API_KEY not in message for message in ours)


class TestLifecycle:
    def test_injected_client_not_closed(self) -> None:
        config = ServiceConfig(api_key=API_KEY)
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda r: httpx.Response(200, json=_ok_body([])))
        )
        client = NewsAPIClient(config, http_client=http_client)

        asyncio.run(client.close())

        assert not http_client.is_closed

    def test_owned_client_closed_by_context_manager(self) -> None:
        async def run_test() -> NewsAPIClient:
            async with NewsAPIClient(ServiceConfig(api_key=API_KEY)) as client:
                pass
            return client

        client = asyncio.run(run_test())
        assert client._client.is_closed
