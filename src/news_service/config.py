"""Service configuration loaded once at startup."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from news_service.errors import ConfigurationError

DEFAULT_BASE_URL = "https://newsapi.org/v2"
DEFAULT_CACHE_TTL = 5 * 60
DEFAULT_TIMEOUT = 10.0
DEFAULT_NAMESPACE = "content/news"


@dataclass(frozen=True)
class ServiceConfig:
    """Immutable settings for a news service instance."""

    api_key: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL
    timeout_seconds: float = DEFAULT_TIMEOUT
    cache_namespace: str = DEFAULT_NAMESPACE

    def __post_init__(self) -> None:
        if not isinstance(self.api_key, str) or not self.api_key.strip():
            raise ConfigurationError("NEWS_API_KEY: News API key is required")
        if not self.base_url:
            raise ConfigurationError("NEWS_BASE_URL: must not be empty")
        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigurationError("NEWS_BASE_URL: must be an http(s) URL")
        if isinstance(self.cache_ttl_seconds, bool) or not isinstance(
            self.cache_ttl_seconds, int
        ):
            raise ConfigurationError("NEWS_CACHE_TTL: must be an integer")
        if self.cache_ttl_seconds <= 0:
            raise ConfigurationError("NEWS_CACHE_TTL: must be positive")
        if self.timeout_seconds <= 0:
            raise ConfigurationError("NEWS_TIMEOUT: must be positive")
        if not self.cache_namespace:
            raise ConfigurationError("cache namespace must not be empty")
        # Normalise so endpoint paths can be joined with a single slash.
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> ServiceConfig:
        """Build a config from NEWS_* environment variables.

        Args:
            environ: Mapping to read instead of os.environ (for tests)

        Raises:
            ConfigurationError: If the API key is missing or a value is malformed
        """
        env = os.environ if environ is None else environ

        kwargs: dict = {"api_key": env.get("NEWS_API_KEY", "")}

        base_url = env.get("NEWS_BASE_URL")
        if base_url:
            kwargs["base_url"] = base_url

        ttl = env.get("NEWS_CACHE_TTL")
        if ttl:
            try:
                kwargs["cache_ttl_seconds"] = int(ttl)
            except ValueError:
                raise ConfigurationError(
                    f"NEWS_CACHE_TTL: expected an integer number of seconds, got {ttl!r}"
                ) from None

        timeout = env.get("NEWS_TIMEOUT")
        if timeout:
            try:
                kwargs["timeout_seconds"] = float(timeout)
            except ValueError:
                raise ConfigurationError(
                    f"NEWS_TIMEOUT: expected a number of seconds, got {timeout!r}"
                ) from None

        return cls(**kwargs)
