"""Error types raised by the news service."""

from __future__ import annotations

from typing import Any


class NewsServiceError(Exception):
    """Base error for the news service."""

    pass


class ConfigurationError(NewsServiceError):
    """A required setting is missing or invalid."""

    pass


class ProviderError(NewsServiceError):
    """The upstream news provider could not answer a request."""

    pass


class ProviderUnavailable(ProviderError):
    """Transport-level failure (connection error, timeout)."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ProviderHttpError(ProviderError):
    """Upstream returned a non-success HTTP status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"News API error ({status_code}): {message}")
        self.status_code = status_code
        self.message = message


class ProviderLogicalError(ProviderError):
    """Upstream answered with HTTP success but a failed envelope."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(f"{code}: {message}" if code else message)
        self.code = code
        self.message = message


class ArticleValidationError(NewsServiceError):
    """A single article did not match the expected shape."""

    def __init__(self, message: str, errors: list[Any] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []
