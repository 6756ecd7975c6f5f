"""Deterministic cache keys for provider requests."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping

from news_service.config import DEFAULT_NAMESPACE


def canonical_params(params: Mapping[str, str | int | None]) -> str:
    """Serialize query parameters with stable ordering.

    Values are rendered as strings since that is how they reach the provider;
    None values are dropped so an absent parameter never matches an empty one.
    """
    cleaned = {k: str(v) for k, v in params.items() if v is not None}
    return json.dumps(cleaned, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def build_key(
    endpoint: str,
    params: Mapping[str, str | int | None],
    namespace: str = DEFAULT_NAMESPACE,
) -> str:
    """Build the cache key for an endpoint and its query parameters.

    Returns:
        "{namespace}/{endpoint}/{sha256 of canonical params}"
    """
    digest = hashlib.sha256(canonical_params(params).encode("utf-8")).hexdigest()
    return f"{namespace}/{endpoint.strip('/')}/{digest}"
