"""Cache stores for provider responses."""

from __future__ import annotations

import asyncio
import json
import os
import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Protocol

import boto3
from botocore.exceptions import ClientError


def matches_prefix(key: str, key_or_prefix: str) -> bool:
    """True if key is the given key or lives under it as a path prefix."""
    return key == key_or_prefix or key.startswith(key_or_prefix.rstrip("/") + "/")


class CacheStore(Protocol):
    """Key/value store with per-entry TTL."""

    async def get(self, key: str) -> dict | None:
        """Return the stored value, or None if absent or expired."""
        ...

    async def set(self, key: str, value: dict, ttl_seconds: int) -> None:
        """Store a value that expires after ttl_seconds."""
        ...

    async def delete(self, key_or_prefix: str) -> None:
        """Remove a key and every key stored under it."""
        ...


class MemoryCacheStore:
    """In-process cache store with monotonic-clock expiry.

    Expired entries are dropped when read and swept on every write. No method
    awaits while it touches the entry map.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[dict, float]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> dict | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, deadline = entry
        if self._clock() >= deadline:
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: dict, ttl_seconds: int) -> None:
        now = self._clock()
        self._purge_expired(now)
        self._entries[key] = (value, now + ttl_seconds)

    def _purge_expired(self, now: float) -> None:
        for key in [k for k, (_, deadline) in self._entries.items() if now >= deadline]:
            del self._entries[key]

    async def delete(self, key_or_prefix: str) -> None:
        for key in [k for k in self._entries if matches_prefix(k, key_or_prefix)]:
            del self._entries[key]


class S3CacheStore:
    """Cache store backed by JSON objects in an S3 bucket.

    S3 has no native per-object TTL at read time, so each object carries its
    own ``expires_at`` and expired objects read as absent.
    """

    def __init__(
        self,
        bucket: str | None = None,
        s3_client: Any | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._bucket = bucket or os.environ.get("NEWS_CACHE_BUCKET", "news-service-cache")
        self._s3 = s3_client or boto3.client("s3")
        self._clock = clock

    # -- blocking helpers -------------------------------------------------

    def _get_sync(self, key: str) -> dict | None:
        try:
            resp = self._s3.get_object(Bucket=self._bucket, Key=key)
        except ClientError as e:
            if e.response["Error"]["Code"] == "NoSuchKey":
                return None
            raise

        data = json.loads(resp["Body"].read().decode("utf-8"))
        if self._clock() >= data["expires_at"]:
            return None
        return data["value"]

    def _set_sync(self, key: str, value: dict, ttl_seconds: int) -> None:
        now = self._clock()
        data = {
            "stored_at": datetime.fromtimestamp(now, timezone.utc).isoformat(),
            "ttl_seconds": ttl_seconds,
            "expires_at": now + ttl_seconds,
            "value": value,
        }
        self._s3.put_object(
            Bucket=self._bucket,
            Key=key,
            Body=json.dumps(data, ensure_ascii=False).encode("utf-8"),
            ContentType="application/json",
        )

    def _delete_sync(self, key_or_prefix: str) -> None:
        keys: list[str] = []
        paginator = self._s3.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self._bucket, Prefix=key_or_prefix):
            for obj in page.get("Contents", []):
                if matches_prefix(obj["Key"], key_or_prefix):
                    keys.append(obj["Key"])

        # delete_objects accepts at most 1000 keys per call
        for start in range(0, len(keys), 1000):
            batch = keys[start : start + 1000]
            self._s3.delete_objects(
                Bucket=self._bucket,
                Delete={"Objects": [{"Key": k} for k in batch], "Quiet": True},
            )

    # -- async API --------------------------------------------------------

    async def get(self, key: str) -> dict | None:
        return await asyncio.to_thread(self._get_sync, key)

    async def set(self, key: str, value: dict, ttl_seconds: int) -> None:
        await asyncio.to_thread(self._set_sync, key, value, ttl_seconds)

    async def delete(self, key_or_prefix: str) -> None:
        await asyncio.to_thread(self._delete_sync, key_or_prefix)
