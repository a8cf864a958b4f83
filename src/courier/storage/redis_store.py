"""Redis-backed failure store.

Shares failure records between worker processes. Values are JSON strings
written with ``SET ... EX`` so Redis enforces the failure window natively.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from courier.exceptions import StoreError

from .retry import redis_retry

logger = logging.getLogger(__name__)


class RedisFailureStore:
    """Failure store on top of ``redis.asyncio``.

    Example:
        ```python
        store = RedisFailureStore.from_url("redis://localhost:6379/0")
        await store.set("courier:failure:abc", {"failed_event_count": 1}, 3600)
        ```
    """

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> RedisFailureStore:
        return cls(redis.from_url(url, decode_responses=True))

    @redis_retry
    async def _get(self, key: str) -> Any:
        return await self._client.get(key)

    @redis_retry
    async def _set(self, key: str, raw: str, ttl_seconds: int) -> None:
        await self._client.set(key, raw, ex=ttl_seconds)

    async def get(self, key: str) -> dict[str, Any] | None:
        try:
            raw = await self._get(key)
        except RedisError as e:
            raise StoreError(f"Failed to read {key}: {e}") from e
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable failure record at %s", key)
            return None
        return value if isinstance(value, dict) else None

    async def set(self, key: str, value: dict[str, Any], ttl_seconds: int) -> None:
        try:
            await self._set(key, json.dumps(value), ttl_seconds)
        except RedisError as e:
            raise StoreError(f"Failed to write {key}: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(key)
        except RedisError as e:
            raise StoreError(f"Failed to delete {key}: {e}") from e

    async def aclose(self) -> None:
        await self._client.aclose()
