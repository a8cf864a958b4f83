"""In-memory failure store for single-process deployments and tests."""

from __future__ import annotations

import copy
from datetime import datetime, timedelta
from typing import Any

from courier.models import Clock, utc_now


class InMemoryFailureStore:
    """Dict-backed store with per-entry expiry.

    Expiry is evaluated lazily against the injected clock, so tests can
    advance time without sleeping.
    """

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[dict[str, Any], datetime]] = {}

    async def get(self, key: str) -> dict[str, Any] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return copy.deepcopy(value)

    async def set(self, key: str, value: dict[str, Any], ttl_seconds: int) -> None:
        expires_at = self._clock() + timedelta(seconds=ttl_seconds)
        self._entries[key] = (copy.deepcopy(value), expires_at)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)
