"""Failure record storage for Courier.

Backends:
    - InMemoryFailureStore: single process, lazy expiry
    - RedisFailureStore: shared between workers, native TTL
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from courier.exceptions import ConfigurationError

from .base import FailureStore
from .memory import InMemoryFailureStore
from .redis_store import RedisFailureStore

if TYPE_CHECKING:
    from courier.config import Settings
    from courier.models import Clock


def get_failure_store(settings: Settings, clock: Clock | None = None) -> FailureStore:
    """Build the failure store selected by ``settings.store_backend``.

    Raises:
        ConfigurationError: If the backend is unknown.
    """
    if settings.store_backend == "memory":
        return InMemoryFailureStore(clock) if clock else InMemoryFailureStore()
    if settings.store_backend == "redis":
        return RedisFailureStore.from_url(settings.redis_url)
    raise ConfigurationError(f"Unknown store backend: {settings.store_backend}")


__all__ = [
    "FailureStore",
    "InMemoryFailureStore",
    "RedisFailureStore",
    "get_failure_store",
]
