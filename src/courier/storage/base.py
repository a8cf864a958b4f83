"""Failure store protocol.

A failure store is a key-value store with native per-entry expiry. Values
are JSON-compatible dicts; expired entries read as missing.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class FailureStore(Protocol):
    """Protocol for expiring key-value stores holding failure records."""

    @abstractmethod
    async def get(self, key: str) -> dict[str, Any] | None:
        """Return the stored value, or None if missing or expired."""
        ...

    @abstractmethod
    async def set(self, key: str, value: dict[str, Any], ttl_seconds: int) -> None:
        """Store a value, replacing any previous one and resetting its TTL."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a value if present."""
        ...
