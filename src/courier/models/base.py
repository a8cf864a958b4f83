"""Shared helpers for Courier models."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from uuid import uuid4

# Returns the current time; injected into components so tests can move it.
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def generate_id(prefix: str) -> str:
    """Generate a unique ID with the given prefix.

    Examples:
        generate_id("tsk") -> "tsk_a1b2c3d4e5f6"
    """
    return f"{prefix}_{uuid4().hex[:12]}"
