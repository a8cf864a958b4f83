"""Failure record for a single destination URL.

The record is the only shared mutable state of the dispatcher. It lives
in an expiring key-value entry, so the counter window is enforced by the
store's TTL; the block window is checked against blocked_at on read.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field


class FailureRecord(BaseModel):
    """Consecutive-failure state of one destination.

    Attributes:
        failed_event_count: Events (not attempts) that exhausted their
            retries since the last reset.
        first_failure_at: When the current failure window started.
        blocked: Whether new deliveries to the URL are rejected.
        blocked_at: When the block started.
    """

    model_config = ConfigDict(extra="ignore")

    failed_event_count: int = Field(default=0, ge=0)
    first_failure_at: datetime | None = Field(default=None)
    blocked: bool = Field(default=False)
    blocked_at: datetime | None = Field(default=None)

    @classmethod
    def fresh(cls) -> FailureRecord:
        """A zeroed, unblocked record."""
        return cls()

    def increment(self, now: datetime) -> FailureRecord:
        """Count one more failed event."""
        if self.failed_event_count == 0 or self.first_failure_at is None:
            self.first_failure_at = now
        self.failed_event_count += 1
        return self

    def block(self, now: datetime) -> FailureRecord:
        self.blocked = True
        self.blocked_at = now
        return self

    def unblock(self) -> FailureRecord:
        self.blocked = False
        self.blocked_at = None
        return self

    def is_block_expired(self, now: datetime, window: timedelta) -> bool:
        """True if blocked and blocked_at is more than window in the past.

        A blocked record without a timestamp counts as expired so it can
        never stay stuck forever.
        """
        if not self.blocked:
            return False
        if self.blocked_at is None:
            return True
        return now - self.blocked_at > window


__all__ = ["FailureRecord"]
