"""Per-destination failure tracking and circuit blocking.

One FailureRecord per destination URL, stored under a key derived from a
SHA-256 of the URL. Every write refreshes the entry's TTL, so the failure
counter window rolls forward from the last failure. The block window is
independent: ``is_blocked`` compares ``blocked_at`` against it on every
read and clears a stale block in place, so an endpoint stays blocked for
the full window even if the counter entry is rewritten.

Load-modify-save is not atomic. Two workers failing on the same URL at
once may lose an increment; later failures still reach the threshold.
"""

from __future__ import annotations

import hashlib
import logging
from datetime import timedelta

from courier.models import Clock, FailureRecord, utc_now
from courier.storage import FailureStore

logger = logging.getLogger(__name__)

KEY_PREFIX = "courier:failure:"


def failure_key(url: str) -> str:
    """Storage key for a destination URL."""
    return f"{KEY_PREFIX}{hashlib.sha256(url.encode('utf-8')).hexdigest()}"


class FailureTracker:
    """Reads and writes FailureRecords for destination URLs.

    Example:
        ```python
        tracker = FailureTracker(InMemoryFailureStore())
        record = await tracker.record_failure("https://example.com/hook")
        if record.failed_event_count >= 10:
            await tracker.block("https://example.com/hook")
        ```
    """

    def __init__(
        self,
        store: FailureStore,
        failure_window_seconds: int = 3600,
        block_window_seconds: int = 3600,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize the tracker.

        Args:
            store: Expiring key-value store for records.
            failure_window_seconds: TTL applied on every write.
            block_window_seconds: How long a block lasts after blocked_at.
            clock: Time source.
        """
        self._store = store
        self._ttl = failure_window_seconds
        self._block_window = timedelta(seconds=block_window_seconds)
        self._clock = clock

    async def load(self, url: str) -> FailureRecord:
        """Current record for a URL, or a fresh one if missing or expired."""
        data = await self._store.get(failure_key(url))
        if data is None:
            return FailureRecord.fresh()
        return FailureRecord.model_validate(data)

    async def save(self, url: str, record: FailureRecord) -> None:
        await self._store.set(failure_key(url), record.model_dump(mode="json"), self._ttl)

    async def record_failure(self, url: str) -> FailureRecord:
        """Count one failed event for a URL and return the updated record."""
        record = await self.load(url)
        record.increment(self._clock())
        await self.save(url, record)
        logger.info("Recorded failed event %d for %s", record.failed_event_count, url)
        return record

    async def record_success(self, url: str) -> None:
        """Reset a URL to a fresh record, clearing any block."""
        await self.save(url, FailureRecord.fresh())

    async def is_blocked(self, url: str) -> bool:
        """Whether new deliveries to the URL are rejected.

        A block older than the block window is cleared and written back.
        """
        record = await self.load(url)
        if record.is_block_expired(self._clock(), self._block_window):
            record.unblock()
            await self.save(url, record)
            logger.info("Block on %s expired, unblocking", url)
            return False
        return record.blocked

    async def block(self, url: str) -> FailureRecord:
        """Block a URL starting now."""
        record = await self.load(url)
        record.block(self._clock())
        await self.save(url, record)
        logger.warning("Blocked webhook URL %s", url)
        return record
