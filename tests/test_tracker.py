"""Tests for per-URL failure tracking and blocking."""

from __future__ import annotations

import hashlib

import pytest

from courier.delivery import FailureTracker, failure_key
from courier.delivery.tracker import KEY_PREFIX

URL = "https://example.com/webhook"


class TestFailureKey:
    """Tests for failure_key."""

    def test_sha256_of_url(self):
        """The key should be the prefix plus the SHA-256 hex of the URL."""
        expected = KEY_PREFIX + hashlib.sha256(URL.encode()).hexdigest()
        assert failure_key(URL) == expected

    def test_distinct_urls(self):
        """Different URLs should map to different keys."""
        assert failure_key(URL) != failure_key(URL + "?x=1")


class TestFailureTracker:
    """Tests for FailureTracker."""

    @pytest.mark.asyncio
    async def test_load_missing_is_fresh(self, tracker):
        """A URL with no record should load as fresh."""
        record = await tracker.load(URL)
        assert record.failed_event_count == 0
        assert record.blocked is False

    @pytest.mark.asyncio
    async def test_record_failure_counts(self, tracker, clock):
        """Each call should count one failed event."""
        first = await tracker.record_failure(URL)
        clock.advance(10)
        second = await tracker.record_failure(URL)
        assert first.failed_event_count == 1
        assert second.failed_event_count == 2
        assert second.first_failure_at == first.first_failure_at

    @pytest.mark.asyncio
    async def test_record_success_resets(self, tracker):
        """Success should reset the count and clear any block."""
        await tracker.record_failure(URL)
        await tracker.block(URL)
        await tracker.record_success(URL)
        record = await tracker.load(URL)
        assert record.failed_event_count == 0
        assert record.blocked is False
        assert not await tracker.is_blocked(URL)

    @pytest.mark.asyncio
    async def test_failure_window_expires(self, tracker, clock):
        """The counter should reset one hour after the last write."""
        await tracker.record_failure(URL)
        clock.advance(3600)
        record = await tracker.record_failure(URL)
        assert record.failed_event_count == 1

    @pytest.mark.asyncio
    async def test_failure_window_rolls_forward(self, tracker, clock):
        """Each failure should refresh the window."""
        await tracker.record_failure(URL)
        clock.advance(3000)
        await tracker.record_failure(URL)
        clock.advance(3000)
        record = await tracker.record_failure(URL)
        assert record.failed_event_count == 3

    @pytest.mark.asyncio
    async def test_block(self, tracker, clock):
        """block should stamp the current time."""
        record = await tracker.block(URL)
        assert record.blocked is True
        assert record.blocked_at == clock()
        assert await tracker.is_blocked(URL)

    @pytest.mark.asyncio
    async def test_block_auto_expires(self, tracker, store, clock):
        """A block older than the window should clear on read."""
        await tracker.block(URL)
        clock.advance(1800)
        assert await tracker.is_blocked(URL)

        # Keep the entry alive past blocked_at + 1h with an extra write
        record = await tracker.load(URL)
        await tracker.save(URL, record)
        clock.advance(1801)

        assert await tracker.is_blocked(URL) is False
        stored = await tracker.load(URL)
        assert stored.blocked is False
        assert stored.blocked_at is None

    @pytest.mark.asyncio
    async def test_block_window_independent_of_ttl(self, store, clock):
        """A short block window should clear a block the TTL still keeps."""
        tracker = FailureTracker(store, failure_window_seconds=3600, block_window_seconds=60, clock=clock)
        await tracker.block(URL)
        clock.advance(61)
        assert await tracker.is_blocked(URL) is False

    @pytest.mark.asyncio
    async def test_records_are_per_url(self, tracker):
        """Failures on one URL should not affect another."""
        await tracker.record_failure(URL)
        await tracker.block(URL)
        other = await tracker.load("https://other.example.com")
        assert other.failed_event_count == 0
        assert not await tracker.is_blocked("https://other.example.com")
