"""Tests for transformation hooks and delivery signals."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from courier.hooks import Hooks, Signals
from courier.models import DeliveryOutcome, Notification


def make_notification() -> Notification:
    return Notification(
        kind="blocked",
        recipient="admin@example.com",
        subject="Webhook URL Blocked - Courier",
        body="...",
        url="https://example.com",
        error_message="HTTP Status Code: 500",
    )


class TestHooksPassthrough:
    """Unset hooks should return their input unchanged."""

    def test_all_identity(self):
        """Every apply_* should be the identity without a hook."""
        hooks = Hooks()
        outcome = DeliveryOutcome.failed("u", status_code=500)
        message = make_notification()

        assert hooks.apply_url("u", "post", 1) == "u"
        assert hooks.apply_payload({"a": 1}, "post", 1) == {"a": 1}
        assert hooks.apply_headers({"h": "v"}, "post", 1, None) == {"h": "v"}
        assert hooks.apply_notification(message, "u", outcome) is message
        assert hooks.apply_max_failures(10, None) == 10
        assert hooks.apply_timeout(30, "post") == 30
        assert hooks.apply_retry_base_time(60, "post", 0) == 60
        assert hooks.apply_retry_delay(120, 1, "post") == 120
        assert hooks.apply_enabled(True, "post") is True


class TestHooksApplied:
    """Set hooks should receive their context and transform values."""

    def test_url_hook_receives_entity(self):
        """URL hook should see the entity type and id."""
        seen = []

        def transform(url, entity_type, entity_id):
            seen.append((url, entity_type, entity_id))
            return f"{url}?type={entity_type}"

        hooks = Hooks(transform_url=transform)
        assert hooks.apply_url("https://x", "term", 7) == "https://x?type=term"
        assert seen == [("https://x", "term", 7)]

    def test_url_hook_none_becomes_empty(self):
        """A URL hook returning None should resolve to an empty URL."""
        hooks = Hooks(transform_url=lambda url, entity_type, entity_id: None)
        assert hooks.apply_url("https://x", "post", 1) == ""

    def test_payload_hook_veto(self):
        """A payload hook returning None should yield an empty payload."""
        hooks = Hooks(transform_payload=lambda payload, entity_type, entity_id: None)
        assert hooks.apply_payload({"a": 1}, "post", 1) == {}

    def test_notification_hook_false_suppresses(self):
        """Returning False from the notification hook should mean do not send."""
        hooks = Hooks(transform_notification=lambda message, url, outcome: False)
        outcome = DeliveryOutcome.failed("u", status_code=500)
        assert hooks.apply_notification(make_notification(), "u", outcome) is None

    def test_notification_hook_replaces(self):
        """The notification hook may return a modified message."""
        hooks = Hooks(
            transform_notification=lambda message, url, outcome: message.model_copy(
                update={"recipient": "ops@example.com"}
            )
        )
        outcome = DeliveryOutcome.failed("u", status_code=500)
        result = hooks.apply_notification(make_notification(), "u", outcome)
        assert result.recipient == "ops@example.com"

    def test_numeric_hooks_cast(self):
        """Numeric hooks should be cast to their declared types."""
        hooks = Hooks(
            transform_max_failures=lambda threshold, name: "3",
            transform_timeout=lambda seconds, name: 5,
            transform_retry_delay=lambda seconds, retry_count, name: min(seconds, 90),
        )
        assert hooks.apply_max_failures(10, None) == 3
        assert isinstance(hooks.apply_timeout(30, None), float)
        assert hooks.apply_retry_delay(120, 1, "post") == 90.0

    def test_enabled_hook(self):
        """The enabled hook should see the webhook name."""
        hooks = Hooks(transform_enabled=lambda enabled, name: name != "user")
        assert hooks.apply_enabled(True, "post") is True
        assert hooks.apply_enabled(True, "user") is False


class TestSignals:
    """Tests for the Signals observer lists."""

    @pytest.mark.asyncio
    async def test_emit_sync_and_async(self):
        """Both plain functions and coroutines should be called."""
        signals = Signals()
        sync_handler = MagicMock(return_value=None)
        async_handler = AsyncMock()
        signals.connect("delivery_succeeded", sync_handler)
        signals.connect("delivery_succeeded", async_handler)

        await signals.emit("delivery_succeeded", "https://example.com")

        sync_handler.assert_called_once_with("https://example.com")
        async_handler.assert_awaited_once_with("https://example.com")

    @pytest.mark.asyncio
    async def test_failing_handler_is_logged(self, caplog):
        """A raising handler should not stop the others."""
        signals = Signals()
        after = MagicMock(return_value=None)

        def broken(url):
            raise RuntimeError("boom")

        signals.connect("delivery_succeeded", broken)
        signals.connect("delivery_succeeded", after)

        with caplog.at_level(logging.ERROR, logger="courier.hooks"):
            await signals.emit("delivery_succeeded", "https://example.com")

        after.assert_called_once()
        assert "boom" in caplog.text

    def test_disconnect(self):
        """disconnect should report whether the handler was connected."""
        signals = Signals()
        handler = MagicMock()
        signals.connect("destination_blocked", handler)
        assert signals.disconnect("destination_blocked", handler) is True
        assert signals.disconnect("destination_blocked", handler) is False
        assert signals.destination_blocked == []
