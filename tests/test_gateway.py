"""Tests for the dispatch gateway."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from courier.delivery import DispatchGateway
from courier.exceptions import (
    DestinationBlockedError,
    EmptyPayloadError,
    InvalidRequestError,
    NoDestinationError,
    TransportUnavailableError,
)
from courier.hooks import Hooks
from courier.models import TaskStatus
from courier.queue import InProcessTaskQueue

URL = "https://example.com/webhook"


class TestSchedule:
    """Tests for DispatchGateway.schedule."""

    @pytest.mark.asyncio
    async def test_enqueues_with_delay(self, gateway, queue, clock, settings):
        """A valid request should be enqueued five seconds out."""
        request = await gateway.schedule("update", "post", 42, URL, {"post_type": "page"})

        assert request is not None
        tasks = queue.pending()
        assert len(tasks) == 1
        task = tasks[0]
        assert task.task_name == settings.task_name
        assert task.group == settings.task_group
        assert (task.run_at - clock()).total_seconds() == 5
        assert task.args == request.task_args()

    @pytest.mark.asyncio
    async def test_idempotent(self, gateway, queue):
        """Identical pending deliveries should be enqueued once."""
        first = await gateway.schedule("update", "post", 42, URL, {"post_type": "page"})
        second = await gateway.schedule("update", "post", 42, URL, {"post_type": "post"})

        assert first is not None
        assert second is None
        assert len(queue.pending()) == 1

    @pytest.mark.asyncio
    async def test_different_action_not_deduplicated(self, gateway, queue):
        """Dedup is keyed on url, action, entity type and id."""
        await gateway.schedule("update", "post", 42, URL, {"post_type": "page"})
        await gateway.schedule("delete", "post", 42, URL, {"post_type": "page"})
        await gateway.schedule("update", "post", 43, URL, {"post_type": "page"})
        assert len(queue.pending()) == 3

    @pytest.mark.asyncio
    async def test_finished_task_does_not_block_new_one(self, gateway, queue):
        """Only pending tasks count as duplicates."""
        await gateway.schedule("update", "post", 42, URL, {"post_type": "page"})
        queue.pending()[0].status = TaskStatus.COMPLETE
        assert await gateway.schedule("update", "post", 42, URL, {"post_type": "page"}) is not None

    @pytest.mark.asyncio
    async def test_transport_unavailable(self, tracker, hooks, settings, clock):
        """A missing or unavailable engine should be reported first."""
        unavailable = DispatchGateway(InProcessTaskQueue(clock, available=False), tracker, hooks, settings)
        with pytest.raises(TransportUnavailableError):
            await unavailable.schedule("update", "post", 42, "", {})

        missing = DispatchGateway(None, tracker, hooks, settings)
        with pytest.raises(TransportUnavailableError):
            await missing.schedule("update", "post", 42, URL, {"a": 1})

    @pytest.mark.asyncio
    async def test_no_destination(self, gateway):
        """An empty URL should raise NoDestinationError."""
        with pytest.raises(NoDestinationError):
            await gateway.schedule("update", "post", 42, "", {"post_type": "page"})

    @pytest.mark.asyncio
    async def test_blocked(self, gateway, tracker, queue):
        """Blocked URLs should be rejected before enqueue."""
        await tracker.block(URL)
        with pytest.raises(DestinationBlockedError) as exc_info:
            await gateway.schedule("update", "post", 42, URL, {"post_type": "page"})
        assert exc_info.value.url == URL
        assert queue.tasks == []

    @pytest.mark.asyncio
    async def test_empty_payload(self, gateway, queue):
        """An empty payload should raise EmptyPayloadError."""
        with pytest.raises(EmptyPayloadError):
            await gateway.schedule("update", "post", 42, URL, {})
        assert queue.tasks == []

    @pytest.mark.asyncio
    async def test_payload_hook_veto(self, queue, tracker, settings):
        """The payload hook can veto a delivery by returning an empty payload."""
        hooks = Hooks(
            transform_payload=lambda payload, entity_type, entity_id: {} if entity_id == 42 else payload
        )
        gateway = DispatchGateway(queue, tracker, hooks, settings)

        with pytest.raises(EmptyPayloadError):
            await gateway.schedule("update", "post", 42, URL, {"post_type": "page"})
        assert await gateway.schedule("update", "post", 43, URL, {"post_type": "page"}) is not None

    @pytest.mark.asyncio
    async def test_url_hook(self, queue, tracker, settings):
        """The URL hook should be able to supply a destination."""
        hooks = Hooks(transform_url=lambda url, entity_type, entity_id: url or f"https://{entity_type}.example.com")
        gateway = DispatchGateway(queue, tracker, hooks, settings)

        request = await gateway.schedule("create", "term", 3, "", {"taxonomy": "category"})
        assert request.url == "https://term.example.com"

    @pytest.mark.asyncio
    async def test_override_wins(self, queue, tracker, settings):
        """The global override should replace both hook and caller URLs."""
        settings = settings.model_copy(update={"url_override": "https://override.example.com"})
        hooks = Hooks(transform_url=lambda url, entity_type, entity_id: "https://hook.example.com")
        gateway = DispatchGateway(queue, tracker, hooks, settings)

        request = await gateway.schedule("update", "post", 42, URL, {"post_type": "page"})
        assert request.url == "https://override.example.com"
        assert queue.tasks[0].args["url"] == "https://override.example.com"

    @pytest.mark.asyncio
    async def test_override_checked_for_block(self, queue, tracker, settings):
        """The block check should use the resolved URL."""
        settings = settings.model_copy(update={"url_override": "https://override.example.com"})
        await tracker.block("https://override.example.com")
        gateway = DispatchGateway(queue, tracker, Hooks(), settings)

        with pytest.raises(DestinationBlockedError):
            await gateway.schedule("update", "post", 42, URL, {"post_type": "page"})

    @pytest.mark.asyncio
    async def test_headers_travel_with_task(self, gateway, queue):
        """Headers should be stored on the task."""
        await gateway.schedule(
            "update", "post", 42, URL, {"post_type": "page"}, {"webhook-name": "post"}
        )
        assert queue.tasks[0].args["headers"] == {"webhook-name": "post"}

    @pytest.mark.asyncio
    async def test_header_values_become_strings(self, gateway, queue):
        """Non-string header values should be stored as strings."""
        request = await gateway.schedule(
            "update", "post", 42, URL, {"post_type": "page"}, {"retry-count": 1, "X-Trace": 5.5}
        )
        assert request.headers == {"retry-count": "1", "X-Trace": "5.5"}
        assert queue.tasks[0].args["headers"] == {"retry-count": "1", "X-Trace": "5.5"}

    @pytest.mark.asyncio
    async def test_invalid_request(self, gateway, queue):
        """Fields the request model rejects should raise a Courier error."""
        with pytest.raises(InvalidRequestError) as exc_info:
            await gateway.schedule("update", "post", None, URL, {"post_type": "page"})
        assert exc_info.value.field.startswith("entity_id")
        assert queue.tasks == []

    @pytest.mark.asyncio
    async def test_no_network_io(self, tracker, hooks, settings):
        """The gateway should only talk to the queue and the tracker."""
        queue = MagicMock()
        queue.is_available.return_value = True
        queue.find_pending = AsyncMock(return_value=[])
        queue.enqueue = AsyncMock()
        gateway = DispatchGateway(queue, tracker, hooks, settings)

        await gateway.schedule("update", "post", 42, URL, {"post_type": "page"})

        queue.find_pending.assert_awaited_once_with(
            settings.task_name,
            settings.task_group,
            {"url": URL, "action": "update", "entity_type": "post", "entity_id": 42},
        )
        queue.enqueue.assert_awaited_once()
        assert queue.enqueue.await_args.args[0] == settings.dispatch_delay_seconds
