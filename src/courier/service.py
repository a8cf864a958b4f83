"""Courier service: wires the dispatcher components together.

Example:
    ```python
    from courier.service import CourierService

    async with CourierService.create() as courier:
        courier.register_default_webhooks()
        await courier.registry.get("post").on_save(42, "page", update=True)

        # With the in-process queue, run due deliveries yourself
        await courier.queue.run_due()
    ```
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx

from courier.config import Settings
from courier.delivery import DeliveryExecutor, DispatchGateway, FailureTracker, RetryScheduler
from courier.hooks import Hooks, Signals
from courier.models import Clock, DeliveryRequest, EntityId, utc_now
from courier.notifications import BlockedNotifier, Mailer, get_mailer
from courier.queue import ArqTaskQueue, InProcessTaskQueue, TaskQueue, get_task_queue
from courier.storage import FailureStore, RedisFailureStore, get_failure_store
from courier.webhooks import MetaWebhook, PostWebhook, TermWebhook, UserWebhook, WebhookRegistry


@dataclass
class CourierService:
    """One dispatcher context per process.

    Every component is constructed here and handed its collaborators
    explicitly; nothing is looked up from module globals.

    Attributes:
        settings: Configuration settings.
        hooks: Transformation hooks.
        signals: Delivery observers.
        store: Failure record store.
        queue: Task engine.
        tracker: Failure tracker.
        gateway: Dispatch gateway.
        registry: Webhook registry.
        retry: Retry scheduler.
        executor: Delivery executor.
        notifier: Admin notifier, attached to ``signals``.
        http_client: Shared HTTP client, closed with the service.
    """

    settings: Settings
    hooks: Hooks
    signals: Signals
    store: FailureStore
    queue: TaskQueue
    tracker: FailureTracker
    gateway: DispatchGateway
    registry: WebhookRegistry
    retry: RetryScheduler
    executor: DeliveryExecutor
    notifier: BlockedNotifier
    http_client: httpx.AsyncClient | None = field(default=None)

    @classmethod
    def create(
        cls,
        settings: Settings | None = None,
        *,
        hooks: Hooks | None = None,
        signals: Signals | None = None,
        store: FailureStore | None = None,
        queue: TaskQueue | None = None,
        mailer: Mailer | None = None,
        http_client: httpx.AsyncClient | None = None,
        clock: Clock = utc_now,
    ) -> CourierService:
        """Create a CourierService with default dependencies.

        Args:
            settings: Optional settings. Uses defaults if None.
            hooks: Transformation hooks.
            signals: Observers; the notifier subscribes to them.
            store: Failure store override (default from ``store_backend``).
            queue: Task queue override (default from ``queue_backend``).
            mailer: Mail transport override.
            http_client: Shared HTTP client for deliveries.
            clock: Time source for tracking, scheduling and notices.

        Returns:
            Configured CourierService instance.
        """
        if settings is None:
            settings = Settings()
        if hooks is None:
            hooks = Hooks()
        if signals is None:
            signals = Signals()
        if store is None:
            store = get_failure_store(settings, clock)
        if queue is None:
            queue = get_task_queue(settings, clock)
        if mailer is None:
            mailer = get_mailer(settings)

        tracker = FailureTracker(
            store,
            failure_window_seconds=settings.failure_window_seconds,
            block_window_seconds=settings.block_window_seconds,
            clock=clock,
        )
        gateway = DispatchGateway(queue, tracker, hooks, settings)
        registry = WebhookRegistry(gateway, hooks, default_url=settings.default_url)
        retry = RetryScheduler(
            queue,
            hooks,
            task_name=settings.task_name,
            group=settings.task_group,
            base_seconds=settings.retry_base_seconds,
        )
        executor = DeliveryExecutor(
            tracker,
            retry,
            hooks,
            signals,
            settings,
            registry=registry,
            http_client=http_client,
        )
        notifier = BlockedNotifier(mailer, hooks, settings, clock=clock)
        notifier.attach(signals)

        if isinstance(queue, InProcessTaskQueue):
            queue.register(settings.task_name, executor.handle_task)

        return cls(
            settings=settings,
            hooks=hooks,
            signals=signals,
            store=store,
            queue=queue,
            tracker=tracker,
            gateway=gateway,
            registry=registry,
            retry=retry,
            executor=executor,
            notifier=notifier,
            http_client=http_client,
        )

    def register_default_webhooks(self) -> None:
        """Register the post, term, user and meta webhooks with default config."""
        for webhook in (PostWebhook(), TermWebhook(), UserWebhook(), MetaWebhook()):
            self.registry.register(webhook)

    async def schedule(
        self,
        action: str,
        entity_type: str,
        entity_id: EntityId,
        url: str | None = None,
        payload: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> DeliveryRequest | None:
        """Schedule an ad-hoc delivery. See ``DispatchGateway.schedule``."""
        return await self.gateway.schedule(
            action,
            entity_type,
            entity_id,
            url if url is not None else (self.settings.default_url or ""),
            payload,
            headers,
        )

    async def initialize(self) -> None:
        """Open backend connections."""
        if isinstance(self.queue, ArqTaskQueue):
            await self.queue.connect()

    async def close(self) -> None:
        """Close backend connections and the shared HTTP client."""
        if isinstance(self.queue, ArqTaskQueue):
            await self.queue.aclose()
        if isinstance(self.store, RedisFailureStore):
            await self.store.aclose()
        if self.http_client is not None:
            await self.http_client.aclose()

    async def __aenter__(self) -> CourierService:
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()


__all__ = ["CourierService"]
