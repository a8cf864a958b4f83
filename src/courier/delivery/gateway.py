"""Dispatch gateway: the public entry point for scheduling deliveries.

Runs inside the caller's event handler, so it never performs network I/O
of its own; it resolves the destination, applies hooks, deduplicates
against pending work and hands the request to the task engine.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from courier.exceptions import (
    DestinationBlockedError,
    EmptyPayloadError,
    InvalidRequestError,
    NoDestinationError,
    TransportUnavailableError,
)
from courier.hooks import Hooks
from courier.models import DeliveryRequest, EntityId

if TYPE_CHECKING:
    from courier.config import Settings
    from courier.queue import TaskQueue

    from .tracker import FailureTracker

logger = logging.getLogger(__name__)


class DispatchGateway:
    """Deduplicates and enqueues webhook deliveries.

    Example:
        ```python
        gateway = DispatchGateway(queue, tracker, hooks, settings)
        await gateway.schedule(
            action="update",
            entity_type="post",
            entity_id=42,
            url="https://example.com/hook",
            payload={"post_type": "page"},
        )
        ```
    """

    def __init__(
        self,
        queue: TaskQueue | None,
        tracker: FailureTracker,
        hooks: Hooks,
        settings: Settings,
    ) -> None:
        self._queue = queue
        self._tracker = tracker
        self._hooks = hooks
        self._settings = settings

    def resolve_url(self, url: str | None, entity_type: str, entity_id: EntityId) -> str:
        """Apply the URL hook, then the global override, which always wins."""
        resolved = self._hooks.apply_url(url or "", entity_type, entity_id)
        if self._settings.url_override:
            resolved = self._settings.url_override
        return resolved

    async def schedule(
        self,
        action: str,
        entity_type: str,
        entity_id: EntityId,
        url: str | None,
        payload: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> DeliveryRequest | None:
        """Enqueue a delivery unless an identical one is already pending.

        Args:
            action: create, update, delete or a custom action.
            entity_type: post, term, user, meta or a custom type.
            entity_id: Entity identifier.
            url: Caller-supplied destination (may be empty).
            payload: Fields to deliver.
            headers: Request headers, including the webhook-name marker.

        Returns:
            The enqueued request, or None if a duplicate was already pending.

        Raises:
            TransportUnavailableError: If the task engine is missing.
            NoDestinationError: If no URL resolves.
            DestinationBlockedError: If the URL is currently blocked.
            EmptyPayloadError: If the payload hook vetoed the delivery.
            InvalidRequestError: If the request fields fail validation.
        """
        if self._queue is None or not self._queue.is_available():
            raise TransportUnavailableError()

        resolved_url = self.resolve_url(url, entity_type, entity_id)
        if not resolved_url:
            raise NoDestinationError()

        if await self._tracker.is_blocked(resolved_url):
            raise DestinationBlockedError(resolved_url)

        resolved_payload = self._hooks.apply_payload(dict(payload or {}), entity_type, entity_id)
        if not resolved_payload:
            raise EmptyPayloadError()

        # Header values travel as strings, e.g. retry-count
        try:
            request = DeliveryRequest(
                url=resolved_url,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                payload=resolved_payload,
                headers={str(k): str(v) for k, v in (headers or {}).items()},
            )
        except ValidationError as e:
            error = e.errors()[0]
            field = ".".join(str(part) for part in error["loc"]) or "request"
            raise InvalidRequestError(field, error["msg"]) from e

        pending = await self._queue.find_pending(
            self._settings.task_name,
            self._settings.task_group,
            request.dedup_args(),
        )
        if pending:
            logger.debug(
                "Skipping duplicate webhook %s %s/%s to %s",
                action,
                entity_type,
                entity_id,
                resolved_url,
            )
            return None

        await self._queue.enqueue(
            self._settings.dispatch_delay_seconds,
            self._settings.task_name,
            request.task_args(),
            self._settings.task_group,
        )
        logger.debug("Scheduled webhook %s %s/%s to %s", action, entity_type, entity_id, resolved_url)
        return request
