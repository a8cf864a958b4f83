"""Per-event retry scheduling with exponential backoff.

A retry re-enqueues the same request with its ``retry-count`` header
bumped. Retries never touch the failure tracker: only an event whose
retries are exhausted counts toward blocking.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from courier.hooks import Hooks
from courier.models import DeliveryRequest, WebhookConfig

if TYPE_CHECKING:
    from courier.queue import TaskQueue

logger = logging.getLogger(__name__)


def backoff_delay(attempt: int, base_seconds: float) -> float:
    """Delay before retry ``attempt`` (1-indexed): base, 2x base, 4x base, ..."""
    return base_seconds * (2 ** (attempt - 1))


class RetryScheduler:
    """Decides whether a failed event gets another attempt, and enqueues it."""

    def __init__(
        self,
        queue: TaskQueue,
        hooks: Hooks,
        task_name: str,
        group: str,
        base_seconds: float = 60,
    ) -> None:
        self._queue = queue
        self._hooks = hooks
        self._task_name = task_name
        self._group = group
        self._base_seconds = base_seconds

    async def maybe_retry(
        self, request: DeliveryRequest, config: WebhookConfig | None
    ) -> float | None:
        """Schedule a retry for a failed request if any remain.

        Args:
            request: The request that just failed.
            config: Its webhook configuration; ad-hoc requests get no retries.

        Returns:
            Delay in seconds of the scheduled retry, or None when exhausted.
        """
        retry_count = request.retry_count
        max_retries = config.max_retries if config else 0
        if retry_count >= max_retries:
            return None

        webhook_name = config.name if config else None
        attempt = retry_count + 1
        base = self._hooks.apply_retry_base_time(self._base_seconds, webhook_name, retry_count)
        delay = self._hooks.apply_retry_delay(
            backoff_delay(attempt, base), retry_count, webhook_name
        )

        retry = request.with_retry_count(attempt)
        await self._queue.enqueue(delay, self._task_name, retry.task_args(), self._group)
        logger.info(
            "Webhook scheduled for retry: %s %s/%s to %s (retry %d of %d in %.0fs)",
            request.action,
            request.entity_type,
            request.entity_id,
            request.url,
            attempt,
            max_retries,
            delay,
        )
        return delay
