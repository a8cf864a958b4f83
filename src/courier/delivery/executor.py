"""Delivery executor: performs the HTTP POST and does the bookkeeping.

Invoked by the task engine once a scheduled delivery is due. Only an
exact HTTP 200 counts as success; any other status, 2xx included, and
any transport error is a failure. A failure first tries to schedule a
retry. Only when no retry remains is the event counted against the
destination, possibly blocking it.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import httpx

from courier.exceptions import DeliveryFailedError, DestinationBlockedError
from courier.hooks import Hooks, Signals
from courier.logging import delivery_context
from courier.models import DeliveryOutcome, DeliveryRequest, WebhookConfig

if TYPE_CHECKING:
    from courier.config import Settings
    from courier.webhooks import WebhookRegistry

    from .retry import RetryScheduler
    from .tracker import FailureTracker

logger = logging.getLogger(__name__)


class DeliveryExecutor:
    """Sends due deliveries and tracks their outcome.

    Example:
        ```python
        executor = DeliveryExecutor(tracker, retry, hooks, signals, settings, registry)
        outcome = await executor.execute(request)
        if not outcome.success and not outcome.retry_scheduled:
            print(f"{outcome.url} failed {outcome.failure_count} times")
        ```
    """

    def __init__(
        self,
        tracker: FailureTracker,
        retry: RetryScheduler,
        hooks: Hooks,
        signals: Signals,
        settings: Settings,
        registry: WebhookRegistry | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            tracker: Failure tracker for destination state.
            retry: Retry scheduler for failed events.
            hooks: Transformation hooks.
            signals: Observers for delivery events.
            settings: Defaults for ad-hoc requests.
            registry: Webhook registry used to resolve per-webhook config.
            http_client: Shared client; a short-lived one is used per call if None.
        """
        self._tracker = tracker
        self._retry = retry
        self._hooks = hooks
        self._signals = signals
        self._settings = settings
        self._registry = registry
        self._http_client = http_client

    def resolve_config(self, request: DeliveryRequest) -> WebhookConfig | None:
        name = request.webhook_name
        if name is None or self._registry is None:
            return None
        return self._registry.get_config(name)

    def build_headers(self, request: DeliveryRequest) -> dict[str, str]:
        """Request headers after the headers hook.

        Content-Type is only added when absent, before the hook runs, so
        the hook has the final say.
        """
        headers = dict(request.headers)
        if not any(key.lower() == "content-type" for key in headers):
            headers["Content-Type"] = "application/json"
        return self._hooks.apply_headers(
            headers, request.entity_type, request.entity_id, request.webhook_name
        )

    async def execute(self, request: DeliveryRequest) -> DeliveryOutcome:
        """Deliver one request and record its outcome.

        Args:
            request: The due delivery.

        Returns:
            DeliveryOutcome describing the attempt and any bookkeeping.

        Raises:
            DestinationBlockedError: If the URL was blocked after enqueue.
        """
        with delivery_context(
            url=request.url,
            action=request.action,
            entity_type=request.entity_type,
            entity_id=request.entity_id,
        ):
            if await self._tracker.is_blocked(request.url):
                raise DestinationBlockedError(request.url)

            config = self.resolve_config(request)
            webhook_name = request.webhook_name
            timeout = self._hooks.apply_timeout(
                config.timeout_seconds if config else self._settings.default_timeout_seconds,
                webhook_name,
            )
            max_failures = self._hooks.apply_max_failures(
                config.max_consecutive_failures if config else self._settings.default_max_failures,
                webhook_name,
            )

            outcome = await self._post(
                request.url, request.body(), self.build_headers(request), timeout
            )

            if outcome.success:
                await self._tracker.record_success(request.url)
                logger.info(
                    "Webhook delivered: %s %s/%s to %s",
                    request.action,
                    request.entity_type,
                    request.entity_id,
                    request.url,
                )
                await self._signals.emit("delivery_succeeded", request.url)
                return outcome

            return await self._handle_failure(request, config, outcome, max_failures)

    async def handle_task(self, **task_args: Any) -> DeliveryOutcome:
        """Task engine entry point.

        Rebuilds the request from its task arguments and raises
        DeliveryFailedError on a failed outcome so the engine records the
        attempt as failed. Retry and blocking decisions are already made
        by then.
        """
        request = DeliveryRequest.model_validate(task_args)
        outcome = await self.execute(request)
        if not outcome.success:
            raise DeliveryFailedError(outcome.url, outcome.status_code, outcome.error)
        return outcome

    async def _post(
        self,
        url: str,
        body: dict[str, Any],
        headers: dict[str, str],
        timeout: float,
    ) -> DeliveryOutcome:
        content = json.dumps(body)
        try:
            if self._http_client is not None:
                response = await self._http_client.post(
                    url, content=content, headers=headers, timeout=timeout
                )
            else:
                async with httpx.AsyncClient(timeout=timeout) as client:
                    response = await client.post(url, content=content, headers=headers)
        except httpx.TimeoutException as e:
            return DeliveryOutcome.failed(url, error=f"Request timeout: {str(e) or type(e).__name__}")
        except (httpx.RequestError, httpx.InvalidURL) as e:
            return DeliveryOutcome.failed(url, error=str(e) or type(e).__name__)

        if response.status_code == 200:
            return DeliveryOutcome.succeeded(url, response.status_code, response.text)
        return DeliveryOutcome.failed(
            url, status_code=response.status_code, response_body=response.text
        )

    async def _handle_failure(
        self,
        request: DeliveryRequest,
        config: WebhookConfig | None,
        outcome: DeliveryOutcome,
        max_failures: int,
    ) -> DeliveryOutcome:
        outcome.max_failures = max_failures

        delay = await self._retry.maybe_retry(request, config)
        if delay is not None:
            outcome.retry_scheduled = True
            outcome.retry_delay = delay
            return outcome

        record = await self._tracker.record_failure(request.url)
        already_blocked = record.blocked
        outcome.failure_count = record.failed_event_count

        logger.warning(
            "Webhook failed: %s %s/%s to %s (%s), %d of %d consecutive failures",
            request.action,
            request.entity_type,
            request.entity_id,
            request.url,
            outcome.error_detail,
            record.failed_event_count,
            max_failures,
        )
        await self._signals.emit(
            "delivery_failed", request.url, outcome, record.failed_event_count, max_failures
        )

        if record.failed_event_count >= max_failures and not already_blocked:
            await self._tracker.block(request.url)
            outcome.blocked = True
            await self._signals.emit("destination_blocked", request.url, outcome, max_failures)

        return outcome
