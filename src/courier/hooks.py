"""Extension points and observable signals.

Hooks are optional, typed callbacks set once when the Courier context is
built. Every ``apply_*`` method returns its input unchanged when the
matching hook is unset, so callers never branch on hook presence.

Signals are fire-and-forget notifications for loggers and metrics.
Handlers may be plain functions or coroutines; a failing handler is
logged and never affects the delivery that emitted the signal.

Example:
    ```python
    hooks = Hooks(
        transform_payload=lambda payload, entity_type, entity_id: (
            {} if entity_type == "draft" else payload
        ),
        transform_retry_delay=lambda delay, retry_count, name: min(delay, 600),
    )

    signals = Signals()
    signals.connect("destination_blocked", lambda url, outcome, max_failures: ...)
    ```
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

from courier.models import DeliveryOutcome, EntityId, Notification

logger = logging.getLogger(__name__)

UrlHook = Callable[[str, str, EntityId], str]
PayloadHook = Callable[[dict[str, Any], str, EntityId], dict[str, Any]]
HeadersHook = Callable[[dict[str, str], str, EntityId, str | None], dict[str, str]]
NotificationHook = Callable[
    [Notification, str, DeliveryOutcome], Notification | Literal[False] | None
]
MaxFailuresHook = Callable[[int, str | None], int]
TimeoutHook = Callable[[float, str | None], float]
RetryBaseTimeHook = Callable[[float, str | None, int], float]
RetryDelayHook = Callable[[float, int, str | None], float]
EnabledHook = Callable[[bool, str], bool]

SignalName = Literal["delivery_succeeded", "delivery_failed", "destination_blocked"]


@dataclass
class Hooks:
    """Optional transformation callbacks, one per extension point."""

    transform_url: UrlHook | None = None
    transform_payload: PayloadHook | None = None
    transform_headers: HeadersHook | None = None
    transform_notification: NotificationHook | None = None
    transform_max_failures: MaxFailuresHook | None = None
    transform_timeout: TimeoutHook | None = None
    transform_retry_base_time: RetryBaseTimeHook | None = None
    transform_retry_delay: RetryDelayHook | None = None
    transform_enabled: EnabledHook | None = None

    def apply_url(self, url: str, entity_type: str, entity_id: EntityId) -> str:
        if self.transform_url is None:
            return url
        return self.transform_url(url, entity_type, entity_id) or ""

    def apply_payload(
        self, payload: dict[str, Any], entity_type: str, entity_id: EntityId
    ) -> dict[str, Any]:
        if self.transform_payload is None:
            return payload
        return self.transform_payload(payload, entity_type, entity_id) or {}

    def apply_headers(
        self,
        headers: dict[str, str],
        entity_type: str,
        entity_id: EntityId,
        webhook_name: str | None,
    ) -> dict[str, str]:
        if self.transform_headers is None:
            return headers
        return self.transform_headers(headers, entity_type, entity_id, webhook_name)

    def apply_notification(
        self, message: Notification, url: str, outcome: DeliveryOutcome
    ) -> Notification | None:
        """Transform an outgoing notice; None means do not send."""
        if self.transform_notification is None:
            return message
        result = self.transform_notification(message, url, outcome)
        return result or None

    def apply_max_failures(self, threshold: int, webhook_name: str | None) -> int:
        if self.transform_max_failures is None:
            return threshold
        return int(self.transform_max_failures(threshold, webhook_name))

    def apply_timeout(self, seconds: float, webhook_name: str | None) -> float:
        if self.transform_timeout is None:
            return seconds
        return float(self.transform_timeout(seconds, webhook_name))

    def apply_retry_base_time(
        self, seconds: float, webhook_name: str | None, retry_count: int
    ) -> float:
        if self.transform_retry_base_time is None:
            return seconds
        return float(self.transform_retry_base_time(seconds, webhook_name, retry_count))

    def apply_retry_delay(self, seconds: float, retry_count: int, webhook_name: str | None) -> float:
        if self.transform_retry_delay is None:
            return seconds
        return float(self.transform_retry_delay(seconds, retry_count, webhook_name))

    def apply_enabled(self, enabled: bool, webhook_name: str) -> bool:
        if self.transform_enabled is None:
            return enabled
        return bool(self.transform_enabled(enabled, webhook_name))


@dataclass
class Signals:
    """Observer lists for delivery events.

    Signatures:
        delivery_succeeded(url)
        delivery_failed(url, outcome, failure_count, max_failures)
        destination_blocked(url, outcome, max_failures)
    """

    delivery_succeeded: list[Callable[..., Any]] = field(default_factory=list)
    delivery_failed: list[Callable[..., Any]] = field(default_factory=list)
    destination_blocked: list[Callable[..., Any]] = field(default_factory=list)

    def connect(self, signal: SignalName, handler: Callable[..., Any]) -> None:
        """Subscribe a handler to a signal."""
        getattr(self, signal).append(handler)

    def disconnect(self, signal: SignalName, handler: Callable[..., Any]) -> bool:
        """Remove a handler. Returns False if it was not connected."""
        handlers: list[Callable[..., Any]] = getattr(self, signal)
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    async def emit(self, signal: SignalName, *args: Any) -> None:
        """Call every handler of a signal, awaiting coroutine results."""
        for handler in list(getattr(self, signal)):
            try:
                result = handler(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error("Signal handler for %s failed: %s", signal, e, exc_info=True)


__all__ = [
    "EnabledHook",
    "HeadersHook",
    "Hooks",
    "MaxFailuresHook",
    "NotificationHook",
    "PayloadHook",
    "RetryBaseTimeHook",
    "RetryDelayHook",
    "SignalName",
    "Signals",
    "TimeoutHook",
    "UrlHook",
]
