"""Admin notifications for failing and blocked destinations.

Subscribes to delivery signals. A "failed" notice goes out on the first
failed event of a failure window; a "blocked" notice goes out when the
executor blocks a URL, which happens once per threshold crossing.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from courier.hooks import Hooks, Signals
from courier.models import Clock, DeliveryOutcome, Notification, utc_now

if TYPE_CHECKING:
    from courier.config import Settings

    from .mailer import Mailer

logger = logging.getLogger(__name__)

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

FAILED_BODY = """A webhook delivery has failed.

URL: {url}
Error: {error}
Time: {time}

This webhook will be blocked after {max_failures} consecutive failures within 1 hour."""

BLOCKED_BODY = """A webhook URL has been blocked due to consecutive failures.

URL: {url}
Consecutive Failures: {max_failures}
Last Error: {error}
Time: {time}

This URL will be automatically unblocked after 1 hour. No webhooks will be delivered to this URL until then."""


class BlockedNotifier:
    """Composes and sends admin notices for delivery failures.

    Example:
        ```python
        notifier = BlockedNotifier(get_mailer(settings), hooks, settings)
        notifier.attach(signals)
        ```
    """

    def __init__(
        self,
        mailer: Mailer,
        hooks: Hooks,
        settings: Settings,
        clock: Clock = utc_now,
    ) -> None:
        self._mailer = mailer
        self._hooks = hooks
        self._settings = settings
        self._clock = clock

    def attach(self, signals: Signals) -> None:
        """Subscribe to failure and block signals."""
        signals.connect("delivery_failed", self.on_delivery_failed)
        signals.connect("destination_blocked", self.on_destination_blocked)

    async def on_delivery_failed(
        self, url: str, outcome: DeliveryOutcome, failure_count: int, max_failures: int
    ) -> None:
        if failure_count != 1:
            return
        message = self.compose("failed", url, outcome, max_failures)
        if message is not None:
            await self.send(message, url, outcome)

    async def on_destination_blocked(
        self, url: str, outcome: DeliveryOutcome, max_failures: int
    ) -> None:
        message = self.compose("blocked", url, outcome, max_failures)
        if message is not None:
            await self.send(message, url, outcome)

    def compose(
        self,
        kind: str,
        url: str,
        outcome: DeliveryOutcome,
        max_failures: int,
    ) -> Notification | None:
        """Build the default notice, or None when no recipient is configured."""
        recipient = self._settings.admin_email
        if not recipient:
            return None

        template = BLOCKED_BODY if kind == "blocked" else FAILED_BODY
        title = "Webhook URL Blocked" if kind == "blocked" else "Webhook Delivery Failed"
        error = outcome.error_detail
        return Notification(
            kind="blocked" if kind == "blocked" else "failed",
            recipient=recipient,
            subject=f"{title} - {self._settings.site_name}",
            body=template.format(
                url=url,
                error=error,
                max_failures=max_failures,
                time=self._clock().strftime(TIME_FORMAT),
            ),
            url=url,
            error_message=error,
        )

    async def send(self, message: Notification, url: str, outcome: DeliveryOutcome) -> bool:
        """Apply the notification hook and send. Returns False if vetoed."""
        final = self._hooks.apply_notification(message, url, outcome)
        if final is None:
            logger.info("Notification for %s suppressed by hook", url)
            return False
        await self._mailer.send(final)
        return True
