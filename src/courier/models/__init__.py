"""Data models for Courier.

Webhook Types:
    - WebhookConfig: Immutable per-webhook configuration
    - DeliveryRequest: One pending delivery on the task engine

Failure Tracking:
    - FailureRecord: Consecutive-failure and block state of a URL

Results:
    - DeliveryOutcome: Result of one delivery attempt
    - Notification: Outgoing admin notice
    - ScheduledTask: In-process task engine record
"""

from .base import Clock, generate_id, utc_now
from .failure import FailureRecord
from .outcome import DeliveryOutcome, Notification, NotificationKind
from .task import ScheduledTask, TaskStatus
from .webhook import (
    ACTIONS,
    RETRY_COUNT_HEADER,
    WEBHOOK_NAME_HEADER,
    DeliveryRequest,
    EntityId,
    WebhookConfig,
)

__all__ = [
    # Helpers
    "Clock",
    "generate_id",
    "utc_now",
    # Webhooks
    "ACTIONS",
    "DeliveryRequest",
    "EntityId",
    "RETRY_COUNT_HEADER",
    "WEBHOOK_NAME_HEADER",
    "WebhookConfig",
    # Failure tracking
    "FailureRecord",
    # Results
    "DeliveryOutcome",
    "Notification",
    "NotificationKind",
    "ScheduledTask",
    "TaskStatus",
]
