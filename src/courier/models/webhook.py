"""Webhook configuration and delivery request models.

A WebhookConfig is built once at startup and shared read-only between
concurrent deliveries. A DeliveryRequest is the unit of work handed to
the task engine; only plain JSON-serializable values travel with it.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Header carrying the registered webhook name, used to re-resolve its config
WEBHOOK_NAME_HEADER = "webhook-name"
# Header carrying how many retries already happened for this event
RETRY_COUNT_HEADER = "retry-count"

# Built-in actions; any other string is accepted as a custom action
ACTIONS: tuple[str, ...] = ("create", "update", "delete")

EntityId = int | str


class WebhookConfig(BaseModel):
    """Configuration for a registered webhook.

    Attributes:
        name: Unique webhook name (registry key).
        max_consecutive_failures: Failed events before the URL is blocked.
        max_retries: Retries per event before it counts as failed.
        timeout_seconds: HTTP request timeout.
        enabled: Whether this webhook emits at all.
        url: Destination URL; empty means "resolve at dispatch time".
        headers: Static headers merged into every request.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(min_length=1, description="Unique webhook name")
    max_consecutive_failures: int = Field(
        default=10, ge=1, description="Failed events before the URL is blocked"
    )
    max_retries: int = Field(default=0, ge=0, le=10, description="Retries per event")
    timeout_seconds: int = Field(default=30, ge=1, le=300, description="HTTP timeout")
    enabled: bool = Field(default=True, description="Whether webhook is active")
    url: str = Field(default="", description="Destination URL (may be empty)")
    headers: dict[str, str] = Field(default_factory=dict, description="Static headers")

    def request_headers(self) -> dict[str, str]:
        """Static headers plus the webhook-name marker."""
        return {**self.headers, WEBHOOK_NAME_HEADER: self.name}


class DeliveryRequest(BaseModel):
    """One pending delivery, as stored on the task engine.

    Two requests with the same (url, action, entity_type, entity_id) are
    the same delivery for dedup purposes.
    """

    model_config = ConfigDict(extra="forbid")

    url: str = Field(min_length=1)
    action: str = Field(min_length=1)
    entity_type: str = Field(min_length=1)
    entity_id: EntityId
    payload: dict[str, Any] = Field(default_factory=dict)
    headers: dict[str, str] = Field(default_factory=dict)

    @property
    def webhook_name(self) -> str | None:
        return self.headers.get(WEBHOOK_NAME_HEADER) or None

    @property
    def retry_count(self) -> int:
        try:
            return int(self.headers.get(RETRY_COUNT_HEADER, 0))
        except ValueError:
            return 0

    def dedup_args(self) -> dict[str, Any]:
        """Arguments that identify this delivery on the task engine."""
        return {
            "url": self.url,
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
        }

    def task_args(self) -> dict[str, Any]:
        """Full task arguments, JSON-serializable."""
        return self.model_dump(mode="json")

    def with_retry_count(self, retry_count: int) -> DeliveryRequest:
        """Copy of this request carrying an updated retry counter."""
        headers = {**self.headers, RETRY_COUNT_HEADER: str(retry_count)}
        return self.model_copy(update={"headers": headers})

    def body(self) -> dict[str, Any]:
        """Wire body: payload with the envelope fields on top.

        The envelope keys always win so caller data can never shadow them.
        """
        return {
            **self.payload,
            "action": self.action,
            "entity_type": self.entity_type,
            "id": self.entity_id,
        }


__all__ = [
    "ACTIONS",
    "DeliveryRequest",
    "EntityId",
    "RETRY_COUNT_HEADER",
    "WEBHOOK_NAME_HEADER",
    "WebhookConfig",
]
