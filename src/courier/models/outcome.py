"""Delivery outcomes and notification messages.

The executor returns a DeliveryOutcome instead of raising; the task
engine shim turns a failed outcome into DeliveryFailedError.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

NotificationKind = Literal["failed", "blocked"]


class DeliveryOutcome(BaseModel):
    """Result of one delivery attempt.

    Attributes:
        url: Destination URL.
        success: True only for HTTP 200.
        status_code: HTTP status code (None on transport errors).
        error: Transport error text (None when a response arrived).
        response_body: Response body, truncated for logs.
        retry_scheduled: Whether a retry was enqueued for this event.
        retry_delay: Seconds until the retry, when scheduled.
        failure_count: Failed events recorded for the URL after this attempt.
        max_failures: Block threshold in effect.
        blocked: Whether this attempt blocked the URL.
        completed_at: When the attempt finished.
    """

    model_config = ConfigDict(extra="forbid")

    url: str
    success: bool
    status_code: int | None = Field(default=None)
    error: str | None = Field(default=None)
    response_body: str | None = Field(default=None)
    retry_scheduled: bool = Field(default=False)
    retry_delay: float | None = Field(default=None)
    failure_count: int = Field(default=0, ge=0)
    max_failures: int | None = Field(default=None)
    blocked: bool = Field(default=False)
    completed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def succeeded(cls, url: str, status_code: int, response_body: str | None = None) -> DeliveryOutcome:
        return cls(
            url=url,
            success=True,
            status_code=status_code,
            response_body=response_body[:1000] if response_body else None,
        )

    @classmethod
    def failed(
        cls,
        url: str,
        status_code: int | None = None,
        error: str | None = None,
        response_body: str | None = None,
    ) -> DeliveryOutcome:
        return cls(
            url=url,
            success=False,
            status_code=status_code,
            error=error,
            response_body=response_body[:1000] if response_body else None,
        )

    @property
    def error_detail(self) -> str:
        """Transport error text, or the HTTP status code."""
        if self.error:
            return self.error
        return f"HTTP Status Code: {self.status_code}"


class Notification(BaseModel):
    """An outgoing admin notification.

    Attributes:
        kind: "failed" (first failed event) or "blocked" (threshold crossed).
        recipient: Email recipient.
        subject: Email subject.
        body: Plain-text body.
        headers: Extra mail headers.
        url: Destination URL the notice is about.
        error_message: Last error detail.
    """

    model_config = ConfigDict(extra="forbid")

    kind: NotificationKind
    recipient: str
    subject: str
    body: str
    headers: dict[str, str] = Field(
        default_factory=lambda: {"Content-Type": "text/plain; charset=UTF-8"}
    )
    url: str
    error_message: str


__all__ = ["DeliveryOutcome", "Notification", "NotificationKind"]
