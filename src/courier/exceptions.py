"""Courier exception hierarchy.

Provides structured exceptions for the dispatch and delivery paths.
All exceptions inherit from CourierError for easy catching.
"""

from __future__ import annotations


class CourierError(Exception):
    """Base exception for all Courier errors.

    All custom exceptions in Courier inherit from this class,
    allowing callers to catch all Courier-related errors with
    a single except clause.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code.
    """

    code: str = "courier_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, object]:
        """Convert exception to a log/API-friendly dictionary."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
            }
        }


class TransportUnavailableError(CourierError):
    """The task engine is not available.

    Raised by the dispatch gateway before anything else is checked.
    """

    code: str = "transport_unavailable"

    def __init__(self, message: str = "Task queue is not available") -> None:
        super().__init__(message)


class NoDestinationError(CourierError):
    """No destination URL could be resolved for a delivery."""

    code: str = "no_destination"

    def __init__(self, message: str = "Webhook URL is not set") -> None:
        super().__init__(message)


class DestinationBlockedError(CourierError):
    """The destination URL is blocked after consecutive failures.

    Attributes:
        url: The blocked destination.
    """

    code: str = "destination_blocked"

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Webhook URL is blocked: {url}")

    def to_dict(self) -> dict[str, object]:
        """Convert exception to a log/API-friendly dictionary."""
        return {
            "error": {
                "code": self.code,
                "url": self.url,
                "message": self.message,
            }
        }


class EmptyPayloadError(CourierError):
    """The payload was empty after transformation.

    Returning an empty payload from the payload hook is the supported
    way to veto a delivery.
    """

    code: str = "empty_payload"

    def __init__(self, message: str = "Webhook payload is empty") -> None:
        super().__init__(message)


class InvalidRequestError(CourierError):
    """A delivery request could not be built from the caller's input.

    Attributes:
        field: The field that failed validation.
    """

    code: str = "invalid_request"

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"{field}: {message}")

    def to_dict(self) -> dict[str, object]:
        """Convert exception to a log/API-friendly dictionary."""
        return {
            "error": {
                "code": self.code,
                "field": self.field,
                "message": self.message,
            }
        }


class DeliveryFailedError(CourierError):
    """A delivery attempt did not receive HTTP 200.

    Raised to the task engine after retry and failure bookkeeping so
    its own failure log reflects the attempt.

    Attributes:
        url: Destination URL.
        status_code: HTTP status code, None on transport errors.
        error: Transport error text, if any.
    """

    code: str = "delivery_failed"

    def __init__(
        self,
        url: str,
        status_code: int | None = None,
        error: str | None = None,
    ) -> None:
        self.url = url
        self.status_code = status_code
        self.error = error
        detail = error if error else f"HTTP {status_code}"
        super().__init__(f"Webhook delivery to {url} failed: {detail}")

    def to_dict(self) -> dict[str, object]:
        """Convert exception to a log/API-friendly dictionary."""
        return {
            "error": {
                "code": self.code,
                "url": self.url,
                "status_code": self.status_code,
                "message": self.message,
            }
        }


class WebhookRegistrationError(CourierError):
    """A webhook with the same name is already registered.

    Attributes:
        name: The conflicting webhook name.
    """

    code: str = "webhook_registration"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'Webhook with name "{name}" is already registered.')


class ConfigurationError(CourierError):
    """Configuration error.

    Raised when required configuration is missing or invalid.
    """

    code: str = "configuration_error"


class StoreError(CourierError):
    """Failure store operation failed.

    Raised when the key-value store backing failure records is unreachable.
    """

    code: str = "store_error"
