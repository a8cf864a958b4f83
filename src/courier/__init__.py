"""Courier: outbound webhook delivery you can leave running.

Sends change notifications for content items, taxonomy terms, accounts
and metadata to HTTP endpoints, with delayed deduplicated dispatch,
bounded retries, per-URL failure tracking and temporary blocking of
unhealthy destinations.

Quick Start:
    from courier.service import CourierService

    async with CourierService.create() as courier:
        courier.register_default_webhooks()

        # Schedule a delivery for an updated post
        await courier.registry.get("post").on_save(42, "page", update=True)

        # Or send an ad-hoc event
        await courier.schedule(
            "update", "post", 42, url="https://hooks.example.com/in"
        )

Components:
    - WebhookRegistry: named webhooks and their configuration
    - DispatchGateway: validation, deduplication and delayed enqueue
    - DeliveryExecutor: the HTTP POST and its success/failure accounting
    - RetryScheduler: exponential-backoff follow-up attempts
    - FailureTracker: per-URL consecutive failure counts and blocks
    - BlockedNotifier: admin mail on first failure and on block
"""

__version__ = "0.1.0"

# Configuration
from .config import Settings, settings

# Exceptions
from .exceptions import (
    ConfigurationError,
    CourierError,
    DeliveryFailedError,
    DestinationBlockedError,
    EmptyPayloadError,
    InvalidRequestError,
    NoDestinationError,
    StoreError,
    TransportUnavailableError,
    WebhookRegistrationError,
)

# Hooks
from .hooks import Hooks, Signals

# Logging
from .logging import (
    bind_context,
    clear_context,
    configure_logging,
    delivery_context,
    get_logger,
    logger,
    unbind_context,
)

# Models
from .models import (
    DeliveryOutcome,
    DeliveryRequest,
    FailureRecord,
    Notification,
    WebhookConfig,
)

__all__ = [
    # Version
    "__version__",
    # Configuration
    "Settings",
    "settings",
    # Exceptions
    "CourierError",
    "TransportUnavailableError",
    "NoDestinationError",
    "DestinationBlockedError",
    "EmptyPayloadError",
    "InvalidRequestError",
    "DeliveryFailedError",
    "WebhookRegistrationError",
    "ConfigurationError",
    "StoreError",
    # Hooks
    "Hooks",
    "Signals",
    # Logging
    "configure_logging",
    "get_logger",
    "logger",
    "bind_context",
    "clear_context",
    "unbind_context",
    "delivery_context",
    # Models
    "WebhookConfig",
    "DeliveryRequest",
    "DeliveryOutcome",
    "FailureRecord",
    "Notification",
]
