"""Webhook dispatch and delivery for Courier.

Flow:
    DispatchGateway.schedule -> task engine -> DeliveryExecutor.execute
    -> RetryScheduler (re-enqueue) or FailureTracker (count, block)
"""

from .executor import DeliveryExecutor
from .gateway import DispatchGateway
from .retry import RetryScheduler, backoff_delay
from .tracker import FailureTracker, failure_key

__all__ = [
    "DeliveryExecutor",
    "DispatchGateway",
    "FailureTracker",
    "RetryScheduler",
    "backoff_delay",
    "failure_key",
]
