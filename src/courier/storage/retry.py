"""Retry utilities for failure store operations.

Provides exponential backoff retry logic for transient network errors
when communicating with Redis.
"""

from __future__ import annotations

import logging

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)


def _log_retry(retry_state: RetryCallState) -> None:
    """Log retry attempts with context.

    Args:
        retry_state: Current retry state from tenacity.
    """
    if retry_state.attempt_number > 1:
        logger.warning(
            "Retrying Redis operation",
            extra={
                "attempt": retry_state.attempt_number,
                "fn_name": retry_state.fn.__name__ if retry_state.fn else "unknown",
                "exception": str(retry_state.outcome.exception()) if retry_state.outcome else None,
            },
        )


# Decorator for retrying transient Redis errors
# Only retries connection-level failures, not command errors
redis_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
    retry=retry_if_exception_type(
        (
            RedisConnectionError,  # Connection refused or dropped
            RedisTimeoutError,  # Socket timeout
        )
    ),
    before_sleep=_log_retry,
    reraise=True,
)
