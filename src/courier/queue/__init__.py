"""Task engine backends for Courier."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from courier.exceptions import ConfigurationError

from .arq_queue import ArqTaskQueue
from .base import TaskHandler, TaskQueue
from .inprocess import InProcessTaskQueue

if TYPE_CHECKING:
    from courier.config import Settings
    from courier.models import Clock

logger = logging.getLogger(__name__)


def get_task_queue(settings: Settings, clock: Clock | None = None) -> TaskQueue:
    """Get the task queue selected by ``settings.queue_backend``.

    The arq queue is returned unconnected; call ``connect()`` before use.

    Raises:
        ConfigurationError: If the configured backend is unknown.
    """
    backend_type = settings.queue_backend.lower()

    if backend_type == "inprocess":
        logger.info("Using in-process task queue (no durability)")
        return InProcessTaskQueue(clock) if clock else InProcessTaskQueue()
    elif backend_type == "arq":
        logger.info("Using arq task queue")
        return ArqTaskQueue(redis_url=settings.redis_url)
    else:
        raise ConfigurationError(
            f"Unknown queue backend: {backend_type}. Use 'inprocess' or 'arq'."
        )


__all__ = [
    "ArqTaskQueue",
    "InProcessTaskQueue",
    "TaskHandler",
    "TaskQueue",
    "get_task_queue",
]
