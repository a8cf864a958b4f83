"""arq worker for Courier deliveries.

Run with ``arq courier.worker.WorkerSettings``. The worker listens on the
queue named after ``task_group`` and runs deliveries registered under
``task_name``; scheduling them is the gateway's job.

Retries are enqueued on the worker's own arq pool, and failure records
must live in Redis so the scheduling processes see the same counts and
blocks. Starting with ``store_backend="memory"`` is a configuration error.
"""

from __future__ import annotations

import logging
from typing import Any

from arq.connections import RedisSettings
from arq.worker import func

from courier.config import settings
from courier.exceptions import ConfigurationError
from courier.logging import configure_logging
from courier.queue import ArqTaskQueue
from courier.service import CourierService

logger = logging.getLogger(__name__)


async def send_webhook(ctx: dict[str, Any], **task_args: Any) -> None:
    """Deliver one scheduled request.

    A failed delivery raises ``DeliveryFailedError`` so arq records the
    job as failed; follow-up attempts are separate jobs enqueued by the
    retry scheduler.
    """
    courier: CourierService = ctx["courier"]
    await courier.executor.handle_task(**task_args)


async def startup(ctx: dict[str, Any]) -> None:
    """Build the service on top of arq's Redis pool.

    Raises:
        ConfigurationError: If failure records are not stored in Redis.
    """
    configure_logging(level=settings.log_level, format=settings.log_format)
    if settings.store_backend != "redis":
        raise ConfigurationError(
            f"The arq worker needs store_backend='redis', got {settings.store_backend!r}"
        )
    courier = CourierService.create(settings, queue=ArqTaskQueue(pool=ctx["redis"]))
    courier.register_default_webhooks()
    await courier.initialize()
    ctx["courier"] = courier
    logger.info("Courier worker started on queue %s", settings.task_group)


async def shutdown(ctx: dict[str, Any]) -> None:
    # The arq pool itself is closed by arq after this hook
    courier: CourierService | None = ctx.get("courier")
    if courier is not None:
        await courier.close()


class WorkerSettings:
    """Settings for the arq worker."""

    functions = [func(send_webhook, name=settings.task_name, max_tries=1)]
    queue_name = settings.task_group
    redis_settings = RedisSettings.from_dsn(settings.redis_url)
    on_startup = startup
    on_shutdown = shutdown
    max_tries = 1
