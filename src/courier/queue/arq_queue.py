"""arq task engine adapter.

Delayed tasks are arq jobs deferred with ``_defer_by`` on a queue named
after the task group. Pending lookups scan the queue, which holds both
deferred and ready jobs until a worker finishes them.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from arq import ArqRedis, create_pool
from arq.connections import RedisSettings
from arq.jobs import JobDef

from courier.models import TaskStatus

logger = logging.getLogger(__name__)


class ArqTaskQueue:
    """Task queue backed by an arq Redis pool.

    Example:
        ```python
        queue = ArqTaskQueue(redis_url="redis://localhost:6379/0")
        await queue.connect()
        await queue.enqueue(5, "courier_send_webhook", request.task_args(), "courier")
        ```
    """

    def __init__(self, pool: ArqRedis | None = None, redis_url: str | None = None) -> None:
        self._pool = pool
        self._redis_url = redis_url
        # A pool passed in belongs to the caller, e.g. the arq worker
        self._owns_pool = False

    async def connect(self) -> None:
        """Open the Redis pool if it is not open yet."""
        if self._pool is None and self._redis_url:
            self._pool = await create_pool(RedisSettings.from_dsn(self._redis_url))
            self._owns_pool = True

    def is_available(self) -> bool:
        return self._pool is not None

    async def enqueue(
        self,
        delay_seconds: float,
        task_name: str,
        args: dict[str, Any],
        group: str,
    ) -> Any:
        if self._pool is None:
            raise RuntimeError("arq pool is not connected")
        job = await self._pool.enqueue_job(
            task_name,
            _queue_name=group,
            _defer_by=timedelta(seconds=delay_seconds),
            **args,
        )
        logger.debug("Enqueued %s on %s (job %s)", task_name, group, job.job_id if job else None)
        return job

    async def find_pending(
        self,
        task_name: str,
        group: str,
        matching_args: dict[str, Any],
        status: TaskStatus = TaskStatus.PENDING,
    ) -> list[JobDef]:
        if self._pool is None or status != TaskStatus.PENDING:
            return []
        jobs = await self._pool.queued_jobs(queue_name=group)
        return [
            job
            for job in jobs
            if job.function == task_name
            and all(key in job.kwargs and job.kwargs[key] == value for key, value in matching_args.items())
        ]

    async def aclose(self) -> None:
        """Release the pool, closing it only if this queue opened it."""
        if self._pool is not None and self._owns_pool:
            await self._pool.aclose()
        self._pool = None
        self._owns_pool = False
