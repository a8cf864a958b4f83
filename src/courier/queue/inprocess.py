"""In-process task engine (no durability).

Tasks live in memory and run when ``run_due`` is called, either from a
polling loop (``run_forever``) or directly from tests. If the process
exits, pending tasks are lost.

Suitable for:
- Development and testing
- Single-process deployments where a lost delivery is acceptable
"""

from __future__ import annotations

import asyncio
import copy
import logging
from datetime import datetime, timedelta
from typing import Any

from courier.models import Clock, ScheduledTask, TaskStatus, utc_now

from .base import TaskHandler

logger = logging.getLogger(__name__)


class InProcessTaskQueue:
    """Delayed task queue held in memory.

    Example:
        ```python
        queue = InProcessTaskQueue()
        queue.register("courier_send_webhook", executor.handle_task)
        await queue.enqueue(5, "courier_send_webhook", request.task_args(), "courier")

        await queue.run_due()  # runs whatever is due now
        ```
    """

    def __init__(self, clock: Clock = utc_now, available: bool = True) -> None:
        """Initialize the queue.

        Args:
            clock: Time source for scheduling and due checks.
            available: Reported by ``is_available``; lets callers simulate
                a missing engine.
        """
        self._clock = clock
        self._available = available
        self._tasks: list[ScheduledTask] = []
        self._handlers: dict[str, TaskHandler] = {}

    def is_available(self) -> bool:
        return self._available

    def register(self, task_name: str, handler: TaskHandler) -> None:
        """Register the coroutine function that runs ``task_name``."""
        self._handlers[task_name] = handler

    @property
    def tasks(self) -> list[ScheduledTask]:
        return list(self._tasks)

    def pending(self, task_name: str | None = None) -> list[ScheduledTask]:
        """All pending tasks, optionally filtered by name."""
        return [
            task
            for task in self._tasks
            if task.status == TaskStatus.PENDING
            and (task_name is None or task.task_name == task_name)
        ]

    async def enqueue(
        self,
        delay_seconds: float,
        task_name: str,
        args: dict[str, Any],
        group: str,
    ) -> ScheduledTask:
        task = ScheduledTask(
            task_name=task_name,
            group=group,
            args=copy.deepcopy(args),
            run_at=self._clock() + timedelta(seconds=delay_seconds),
        )
        self._tasks.append(task)
        logger.debug(
            "Enqueued %s (%s) at %s", task.task_name, task.id, task.run_at.isoformat()
        )
        return task

    async def find_pending(
        self,
        task_name: str,
        group: str,
        matching_args: dict[str, Any],
        status: TaskStatus = TaskStatus.PENDING,
    ) -> list[ScheduledTask]:
        return [
            task
            for task in self._tasks
            if task.status == status and task.matches(task_name, group, matching_args)
        ]

    async def run_due(self, now: datetime | None = None) -> int:
        """Run every pending task whose ``run_at`` has passed.

        Tasks enqueued while running (retries) wait for the next call.
        A handler exception marks the task failed and records its text,
        the way a task engine keeps its own failure log.

        Args:
            now: Override for the current time.

        Returns:
            Number of tasks executed.
        """
        now = now or self._clock()
        due = sorted(
            (t for t in self._tasks if t.status == TaskStatus.PENDING and t.run_at <= now),
            key=lambda t: t.run_at,
        )

        for task in due:
            handler = self._handlers.get(task.task_name)
            if handler is None:
                task.status = TaskStatus.FAILED
                task.error = f"No handler registered for {task.task_name}"
                logger.error(task.error)
                continue

            task.status = TaskStatus.RUNNING
            try:
                await handler(**copy.deepcopy(task.args))
            except Exception as e:
                task.status = TaskStatus.FAILED
                task.error = str(e)
                logger.warning("Task %s (%s) failed: %s", task.task_name, task.id, e)
            else:
                task.status = TaskStatus.COMPLETE

        return len(due)

    async def run_forever(self, poll_interval: float = 1.0) -> None:
        """Poll for due tasks until cancelled."""
        while True:
            await self.run_due()
            await asyncio.sleep(poll_interval)

    def purge_finished(self) -> int:
        """Drop completed and failed tasks. Returns how many were removed."""
        before = len(self._tasks)
        self._tasks = [
            t for t in self._tasks if t.status in (TaskStatus.PENDING, TaskStatus.RUNNING)
        ]
        return before - len(self._tasks)
