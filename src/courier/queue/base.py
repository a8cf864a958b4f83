"""Task engine abstraction for swappable delayed-execution backends.

The dispatcher needs three things from a task engine: to know it is there,
to enqueue a delayed named task with keyword arguments, and to look up
pending tasks by a subset of their arguments for dedup.

- **InProcess** (default): in-memory queue drained by ``run_due``
- **arq**: Redis-backed queue executed by an arq worker
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

from courier.models import TaskStatus

TaskHandler = Callable[..., Awaitable[Any]]


@runtime_checkable
class TaskQueue(Protocol):
    """Protocol for delayed task engines."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the engine can accept tasks right now."""
        ...

    @abstractmethod
    async def enqueue(
        self,
        delay_seconds: float,
        task_name: str,
        args: dict[str, Any],
        group: str,
    ) -> Any:
        """Schedule ``task_name(**args)`` to run after ``delay_seconds``.

        Args:
            delay_seconds: Delay before the task becomes due.
            task_name: Name of the handler to run.
            args: JSON-serializable keyword arguments.
            group: Task group (queue name).

        Returns:
            Backend-specific task handle.
        """
        ...

    @abstractmethod
    async def find_pending(
        self,
        task_name: str,
        group: str,
        matching_args: dict[str, Any],
        status: TaskStatus = TaskStatus.PENDING,
    ) -> list[Any]:
        """Find not-yet-executed tasks whose args contain ``matching_args``.

        Args:
            task_name: Handler name to match.
            group: Task group to search.
            matching_args: Partial arguments; every key must be present and equal.
            status: Task status to match.

        Returns:
            Matching task handles, empty if none.
        """
        ...
