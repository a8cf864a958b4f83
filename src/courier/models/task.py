"""Scheduled task records for the in-process task engine."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .base import generate_id


class TaskStatus(str, Enum):
    """State of a scheduled task."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"


class ScheduledTask(BaseModel):
    """A delayed task waiting on the in-process queue.

    Attributes:
        id: Unique task identifier.
        task_name: Registered handler name.
        group: Task group.
        args: Keyword arguments for the handler.
        run_at: Earliest execution time.
        status: Current state.
        error: Error text when the handler raised.
        created_at: When the task was enqueued.
    """

    model_config = ConfigDict(extra="forbid")

    id: str = Field(default_factory=lambda: generate_id("tsk"))
    task_name: str
    group: str
    args: dict[str, Any] = Field(default_factory=dict)
    run_at: datetime
    status: TaskStatus = Field(default=TaskStatus.PENDING)
    error: str | None = Field(default=None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def matches(self, task_name: str, group: str, args: dict[str, Any]) -> bool:
        """Name, group and a partial match on args."""
        if self.task_name != task_name or self.group != group:
            return False
        return all(key in self.args and self.args[key] == value for key, value in args.items())


__all__ = ["ScheduledTask", "TaskStatus"]
