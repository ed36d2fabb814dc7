# src/swarm_scheduler/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Allowed transitions:
    - pending -> in_progress -> completed | failed
    - any non-terminal status -> cancelled
    """

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED, TaskStatus.CANCELLED)


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @classmethod
    def parse(cls, raw: str | None) -> TaskPriority:
        if not raw:
            raise ValueError("priority is required")
        try:
            return cls(raw.strip().lower())
        except ValueError:
            allowed = ", ".join(p.value for p in cls)
            raise ValueError(f"unknown priority {raw!r} (expected one of: {allowed})") from None


@dataclass(slots=True)
class Task:
    id: str
    title: str
    description: str = ""
    priority: TaskPriority | str = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING

    dependencies: list[str] = field(default_factory=list)
    required_capabilities: list[str] = field(default_factory=list)

    input: Any = None
    output: Any = None
    error: str | None = None
    assigned_to: str | None = None

    progress: float = 0.0
    # Durations are milliseconds.
    estimated_duration: float | None = None
    actual_duration: float | None = None

    # Timestamps are epoch seconds.
    created_at: float = 0.0
    started_at: float | None = None
    completed_at: float | None = None

    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class PriorityBreakdown:
    total: int
    by_priority: dict[str, int]


@dataclass(slots=True, frozen=True)
class QueueStats:
    queued: PriorityBreakdown
    active: PriorityBreakdown
    completed: int
    avg_wait_time_ms: float
