# src/swarm_scheduler/tasks/task_api.py

from __future__ import annotations

import time
import uuid
from collections.abc import Iterable
from typing import Any

from .task_models import Task, TaskPriority, TaskStatus


def create_task(
    title: str,
    *,
    description: str = "",
    priority: TaskPriority | str = TaskPriority.MEDIUM,
    dependencies: Iterable[str] = (),
    required_capabilities: Iterable[str] = (),
    input: Any = None,
    estimated_duration: float | None = None,
    metadata: dict[str, Any] | None = None,
    task_id: str | None = None,
) -> Task:
    """
    Convenience helper: build a pending Task ready for TaskScheduler.schedule_task().
    A random id is generated when task_id is not given.
    """
    if not title or not title.strip():
        raise ValueError("title is required")

    return Task(
        id=task_id or str(uuid.uuid4()),
        title=title.strip(),
        description=description,
        priority=priority,
        status=TaskStatus.PENDING,
        dependencies=list(dependencies),
        required_capabilities=list(required_capabilities),
        input=input,
        progress=0.0,
        estimated_duration=estimated_duration,
        created_at=time.time(),
        metadata=dict(metadata or {}),
    )
