# src/swarm_scheduler/tasks/errors.py

from __future__ import annotations


class SchedulerError(Exception):
    """Base class for scheduler errors."""


class DuplicateTaskError(SchedulerError):
    """Raised when a task id is already queued, active or completed."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with id {task_id} already exists")
        self.task_id = task_id
