# src/swarm_scheduler/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used around the scheduler.

The executor depends on Protocols instead of concrete implementations,
so agents, simulators and test fakes are interchangeable.
"""

from typing import Any, Awaitable, Protocol

from ..tasks.task_models import Task


class TaskHandler(Protocol):
    """Runs the body of an active task. The return value becomes task.output."""

    def __call__(self, task: Task) -> Awaitable[Any]: ...
