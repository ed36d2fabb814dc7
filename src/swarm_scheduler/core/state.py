# src/swarm_scheduler/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..config import Settings
from ..tasks.task_executor import TaskExecutor
from ..tasks.task_scheduler import TaskScheduler


@dataclass
class AppState:
    """Everything a connector or command needs, wired once in cli/bootstrap.py."""

    settings: Settings
    scheduler: TaskScheduler
    executor: TaskExecutor | None = None
