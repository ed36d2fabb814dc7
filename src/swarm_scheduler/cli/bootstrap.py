# src/swarm_scheduler/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the scheduler, its event registry and the optional executor into AppState.
"""

from __future__ import annotations

import asyncio
import logging

from ..config import Settings, get_settings
from ..core.state import AppState
from ..tasks.events import EventRegistry
from ..tasks.task_executor import TaskExecutor
from ..tasks.task_models import Task
from ..tasks.task_scheduler import SchedulerConfig, TaskScheduler

logger = logging.getLogger(__name__)


class SimulatedHandler:
    """Stand-in task body for the console: sleeps, then echoes the task input."""

    def __init__(self, seconds: float) -> None:
        self.seconds = max(0.0, float(seconds))

    async def __call__(self, task: Task) -> object:
        await asyncio.sleep(self.seconds)
        return task.input if task.input is not None else f"done: {task.title}"


def create_initial_state(*, settings: Settings | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    scheduler = TaskScheduler(SchedulerConfig.from_settings(settings), events=EventRegistry())

    executor: TaskExecutor | None = None
    if settings.auto_execute:
        executor = TaskExecutor(
            scheduler,
            SimulatedHandler(settings.simulated_task_seconds),
            name=f"{settings.app_name}-sim",
        )
        executor.attach()

    logger.debug(
        "State ready max_concurrent=%s interval_ms=%s auto_execute=%s",
        settings.max_concurrent_tasks,
        settings.scheduling_interval_ms,
        settings.auto_execute,
    )
    return AppState(settings=settings, scheduler=scheduler, executor=executor)
