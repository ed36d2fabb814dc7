# src/swarm_scheduler/tasks/task_executor.py

from __future__ import annotations

"""
Task executor.

Listens for task_ready, runs the injected handler for each promoted task,
and reports the outcome back via scheduler.on_task_completed().

The scheduler never awaits handlers; they run as separate asyncio tasks.
"""

import asyncio
import logging
import time
from collections.abc import Callable

from ..core.ports import TaskHandler
from .events import EventPayload, SchedulerEvent
from .task_models import Task, TaskStatus
from .task_scheduler import TaskScheduler

logger = logging.getLogger(__name__)


class TaskExecutor:
    def __init__(
        self,
        scheduler: TaskScheduler,
        handler: TaskHandler,
        *,
        name: str = "executor",
    ) -> None:
        self._scheduler = scheduler
        self._handler = handler
        self.name = name

        self._in_flight: set[asyncio.Task[None]] = set()
        # task id -> runner of its latest task_ready; older runs for the id are stale.
        self._current: dict[str, asyncio.Task[None]] = {}
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def attach(self) -> None:
        if self._unsubscribe is not None:
            return
        self._unsubscribe = self._scheduler.events.on(SchedulerEvent.TASK_READY, self._on_task_ready)
        logger.debug("Executor %s attached", self.name)

    def detach(self) -> None:
        if self._unsubscribe is None:
            return
        self._unsubscribe()
        self._unsubscribe = None
        logger.debug("Executor %s detached", self.name)

    async def drain(self) -> None:
        """Wait for every handler started so far."""
        while self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)

    def _on_task_ready(self, payload: EventPayload) -> None:
        task = payload.task
        if task is None:
            return

        task.assigned_to = self.name
        runner = asyncio.get_running_loop().create_task(
            self._execute(task), name=f"task-{task.id}"
        )
        self._in_flight.add(runner)
        self._current[task.id] = runner
        runner.add_done_callback(lambda r, task_id=task.id: self._forget(task_id, r))

    def _forget(self, task_id: str, runner: asyncio.Task[None]) -> None:
        self._in_flight.discard(runner)
        if self._current.get(task_id) is runner:
            del self._current[task_id]

    async def _execute(self, task: Task) -> None:
        run = asyncio.current_task()
        started = time.monotonic()
        try:
            result = await self._handler(task)
        except Exception as e:
            logger.exception("Task %s handler failed", task.id)
            if self._is_stale(task, run):
                return
            task.error = str(e) or e.__class__.__name__
            task.actual_duration = (time.monotonic() - started) * 1000.0
            self._scheduler.on_task_completed(task.id, False)
            return

        if self._is_stale(task, run):
            return
        task.output = result
        task.progress = 100.0
        task.actual_duration = (time.monotonic() - started) * 1000.0
        self._scheduler.on_task_completed(task.id, True)

    def _is_stale(self, task: Task, run: asyncio.Task | None) -> bool:
        if self._current.get(task.id) is not run:
            logger.info("Task %s was resubmitted; outcome of the earlier run dropped", task.id)
            return True
        if task.status == TaskStatus.CANCELLED:
            logger.info("Task %s finished after cancellation; outcome dropped", task.id)
            return True
        return False
