# src/swarm_scheduler/tasks/task_scheduler.py

from __future__ import annotations

"""
Task scheduler.

An in-memory queue with a polling loop that:
- keeps queued tasks ordered (dependency count, priority weight, FIFO),
- promotes ready tasks (all dependencies completed) into the active set,
  up to max_concurrent_tasks,
- notifies listeners on every state transition.

The scheduler tracks state only. Running a task's body is the job of whoever
listens for task_ready (see task_executor.py); that party reports back through
on_task_completed().

Everything runs on a single asyncio loop: the poll cycle and the public methods
never await while touching the collections, so they cannot interleave.
"""

import asyncio
import logging
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from ..config import DEFAULT_PRIORITY_WEIGHTS, Settings
from .errors import DuplicateTaskError
from .events import EventRegistry, SchedulerEvent
from .task_models import PriorityBreakdown, QueueStats, Task, TaskPriority, TaskStatus

logger = logging.getLogger(__name__)

UNKNOWN_PRIORITY_WEIGHT = 1


@dataclass(frozen=True, slots=True)
class SchedulerConfig:
    max_concurrent_tasks: int = 10
    scheduling_interval_ms: int = 1000
    priority_weights: Mapping[str, int] = field(
        default_factory=lambda: dict(DEFAULT_PRIORITY_WEIGHTS)
    )

    def __post_init__(self) -> None:
        if int(self.max_concurrent_tasks) <= 0:
            raise ValueError("max_concurrent_tasks must be > 0")
        if int(self.scheduling_interval_ms) <= 0:
            raise ValueError("scheduling_interval_ms must be > 0")

    @classmethod
    def from_settings(cls, settings: Settings) -> SchedulerConfig:
        return cls(
            max_concurrent_tasks=settings.max_concurrent_tasks,
            scheduling_interval_ms=settings.scheduling_interval_ms,
            priority_weights=dict(settings.priority_weights),
        )


class TaskScheduler:
    """
    Priority/dependency-aware task queue.

    Collections (disjoint):
    - queued: ordered list awaiting promotion
    - active: id -> Task, bounded by max_concurrent_tasks
    - completed: id -> Task, completed and failed tasks

    Cancelled tasks are dropped, not stored.
    """

    def __init__(
        self,
        config: SchedulerConfig | None = None,
        *,
        events: EventRegistry | None = None,
    ) -> None:
        self.config = config or SchedulerConfig()
        self.events = events or EventRegistry()

        self._queue: list[Task] = []
        self._active: dict[str, Task] = {}
        self._completed: dict[str, Task] = {}

        self._loop_task: asyncio.Task[None] | None = None
        self._running = False

    # ---- lifecycle ----

    @property
    def running(self) -> bool:
        return self._running

    async def initialize(self) -> None:
        logger.debug(
            "TaskScheduler initialized max_concurrent=%s interval_ms=%s",
            self.config.max_concurrent_tasks,
            self.config.scheduling_interval_ms,
        )

    async def start(self) -> None:
        if self._running:
            return

        self._running = True
        self._loop_task = asyncio.get_running_loop().create_task(
            self._run_loop(), name="task-scheduler-poll"
        )
        logger.info("TaskScheduler started")
        self.events.emit(SchedulerEvent.STARTED)

    async def stop(self) -> None:
        if not self._running:
            return

        self._running = False
        loop_task, self._loop_task = self._loop_task, None
        if loop_task is not None:
            loop_task.cancel()
            try:
                await loop_task
            except asyncio.CancelledError:
                pass

        logger.info("TaskScheduler stopped")
        self.events.emit(SchedulerEvent.STOPPED)

    async def _run_loop(self) -> None:
        sleep_s = self.config.scheduling_interval_ms / 1000.0

        while True:
            await asyncio.sleep(sleep_s)
            try:
                self.poll_once()
            except Exception:
                logger.exception("Poll cycle failed")

    # ---- public API ----

    def schedule_task(self, task: Task) -> None:
        if not task.id or not task.title:
            raise ValueError("Task must have id and title")

        if self._exists(task.id):
            raise DuplicateTaskError(task.id)

        if not task.created_at:
            task.created_at = time.time()
        task.status = TaskStatus.PENDING
        self._queue.append(task)
        self._sort_queue()

        logger.debug(
            "Task scheduled id=%s priority=%s deps=%d queued=%d",
            task.id,
            task.priority,
            len(task.dependencies),
            len(self._queue),
        )
        self.events.emit(SchedulerEvent.TASK_SCHEDULED, task)

    def cancel_task(self, task_id: str) -> bool:
        """
        Cancel a queued or active task.

        Cancelling an active task only updates bookkeeping; stopping the real work
        is the caller's job. Completed or unknown ids are ignored (returns False).
        """
        for idx, task in enumerate(self._queue):
            if task.id == task_id:
                del self._queue[idx]
                task.status = TaskStatus.CANCELLED
                logger.info("Task %s cancelled (queued)", task_id)
                self.events.emit(SchedulerEvent.TASK_CANCELLED, task)
                return True

        task = self._active.pop(task_id, None)
        if task is not None:
            task.status = TaskStatus.CANCELLED
            logger.info("Task %s cancelled (active)", task_id)
            self.events.emit(SchedulerEvent.TASK_CANCELLED, task)
            return True

        logger.debug("cancel_task ignored unknown or finished id=%s", task_id)
        return False

    def reschedule_task(
        self,
        task_id: str,
        new_priority: TaskPriority | str | None = None,
    ) -> bool:
        """Change the priority of a queued task and re-sort. Other ids are ignored."""
        task = next((t for t in self._queue if t.id == task_id), None)
        if task is None:
            logger.debug("reschedule_task ignored id=%s (not queued)", task_id)
            return False

        if new_priority:
            task.priority = new_priority
        self._sort_queue()

        logger.debug("Task rescheduled id=%s priority=%s", task_id, task.priority)
        self.events.emit(SchedulerEvent.TASK_RESCHEDULED, task)
        return True

    def on_task_completed(self, task_id: str, success: bool) -> bool:
        """
        Record the outcome of an active task.

        Moves the task to completed (status completed or failed), then emits
        dependencies_satisfied for queued tasks that became ready. Promotion itself
        waits for the next poll cycle.
        """
        task = self._active.pop(task_id, None)
        if task is None:
            logger.debug("on_task_completed ignored id=%s (not active)", task_id)
            return False

        task.status = TaskStatus.COMPLETED if success else TaskStatus.FAILED
        task.completed_at = time.time()
        self._completed[task_id] = task

        logger.info("Task %s -> %s", task_id, task.status.value)
        self.events.emit(SchedulerEvent.TASK_FINISHED, task, success=success)

        self._notify_satisfied_dependencies()
        return True

    def poll_once(self) -> list[Task]:
        """
        Run one poll cycle and return the promoted tasks.

        Ready tasks are promoted in current queue order; the queue is not re-sorted here.
        """
        if not self._running:
            return []

        available = self.config.max_concurrent_tasks - len(self._active)
        if available <= 0:
            return []

        started: list[Task] = []
        for task in self._ready_tasks()[:available]:
            # A task_ready listener may have cancelled a later candidate.
            if task.status != TaskStatus.PENDING:
                continue
            self._start_task(task)
            started.append(task)
        return started

    # ---- queries ----

    def get_queued_tasks(self) -> list[Task]:
        return list(self._queue)

    def get_active_tasks(self) -> list[Task]:
        return list(self._active.values())

    def get_completed_tasks(self) -> list[Task]:
        return list(self._completed.values())

    def get_task(self, task_id: str) -> Task | None:
        for task in self._queue:
            if task.id == task_id:
                return task
        return self._active.get(task_id) or self._completed.get(task_id)

    def get_queue_stats(self) -> QueueStats:
        return QueueStats(
            queued=PriorityBreakdown(
                total=len(self._queue),
                by_priority=_group_by_priority(self._queue),
            ),
            active=PriorityBreakdown(
                total=len(self._active),
                by_priority=_group_by_priority(self._active.values()),
            ),
            completed=len(self._completed),
            avg_wait_time_ms=self._average_wait_time_ms(),
        )

    # ---- internals ----

    def _exists(self, task_id: str) -> bool:
        return (
            any(t.id == task_id for t in self._queue)
            or task_id in self._active
            or task_id in self._completed
        )

    def _dependencies_met(self, task: Task) -> bool:
        for dep_id in task.dependencies:
            dep = self._completed.get(dep_id)
            if dep is None or dep.status != TaskStatus.COMPLETED:
                return False
        return True

    def _ready_tasks(self) -> list[Task]:
        return [t for t in self._queue if self._dependencies_met(t)]

    def _start_task(self, task: Task) -> None:
        self._queue = [t for t in self._queue if t.id != task.id]

        task.status = TaskStatus.IN_PROGRESS
        task.started_at = time.time()
        self._active[task.id] = task

        logger.info("Task %s -> in_progress (active=%d)", task.id, len(self._active))
        self.events.emit(SchedulerEvent.TASK_READY, task)

    def _priority_weight(self, task: Task) -> int:
        return self.config.priority_weights.get(str(task.priority), UNKNOWN_PRIORITY_WEIGHT)

    def _sort_queue(self) -> None:
        # Raw dependency count, not dependency depth.
        self._queue.sort(
            key=lambda t: (len(t.dependencies), -self._priority_weight(t), t.created_at)
        )

    def _notify_satisfied_dependencies(self) -> None:
        unblocked = [t for t in self._queue if t.dependencies and self._dependencies_met(t)]
        for task in unblocked:
            logger.debug("Dependencies satisfied for task %s", task.id)
            self.events.emit(SchedulerEvent.DEPENDENCIES_SATISFIED, task)

    def _average_wait_time_ms(self) -> float:
        waits = [
            (t.started_at - t.created_at) * 1000.0
            for t in self._completed.values()
            if t.started_at is not None and t.created_at
        ]
        if not waits:
            return 0.0
        return sum(waits) / len(waits)


def _group_by_priority(tasks: Iterable[Task]) -> dict[str, int]:
    groups = {p.value: 0 for p in reversed(TaskPriority)}
    for task in tasks:
        key = str(task.priority)
        groups[key] = groups.get(key, 0) + 1
    return groups
