# src/swarm_scheduler/tasks/events.py

from __future__ import annotations

"""
Scheduler notifications.

Listeners are plain callables registered per event kind. Dispatch is
synchronous and follows registration order. A failing listener is logged
and does not stop the remaining ones.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from .task_models import Task

logger = logging.getLogger(__name__)


class SchedulerEvent(StrEnum):
    STARTED = "started"
    STOPPED = "stopped"
    TASK_SCHEDULED = "task_scheduled"
    TASK_CANCELLED = "task_cancelled"
    TASK_RESCHEDULED = "task_rescheduled"
    TASK_READY = "task_ready"
    TASK_FINISHED = "task_finished"
    DEPENDENCIES_SATISFIED = "dependencies_satisfied"


@dataclass(slots=True, frozen=True)
class EventPayload:
    kind: SchedulerEvent
    task: Task | None = None
    # Only set for TASK_FINISHED.
    success: bool | None = None


Listener = Callable[[EventPayload], None]


class EventRegistry:
    """Per-kind listener registry used by the scheduler and its consumers."""

    def __init__(self) -> None:
        self._listeners: dict[SchedulerEvent, list[Listener]] = {}

    def on(self, kind: SchedulerEvent | str, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a callable that unregisters it."""
        key = SchedulerEvent(kind)
        self._listeners.setdefault(key, []).append(listener)

        def _unsubscribe() -> None:
            self.off(key, listener)

        return _unsubscribe

    def off(self, kind: SchedulerEvent | str, listener: Listener) -> None:
        listeners = self._listeners.get(SchedulerEvent(kind))
        if not listeners:
            return
        try:
            listeners.remove(listener)
        except ValueError:
            return

    def listener_count(self, kind: SchedulerEvent | str) -> int:
        return len(self._listeners.get(SchedulerEvent(kind), ()))

    def emit(
        self,
        kind: SchedulerEvent,
        task: Task | None = None,
        *,
        success: bool | None = None,
    ) -> None:
        payload = EventPayload(kind=kind, task=task, success=success)
        # Snapshot so listeners may (un)register during dispatch.
        for listener in list(self._listeners.get(kind, ())):
            try:
                listener(payload)
            except Exception:
                logger.exception(
                    "Listener failed event=%s task_id=%s",
                    kind.value,
                    task.id if task is not None else None,
                )
