# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest
import pytest_asyncio

from swarm_scheduler.config import DEFAULT_PRIORITY_WEIGHTS, Settings
from swarm_scheduler.tasks.events import EventRegistry
from swarm_scheduler.tasks.task_scheduler import SchedulerConfig, TaskScheduler

from .fakes import EventRecorder

# Long enough that the background loop never ticks during a test;
# tests drive cycles explicitly with poll_once().
MANUAL_INTERVAL_MS = 60_000


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings built directly rather than from the environment,
    to keep unit tests isolated and deterministic.
    """
    return Settings(
        app_name="swarm-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        max_concurrent_tasks=2,
        scheduling_interval_ms=MANUAL_INTERVAL_MS,
        priority_weights=dict(DEFAULT_PRIORITY_WEIGHTS),
        auto_execute=False,
        simulated_task_seconds=0.0,
    )


@pytest.fixture()
def events() -> EventRegistry:
    return EventRegistry()


@pytest.fixture()
def recorder(events: EventRegistry) -> EventRecorder:
    rec = EventRecorder()
    rec.attach(events)
    return rec


@pytest_asyncio.fixture()
async def scheduler(events: EventRegistry, recorder: EventRecorder):
    """Started scheduler (max 2 concurrent) driven manually via poll_once()."""
    sched = TaskScheduler(
        SchedulerConfig(max_concurrent_tasks=2, scheduling_interval_ms=MANUAL_INTERVAL_MS),
        events=events,
    )
    await sched.start()
    yield sched
    await sched.stop()
