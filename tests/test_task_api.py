# tests/test_task_api.py

from __future__ import annotations

import pytest

from swarm_scheduler.tasks.task_api import create_task
from swarm_scheduler.tasks.task_models import TaskPriority, TaskStatus


def test_create_task_defaults() -> None:
    task = create_task("  Summarize feed  ", dependencies=("x",), metadata={"source": "api"})

    assert task.id
    assert task.title == "Summarize feed"
    assert task.status == TaskStatus.PENDING
    assert task.priority == TaskPriority.MEDIUM
    assert task.dependencies == ["x"]
    assert task.progress == 0.0
    assert task.created_at > 0
    assert task.metadata == {"source": "api"}


def test_create_task_ids_are_unique_unless_given() -> None:
    assert create_task("a").id != create_task("a").id
    assert create_task("a", task_id="fixed").id == "fixed"


def test_create_task_requires_title() -> None:
    with pytest.raises(ValueError):
        create_task("   ")


def test_priority_parse() -> None:
    assert TaskPriority.parse(" Urgent ") == TaskPriority.URGENT
    with pytest.raises(ValueError):
        TaskPriority.parse("asap")
    assert TaskStatus.FAILED.is_terminal
    assert not TaskStatus.IN_PROGRESS.is_terminal
