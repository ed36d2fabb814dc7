# tests/test_commands.py

from __future__ import annotations

import pytest

from swarm_scheduler.cli.bootstrap import create_initial_state
from swarm_scheduler.cli.commands import CommandRegistry, registry
from swarm_scheduler.core.state import AppState
from swarm_scheduler.tasks.task_models import TaskPriority, TaskStatus


@pytest.fixture()
def state(settings) -> AppState:
    return create_initial_state(settings=settings)


def test_command_registry_routes_and_aliases(state: AppState) -> None:
    reg = CommandRegistry()
    called: list[list[str]] = []

    def handler(state, args):
        called.append(args)
        return "ok"

    reg.register("ping", handler, "ping", aliases=["p"])

    assert reg.handle(state, "/ping a b") == "ok"
    assert reg.handle(state, '/P "quoted arg"') == "ok"
    assert called == [["a", "b"], ["quoted arg"]]
    assert "/ping - ping" in reg.build_help()


def test_command_registry_unknown_and_non_command(state: AppState) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")
    assert "Cannot parse" in (reg.handle(state, '/x "unterminated') or "")


def test_add_list_and_duplicate(state: AppState) -> None:
    reply = registry.handle(state, "/add Write the report -p high --id r1")
    assert reply is not None and reply.startswith("Scheduled r1")

    task = state.scheduler.get_task("r1")
    assert task is not None
    assert task.title == "Write the report"
    assert task.priority == TaskPriority.HIGH

    registry.handle(state, "/add Publish -d r1 --id p1")
    assert state.scheduler.get_task("p1").dependencies == ["r1"]

    assert "already exists" in (registry.handle(state, "/add Again --id r1") or "")

    listing = registry.handle(state, "/ls") or ""
    assert "Queued (2):" in listing
    assert "r1 [pending] (high) Write the report" in listing


def test_add_rejects_bad_input(state: AppState) -> None:
    assert (registry.handle(state, "/add") or "").startswith("Usage")
    assert (registry.handle(state, "/add title -p") or "").startswith("Usage")
    assert "unknown priority" in (registry.handle(state, "/add title -p asap") or "")
    assert state.scheduler.get_queued_tasks() == []


@pytest.mark.asyncio
async def test_lifecycle_commands(state: AppState) -> None:
    await state.scheduler.start()
    try:
        registry.handle(state, "/add one --id a")
        registry.handle(state, "/add two --id b")
        registry.handle(state, "/add three --id c")

        assert "now has priority urgent" in (registry.handle(state, "/priority c urgent") or "")
        assert [t.id for t in state.scheduler.get_queued_tasks()] == ["c", "a", "b"]

        state.scheduler.poll_once()  # max_concurrent=2 -> c, a

        assert "not queued" in (registry.handle(state, "/priority a low") or "")
        assert "marked completed" in (registry.handle(state, "/done c") or "")
        assert "marked failed" in (registry.handle(state, "/fail a") or "")
        assert "not active" in (registry.handle(state, "/done b") or "")
        assert "Cancelled b" in (registry.handle(state, "/cancel b") or "")
        assert "Nothing to cancel" in (registry.handle(state, "/cancel c") or "")

        assert state.scheduler.get_task("c").status == TaskStatus.COMPLETED
        assert state.scheduler.get_task("a").status == TaskStatus.FAILED

        stats = registry.handle(state, "/stats") or ""
        assert "Completed: 2" in stats
        assert "running" in stats
    finally:
        await state.scheduler.stop()


def test_help_lists_task_commands(state: AppState) -> None:
    text = registry.handle(state, "/help") or ""
    for name in ("add", "cancel", "priority", "done", "fail", "list", "stats"):
        assert f"/{name} -" in text
