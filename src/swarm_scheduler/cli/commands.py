# src/swarm_scheduler/cli/commands.py

from __future__ import annotations

import logging
import shlex
import time
from collections.abc import Callable

from ..core.state import AppState
from ..tasks.errors import DuplicateTaskError
from ..tasks.task_api import create_task
from ..tasks.task_models import Task, TaskPriority

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Cannot parse command: {e}"
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _format_task(task: Task) -> str:
    deps = f" deps=[{', '.join(task.dependencies)}]" if task.dependencies else ""
    return f"{task.id} [{task.status}] ({task.priority}) {task.title}{deps}"


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <title words...> [-p priority] [-d dep1,dep2] [--id ID]
    """
    usage = "Usage: /add <title> [-p low|medium|high|urgent] [-d dep1,dep2] [--id ID]"

    title_parts: list[str] = []
    priority = TaskPriority.MEDIUM
    deps: list[str] = []
    task_id: str | None = None

    it = iter(args)
    for arg in it:
        if arg in ("-p", "--priority", "-d", "--deps", "--id"):
            value = next(it, None)
            if value is None:
                return usage
            if arg in ("-p", "--priority"):
                try:
                    priority = TaskPriority.parse(value)
                except ValueError as e:
                    return str(e)
            elif arg in ("-d", "--deps"):
                deps = [d.strip() for d in value.split(",") if d.strip()]
            else:
                task_id = value
            continue
        title_parts.append(arg)

    if not title_parts:
        return usage

    task = create_task(" ".join(title_parts), priority=priority, dependencies=deps, task_id=task_id)
    try:
        state.scheduler.schedule_task(task)
    except DuplicateTaskError as e:
        return str(e)
    return f"Scheduled {_format_task(task)}"


def cmd_cancel(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /cancel <id>"
    if state.scheduler.cancel_task(args[0]):
        return f"Cancelled {args[0]}."
    return f"Nothing to cancel for {args[0]} (unknown or already finished)."


def cmd_priority(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /priority <id> <low|medium|high|urgent>"
    try:
        priority = TaskPriority.parse(args[1])
    except ValueError as e:
        return str(e)
    if state.scheduler.reschedule_task(args[0], priority):
        return f"Task {args[0]} now has priority {priority}."
    return f"Task {args[0]} is not queued; only queued tasks can be rescheduled."


def _finish(state: AppState, args: list[str], *, success: bool) -> str:
    verb = "done" if success else "fail"
    if len(args) != 1:
        return f"Usage: /{verb} <id>"
    if state.scheduler.on_task_completed(args[0], success):
        return f"Task {args[0]} marked {'completed' if success else 'failed'}."
    return f"Task {args[0]} is not active."


def cmd_done(state: AppState, args: list[str]) -> str:
    return _finish(state, args, success=True)


def cmd_fail(state: AppState, args: list[str]) -> str:
    return _finish(state, args, success=False)


def cmd_list(state: AppState, args: list[str]) -> str:
    sched = state.scheduler
    sections = [
        ("Queued", sched.get_queued_tasks()),
        ("Active", sched.get_active_tasks()),
        ("Completed", sched.get_completed_tasks()),
    ]
    lines: list[str] = []
    for label, tasks in sections:
        lines.append(f"{label} ({len(tasks)}):")
        lines.extend(f"  {_format_task(t)}" for t in tasks)
    return "\n".join(lines)


def cmd_stats(state: AppState, args: list[str]) -> str:
    stats = state.scheduler.get_queue_stats()

    def _breakdown(counts: dict[str, int]) -> str:
        return ", ".join(f"{k}={v}" for k, v in counts.items())

    running = "running" if state.scheduler.running else "stopped"
    return (
        f"Scheduler ({running}, at {time.strftime('%H:%M:%S')}):\n"
        f"  Queued: {stats.queued.total} ({_breakdown(stats.queued.by_priority)})\n"
        f"  Active: {stats.active.total} ({_breakdown(stats.active.by_priority)})\n"
        f"  Completed: {stats.completed}\n"
        f"  Avg wait: {stats.avg_wait_time_ms:.0f} ms"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "add",
    cmd_add,
    help_text="Schedule a task: /add <title> [-p priority] [-d dep1,dep2] [--id ID].",
)
registry.register("cancel", cmd_cancel, help_text="Cancel a queued or active task: /cancel <id>.")
registry.register(
    "priority", cmd_priority, help_text="Change a queued task's priority: /priority <id> <level>."
)
registry.register("done", cmd_done, help_text="Mark an active task completed: /done <id>.")
registry.register("fail", cmd_fail, help_text="Mark an active task failed: /fail <id>.")
registry.register("list", cmd_list, help_text="List queued, active and completed tasks.", aliases=["ls"])
registry.register("stats", cmd_stats, help_text="Show queue statistics.")
