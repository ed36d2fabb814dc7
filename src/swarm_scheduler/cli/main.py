# src/swarm_scheduler/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, starts the scheduler and runs the console
on the same asyncio loop. Blocking input() calls run on a daemon reader thread,
but commands are always handled on the loop thread so they never interleave with
a poll cycle.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from datetime import datetime

from ..cli.bootstrap import create_initial_state
from ..cli.commands import registry as command_registry
from ..config import get_settings
from ..core.state import AppState
from ..logging_setup import setup_logging
from ..tasks.events import EventPayload, SchedulerEvent

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def _announce(payload: EventPayload) -> None:
    task = payload.task
    if task is None:
        return
    if payload.kind == SchedulerEvent.TASK_READY:
        _print_ts(f"[SCHED] {task.id} started: {task.title}")
    elif payload.kind == SchedulerEvent.TASK_FINISHED:
        outcome = "completed" if payload.success else f"failed ({task.error or 'no reason'})"
        _print_ts(f"[SCHED] {task.id} {outcome}")
    elif payload.kind == SchedulerEvent.DEPENDENCIES_SATISFIED:
        _print_ts(f"[SCHED] {task.id} unblocked")


class ConsoleReader:
    """
    Reads console lines on a daemon thread and hands them to the loop.

    The thread is a daemon outside the loop's default executor, so a pending
    input() never holds up asyncio.run() shutdown on Ctrl+C. The next prompt is
    shown only after the previous line has been handled. EOF arrives as None.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, prompt: str = ">>> ") -> None:
        self._loop = loop
        self._prompt = prompt
        self._lines: asyncio.Queue[str | None] = asyncio.Queue()
        self._want_line = threading.Event()
        self._thread = threading.Thread(target=self._read, name="console-reader", daemon=True)

    def start(self) -> None:
        self._thread.start()

    async def readline(self) -> str | None:
        self._want_line.set()
        return await self._lines.get()

    def _read(self) -> None:
        while True:
            self._want_line.wait()
            self._want_line.clear()
            try:
                line: str | None = input(self._prompt)
            except EOFError:
                line = None
            try:
                self._loop.call_soon_threadsafe(self._lines.put_nowait, line)
            except RuntimeError:
                # Loop already closed.
                return
            if line is None:
                return


async def run_console(state: AppState) -> None:
    reader = ConsoleReader(asyncio.get_running_loop())

    for kind in (
        SchedulerEvent.TASK_READY,
        SchedulerEvent.TASK_FINISHED,
        SchedulerEvent.DEPENDENCIES_SATISFIED,
    ):
        state.scheduler.events.on(kind, _announce)

    logger.info("Console started (auto_execute=%s).", state.executor is not None)
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")
    reader.start()

    while True:
        raw = await reader.readline()
        if raw is None:
            logger.info("Console EOF received, exiting.")
            break

        line = raw.strip()
        if not line:
            continue

        if line.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            reply = command_registry.handle(state, line)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is None:
            reply = "Commands start with '/'. Use /help to list them."
        _print_ts(reply)

    logger.info("Console finished.")


async def _amain(state: AppState) -> None:
    await state.scheduler.initialize()
    await state.scheduler.start()
    try:
        await run_console(state)
    finally:
        await state.scheduler.stop()
        if state.executor is not None:
            state.executor.detach()
            await state.executor.drain()


def main() -> None:
    settings = get_settings()

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(
        log_dir=settings.data_dir,
        console_level=console_level,
        module_levels=settings.log_levels,
    )

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)

    try:
        asyncio.run(_amain(state))
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt, shutting down...")
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
