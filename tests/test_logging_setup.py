# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from swarm_scheduler.logging_setup import _ConsoleNoiseFilter, setup_logging


@pytest.fixture()
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    asyncio_level = logging.getLogger("asyncio").level
    yield
    logging.getLogger("asyncio").setLevel(asyncio_level)
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.captureWarnings(False)


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter() -> None:
    f = _ConsoleNoiseFilter()
    assert f.filter(_record("swarm_scheduler.tasks.task_scheduler", logging.DEBUG))
    assert not f.filter(_record("swarm_scheduler.tasks.events", logging.INFO))
    assert f.filter(_record("swarm_scheduler.tasks.events", logging.ERROR))
    assert not f.filter(_record("asyncio", logging.WARNING))
    assert f.filter(_record("asyncio", logging.ERROR))


def test_setup_logging_writes_file(tmp_path: Path, restore_root_logging) -> None:
    setup_logging(log_dir=tmp_path / "logs", console_level=logging.WARNING)

    logging.getLogger("swarm_scheduler.test").debug("hello file")
    for h in logging.getLogger().handlers:
        h.flush()

    log_file = tmp_path / "logs" / "swarm.log"
    assert log_file.exists()
    assert "hello file" in log_file.read_text("utf-8")


def test_module_levels_quiet_scheduler_chatter(tmp_path: Path, restore_root_logging) -> None:
    sched_logger = logging.getLogger("swarm_scheduler.tasks.task_scheduler")
    old_level = sched_logger.level
    try:
        setup_logging(
            log_dir=tmp_path,
            console_level=logging.WARNING,
            module_levels={"swarm_scheduler.tasks.task_scheduler": "warning", "x": "LOUD"},
        )
        sched_logger.info("per-task transition")
        sched_logger.warning("still shown")
        for h in logging.getLogger().handlers:
            h.flush()

        text = (tmp_path / "swarm.log").read_text("utf-8")
        assert "per-task transition" not in text
        assert "still shown" in text
        assert "Ignoring unknown log level" in text
    finally:
        sched_logger.setLevel(old_level)
        logging.getLogger("x").setLevel(logging.NOTSET)


def test_quiet_loggers_are_configurable() -> None:
    f = _ConsoleNoiseFilter(quiet_loggers=("swarm_scheduler.tasks.task_executor",))
    assert not f.filter(_record("swarm_scheduler.tasks.task_executor", logging.INFO))
    assert f.filter(_record("swarm_scheduler.tasks.events", logging.INFO))
