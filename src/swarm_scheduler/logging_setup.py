# src/swarm_scheduler/logging_setup.py

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable, Mapping
from pathlib import Path

# Per-event dispatch logs; useful in the file, noise on the console.
DEFAULT_QUIET_LOGGERS = ("swarm_scheduler.tasks.events",)


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console rules:
    - swarm_scheduler.* passes, except quiet loggers which need WARNING+
    - py.warnings and third-party loggers need ERROR+
    """

    def __init__(self, quiet_loggers: Iterable[str] = DEFAULT_QUIET_LOGGERS) -> None:
        super().__init__()
        self._quiet = tuple(quiet_loggers)

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name == "swarm_scheduler" or name.startswith("swarm_scheduler."):
            if any(name == q or name.startswith(q + ".") for q in self._quiet):
                return record.levelno >= logging.WARNING
            return True

        return record.levelno >= logging.ERROR


def _to_level(level: int | str) -> int | None:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else None


def apply_module_levels(levels: Mapping[str, int | str]) -> None:
    """Set logger levels by name, e.g. {"swarm_scheduler.tasks.task_scheduler": "WARNING"}."""
    for name, level in levels.items():
        resolved = _to_level(level)
        if resolved is None:
            logging.getLogger(__name__).warning("Ignoring unknown log level %r for %s", level, name)
            continue
        logging.getLogger(name).setLevel(resolved)


def setup_logging(
    *,
    log_dir: str | Path = ".local/swarm",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    module_levels: Mapping[str, int | str] | None = None,
    quiet_loggers: Iterable[str] = DEFAULT_QUIET_LOGGERS,
) -> None:
    """
    Configure root logging: a filtered stderr handler at `console_level` and
    `<log_dir>/swarm.log` at `file_level`. `module_levels` caps individual
    loggers for both handlers.

    Call once at startup; existing root handlers are replaced.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter(quiet_loggers))
    root.addHandler(console)

    logfile = logging.FileHandler(str(log_dir / "swarm.log"), encoding="utf-8")
    logfile.setLevel(file_level)
    logfile.setFormatter(fmt)
    root.addHandler(logfile)

    logging.captureWarnings(True)
    # asyncio reports "Task exception was never retrieved" at ERROR; keep its debug chatter out.
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    if module_levels:
        apply_module_levels(module_levels)
