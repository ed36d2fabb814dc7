# src/swarm_scheduler/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app, passed explicitly to components.
- Nothing required at import time; every value has a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

from dotenv import load_dotenv

ENV_PREFIX = "SWARM"

DEFAULT_PRIORITY_WEIGHTS: Dict[str, int] = {
    "urgent": 4,
    "high": 3,
    "medium": 2,
    "low": 1,
}


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def parse_priority_weights(raw: str | None, default: Dict[str, int]) -> Dict[str, int]:
    """
    Parse "urgent=4,high=3" into a weight map.

    Labels missing from `raw` keep their default weight. Malformed pairs are skipped.
    """
    weights = dict(default)
    if raw is None or raw.strip() == "":
        return weights
    for part in raw.replace(";", ",").split(","):
        label, sep, value = part.partition("=")
        label = label.strip().lower()
        if not sep or not label:
            continue
        try:
            weights[label] = int(value.strip())
        except ValueError:
            continue
    return weights


def parse_log_levels(raw: str | None) -> Dict[str, str]:
    """Parse "logger.name=LEVEL,other=LEVEL" into a mapping. Malformed pairs are skipped."""
    levels: Dict[str, str] = {}
    if raw is None or raw.strip() == "":
        return levels
    for part in raw.replace(";", ",").split(","):
        name, sep, level = part.partition("=")
        name, level = name.strip(), level.strip().upper()
        if sep and name and level:
            levels[name] = level
    return levels


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Scheduler ----
    max_concurrent_tasks: int
    scheduling_interval_ms: int
    priority_weights: Dict[str, int]

    # ---- Console executor ----
    auto_execute: bool
    simulated_task_seconds: float

    # ---- Per-module log levels, e.g. "swarm_scheduler.tasks.task_scheduler=WARNING" ----
    log_levels: Dict[str, str] = field(default_factory=dict)

    @staticmethod
    def from_env() -> "Settings":
        load_dotenv(override=False)

        return Settings(
            app_name=_env(_k("APP_NAME"), "swarm"),
            log_level=_env(_k("LOG_LEVEL"), "INFO"),
            data_dir=_env_path(_k("DATA_DIR"), Path(".local/swarm")),
            max_concurrent_tasks=_env_int(_k("MAX_CONCURRENT_TASKS"), 10),
            scheduling_interval_ms=_env_int(_k("SCHEDULING_INTERVAL_MS"), 1000),
            priority_weights=parse_priority_weights(
                os.getenv(_k("PRIORITY_WEIGHTS")), DEFAULT_PRIORITY_WEIGHTS
            ),
            auto_execute=_env_bool(_k("AUTO_EXECUTE"), False),
            simulated_task_seconds=_env_float(_k("SIMULATED_TASK_SECONDS"), 2.0),
            log_levels=parse_log_levels(os.getenv(_k("LOG_LEVELS"))),
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
