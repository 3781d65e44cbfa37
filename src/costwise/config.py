"""Environment-driven settings for costwise."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DB_PATH_ENV = "COSTWISE_DB_PATH"
LOG_LEVEL_ENV = "COSTWISE_LOG_LEVEL"
MAX_WORKERS_ENV = "COSTWISE_MAX_WORKERS"
RETRIES_ENV = "COSTWISE_CLASSIFY_RETRIES"
TREND_PERIODS_ENV = "COSTWISE_TREND_PERIODS"


@dataclass(frozen=True)
class Settings:
    """Runtime settings."""

    database_path: Optional[str] = None
    log_level: str = "WARNING"
    max_workers: int = 4
    classify_retries: int = 1
    trend_periods: int = 12


def _int_setting(env: Mapping[str, str], name: str, default: int, minimum: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'")
    if value < minimum:
        raise ValueError(f"{name} must be at least {minimum}, got {value}")
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Load settings from the environment.

    Args:
        env: Mapping to read from. Defaults to os.environ.

    Returns:
        Settings instance

    Raises:
        ValueError: If a numeric setting is not a valid integer
    """
    if env is None:
        env = os.environ

    return Settings(
        database_path=env.get(DB_PATH_ENV) or None,
        log_level=(env.get(LOG_LEVEL_ENV) or "WARNING").upper(),
        max_workers=_int_setting(env, MAX_WORKERS_ENV, 4, 1),
        classify_retries=_int_setting(env, RETRIES_ENV, 1, 0),
        trend_periods=_int_setting(env, TREND_PERIODS_ENV, 12, 1),
    )


def default_database_path() -> str:
    """Return ~/.costwise/costwise.db, creating the directory."""
    db_dir = Path.home() / ".costwise"
    db_dir.mkdir(exist_ok=True)
    return str(db_dir / "costwise.db")
