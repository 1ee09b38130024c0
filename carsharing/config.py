"""Runtime configuration defaults for persistence and logging."""

from __future__ import annotations

import os

DB_PATH = "data/carsharing.db"
LOG_PATH = "data/carsharing.log"
LOG_LEVEL = "INFO"

_DB_PATH_ENV = "CARSHARING_DB_PATH"
_LOG_PATH_ENV = "CARSHARING_LOG_PATH"
_LOG_LEVEL_ENV = "CARSHARING_LOG_LEVEL"


def _env_override(name: str, default: str) -> str:
    value = os.environ.get(name, "").strip()
    return value or default


def resolve_db_path() -> str:
    """Return the database file path, honoring CARSHARING_DB_PATH."""
    return _env_override(_DB_PATH_ENV, DB_PATH)


def resolve_log_path() -> str:
    """Return the log file path, honoring CARSHARING_LOG_PATH."""
    return _env_override(_LOG_PATH_ENV, LOG_PATH)


def resolve_log_level() -> str:
    """Return the upper-cased log level name, honoring CARSHARING_LOG_LEVEL."""
    return _env_override(_LOG_LEVEL_ENV, LOG_LEVEL).upper()
