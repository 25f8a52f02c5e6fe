"""Process-level settings read from the environment."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

BASE_DIR = Path(__file__).resolve().parent

DEFAULT_DB_PATH = BASE_DIR / "data" / "league.db"


def _env_float(key: str, default: Optional[float]) -> Optional[float]:
    raw = (os.environ.get(key) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{key} must be a number, got: {raw!r}") from exc


def get_db_path() -> str:
    """SQLite path for the league store (WAIVER_DB_PATH overrides the default)."""
    raw = (os.environ.get("WAIVER_DB_PATH") or "").strip()
    path = Path(raw) if raw else DEFAULT_DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    return str(path)


def get_admin_token() -> str:
    return (os.environ.get("WAIVER_ADMIN_TOKEN") or "").strip()


def get_lock_timeout_s() -> Optional[float]:
    # None: wait forever for a concurrent run of the same league/week.
    return _env_float("WAIVER_LOCK_TIMEOUT_S", None)


def configure_logging() -> None:
    level_name = (os.environ.get("WAIVER_LOG_LEVEL") or "INFO").strip().upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        raise RuntimeError(f"WAIVER_LOG_LEVEL is not a logging level: {level_name!r}")
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
