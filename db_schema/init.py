# db_schema/init.py
"""Public entrypoint for applying the SQLite schema."""

from __future__ import annotations

import sqlite3
from typing import Iterable

from . import core, waivers
from .registry import EnsureColumnsFn, apply_all


# Order matters:
# - core must come first (leagues/teams/players are referenced by waiver tables)
DEFAULT_MODULES = (
    core,
    waivers,
)


def apply_schema(
    cur: sqlite3.Cursor,
    *,
    now: str,
    schema_version: str,
    ensure_columns: EnsureColumnsFn,
    modules: Iterable[object] = DEFAULT_MODULES,
) -> None:
    """Apply the schema and migrations (core -> waivers)."""
    apply_all(
        cur,
        modules=modules,  # type: ignore[arg-type]
        now=now,
        schema_version=schema_version,
        ensure_columns=ensure_columns,
    )
