# db_schema/registry.py
"""Schema registry + applier.

Applies DDL statement by statement, then post-DDL migrations.
"""

from __future__ import annotations

import sqlite3
from types import ModuleType
from typing import Callable, Iterable, Mapping


# Signature compatible with LeagueRepo._ensure_table_columns(cur, table, columns)
EnsureColumnsFn = Callable[[sqlite3.Cursor, str, Mapping[str, str]], None]


def apply_all(
    cur: sqlite3.Cursor,
    *,
    modules: Iterable[ModuleType],
    now: str,
    schema_version: str,
    ensure_columns: EnsureColumnsFn,
) -> None:
    """Apply schema modules.

    Steps:
    1) run ddl() for every module (CREATE ... IF NOT EXISTS, one statement at a time)
    2) run migrate() for modules that define it
    """
    modules = list(modules)
    ddl_parts = [m.ddl(now=now, schema_version=schema_version) for m in modules]
    # executescript() would COMMIT the caller's open transaction; split instead.
    for statement in _split_statements("\n\n".join(ddl_parts)):
        cur.execute(statement)

    for m in modules:
        migrate = getattr(m, "migrate", None)
        if migrate is None:
            continue
        migrate(cur, ensure_columns=ensure_columns)


def _split_statements(script: str) -> list[str]:
    out: list[str] = []
    buf = ""
    for line in script.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("--"):
            continue
        buf += line + "\n"
        if sqlite3.complete_statement(buf):
            out.append(buf.strip())
            buf = ""
    if buf.strip():
        raise ValueError(f"incomplete SQL statement in schema: {buf.strip()[:120]}")
    return out
