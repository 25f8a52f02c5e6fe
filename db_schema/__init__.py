"""db_schema package.

SQLite DDL + migrations for the league store, split out of league_repo.py.

Public API:
- apply_schema(...)
"""

from .init import apply_schema  # noqa: F401

__all__ = ["apply_schema"]
