# db_schema/core.py
"""SQLite schema: core league tables (leagues, teams, players, roster).

This module contains *only* DDL and schema migrations.
It must not import LeagueRepo (to avoid circular imports).
"""

from __future__ import annotations

import sqlite3
from typing import Callable, Mapping


# Signature compatible with LeagueRepo._ensure_table_columns(cur, table, columns)
EnsureColumnsFn = Callable[[sqlite3.Cursor, str, Mapping[str, str]], None]


def ddl(*, now: str, schema_version: str) -> str:
    """Return DDL SQL for core tables."""
    return f"""
                CREATE TABLE IF NOT EXISTS meta (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );

                INSERT INTO meta(key, value) VALUES ('schema_version', '{schema_version}')
                ON CONFLICT(key) DO UPDATE SET value=excluded.value;
                INSERT OR IGNORE INTO meta(key, value) VALUES ('created_at', '{now}');

                -- settings_json holds waiverType / waiverMode / maxRosterSize / minimumBid
                CREATE TABLE IF NOT EXISTS leagues (
                    league_id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    commissioner_id TEXT,
                    current_week INTEGER NOT NULL DEFAULT 1,
                    settings_json TEXT NOT NULL DEFAULT '{{}}',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS teams (
                    team_id TEXT PRIMARY KEY,
                    league_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    owner_id TEXT NOT NULL,
                    faab_budget INTEGER NOT NULL DEFAULT 100,
                    faab_spent INTEGER NOT NULL DEFAULT 0,
                    waiver_priority INTEGER NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    CHECK (faab_spent >= 0),
                    FOREIGN KEY(league_id) REFERENCES leagues(league_id) ON DELETE CASCADE
                );

                CREATE INDEX IF NOT EXISTS idx_teams_league_priority ON teams(league_id, waiver_priority);

                CREATE TABLE IF NOT EXISTS players (
                    player_id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    position TEXT,
                    nfl_team TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                -- One roster entry per (league, player): a player belongs to at most one team per league.
                CREATE TABLE IF NOT EXISTS roster (
                    league_id TEXT NOT NULL,
                    team_id TEXT NOT NULL,
                    player_id TEXT NOT NULL,
                    slot TEXT NOT NULL DEFAULT 'BENCH',
                    is_locked INTEGER NOT NULL DEFAULT 0,
                    acquisition_type TEXT,
                    acquired_at TEXT NOT NULL,
                    PRIMARY KEY(league_id, player_id),
                    FOREIGN KEY(team_id) REFERENCES teams(team_id) ON DELETE CASCADE,
                    FOREIGN KEY(player_id) REFERENCES players(player_id) ON DELETE CASCADE
                );

                CREATE INDEX IF NOT EXISTS idx_roster_team_id ON roster(team_id);
"""


def migrate(cur: sqlite3.Cursor, *, ensure_columns: EnsureColumnsFn) -> None:
    """Apply post-DDL schema migrations."""
    # Pre-waivers-3 databases lack the acquisition metadata on roster rows.
    ensure_columns(
        cur,
        "roster",
        {
            "acquisition_type": "TEXT",
        },
    )
