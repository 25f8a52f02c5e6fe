# db_schema/waivers.py
"""SQLite schema: waiver claims, notifications and the transactions log."""

from __future__ import annotations

import sqlite3
from typing import Callable, Mapping

EnsureColumnsFn = Callable[[sqlite3.Cursor, str, Mapping[str, str]], None]


def ddl(*, now: str, schema_version: str) -> str:
    """Return DDL SQL for waiver tables."""
    _ = (now, schema_version)
    return """
                -- Waiver claims (append-only audit trail; status moves pending -> successful|failed once)
                CREATE TABLE IF NOT EXISTS waiver_claims (
                    claim_id TEXT PRIMARY KEY,
                    league_id TEXT NOT NULL,
                    team_id TEXT NOT NULL,
                    player_id TEXT NOT NULL,
                    drop_player_id TEXT,
                    faab_bid INTEGER,
                    priority INTEGER,
                    week INTEGER,
                    status TEXT NOT NULL DEFAULT 'pending',
                    failure_reason TEXT,
                    awarded_bid INTEGER,
                    awarded_priority INTEGER,
                    submitted_at TEXT NOT NULL,
                    processed_at TEXT,
                    CHECK (status IN ('pending', 'successful', 'failed')),
                    CHECK (faab_bid IS NULL OR faab_bid >= 0),
                    FOREIGN KEY(league_id) REFERENCES leagues(league_id) ON DELETE CASCADE,
                    FOREIGN KEY(team_id) REFERENCES teams(team_id) ON DELETE CASCADE
                );
                CREATE INDEX IF NOT EXISTS idx_waiver_claims_league_status ON waiver_claims(league_id, status);
                CREATE INDEX IF NOT EXISTS idx_waiver_claims_team ON waiver_claims(team_id, status);

                CREATE TABLE IF NOT EXISTS notifications (
                    notification_id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    league_id TEXT,
                    type TEXT NOT NULL,
                    title TEXT NOT NULL,
                    message TEXT NOT NULL,
                    data_json TEXT,
                    delivered INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL
                );
                CREATE INDEX IF NOT EXISTS idx_notifications_user ON notifications(user_id, delivered);

                -- Transactions log (add/drop rows written inside the claim transaction)
                CREATE TABLE IF NOT EXISTS transactions_log (
                    tx_hash TEXT PRIMARY KEY,
                    tx_type TEXT NOT NULL,
                    tx_date TEXT,
                    league_id TEXT,
                    team_id TEXT,
                    claim_id TEXT,
                    week INTEGER,
                    payload_json TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );
                CREATE INDEX IF NOT EXISTS idx_tx_league_date ON transactions_log(league_id, tx_date);
                CREATE INDEX IF NOT EXISTS idx_tx_claim ON transactions_log(claim_id);
"""


def migrate(cur: sqlite3.Cursor, *, ensure_columns: EnsureColumnsFn) -> None:
    """Apply post-DDL schema migrations."""
    ensure_columns(
        cur,
        "waiver_claims",
        {
            "awarded_bid": "INTEGER",
            "awarded_priority": "INTEGER",
        },
    )
