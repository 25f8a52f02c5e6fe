# league_repo.py
# Developer note:
# - SQLite DB is the single source of truth (SSOT) for leagues, teams, rosters and waiver claims.
# - league_id / team_id / player_id / claim_id are canonical strings (see schema.py).
# - Every write goes through LeagueRepo.transaction(); writes compose via SAVEPOINT nesting,
#   so the waiver executor can wrap several repo writes in one atomic claim transaction.
"""
LeagueRepo: persisted-data SSOT (SQLite)

Usage (CLI):
  python league_repo.py init --db <db_path>
  python league_repo.py validate --db <db_path>
  python league_repo.py process_waivers --db <db_path> --league <league_id> [--week 7]

Python:
  from league_repo import LeagueRepo
  with LeagueRepo("<db_path>") as repo:
      repo.init_db()
      teams = repo.list_teams("L1")
"""

from __future__ import annotations

import argparse
import contextlib
import hashlib
import json
import logging
import sqlite3
import uuid
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import game_time
from schema import (
    SCHEMA_VERSION,
    assert_unique_ids,
    normalize_claim_id,
    normalize_league_id,
    normalize_player_id,
    normalize_team_id,
)


# ----------------------------
# Helpers
# ----------------------------

logger = logging.getLogger(__name__)
_WARN_COUNTS: Dict[str, int] = {}


def _warn_limited(code: str, msg: str, *, limit: int = 5) -> None:
    n = _WARN_COUNTS.get(code, 0)
    if n < limit:
        logger.warning("%s %s", code, msg)
    _WARN_COUNTS[code] = n + 1


def _utc_now_iso() -> str:
    return game_time.now_utc_like_iso()


def _json_dumps(obj: Any) -> str:
    return json.dumps(
        obj,
        ensure_ascii=False,
        separators=(",", ":"),
        sort_keys=True,
        default=str,
    )


def _json_loads(value: Any, default: Any):
    """
    Safe JSON loader:
    - None -> default
    - already dict/list -> returns as-is
    - invalid JSON -> default
    """
    if value is None:
        return default
    if isinstance(value, (dict, list)):
        return value
    try:
        return json.loads(value)
    except (json.JSONDecodeError, TypeError):
        _warn_limited("JSON_DECODE_FAILED", f"value_preview={repr(str(value))[:120]}", limit=3)
        return default


def _coerce_int(value: Any, *, code: str, default: Optional[int] = None) -> Optional[int]:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        _warn_limited(code, f"value={value!r}", limit=3)
        return default
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        _warn_limited(code, f"value={value!r}", limit=3)
        return default


def _claim_row_to_dict(row: sqlite3.Row) -> Dict[str, Any]:
    d = dict(row)
    for key in ("claim_id", "league_id", "team_id", "player_id"):
        d[key] = str(d.get(key))
    if d.get("drop_player_id") is not None:
        d["drop_player_id"] = str(d["drop_player_id"])
    return d


CLAIM_STATUS_PENDING = "pending"
CLAIM_STATUS_SUCCESSFUL = "successful"
CLAIM_STATUS_FAILED = "failed"
CLAIM_STATUSES = (CLAIM_STATUS_PENDING, CLAIM_STATUS_SUCCESSFUL, CLAIM_STATUS_FAILED)


# ----------------------------
# Repository
# ----------------------------

class LeagueRepo:
    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)
        # isolation_level=None: no implicit BEGIN; transaction() owns BEGIN/COMMIT.
        self._conn = sqlite3.connect(self.db_path, isolation_level=None)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON;")
        if self.db_path != ":memory:":
            self._conn.execute("PRAGMA journal_mode = WAL;")
        # Nested transaction support (SAVEPOINT) for callers that compose repo methods.
        # (SQLite raises if BEGIN is issued while a transaction is already active.)
        self._savepoint_seq = 0

    def close(self) -> None:
        try:
            self._conn.close()
        except sqlite3.Error:
            _warn_limited("CONN_CLOSE_FAILED", f"db_path={self.db_path}", limit=1)

    @contextlib.contextmanager
    def transaction(self):
        """
        Atomic transaction helper.

        Supports nesting via SAVEPOINT:
        - outermost: BEGIN ... COMMIT/ROLLBACK
        - nested: SAVEPOINT ... RELEASE (or ROLLBACK TO + RELEASE on error)
        """
        cur = self._conn.cursor()
        nested = bool(self._conn.in_transaction)
        sp_name = None
        try:
            if nested:
                self._savepoint_seq += 1
                sp_name = f"sp_{self._savepoint_seq}"
                cur.execute(f"SAVEPOINT {sp_name};")
            else:
                cur.execute("BEGIN;")

            yield cur

            if nested and sp_name:
                cur.execute(f"RELEASE SAVEPOINT {sp_name};")
            else:
                cur.execute("COMMIT;")
        except Exception:
            if nested and sp_name:
                # Roll back to the savepoint only; do NOT rollback the outer transaction here.
                try:
                    cur.execute(f"ROLLBACK TO SAVEPOINT {sp_name};")
                finally:
                    cur.execute(f"RELEASE SAVEPOINT {sp_name};")
            elif self._conn.in_transaction:
                cur.execute("ROLLBACK;")
            raise
        finally:
            cur.close()

    # ------------------------
    # Schema
    # ------------------------

    def _ensure_table_columns(self, cur: sqlite3.Cursor, table: str, columns: Mapping[str, str]) -> None:
        """SQLite has no ADD COLUMN IF NOT EXISTS; check PRAGMA first."""
        rows = cur.execute(f"PRAGMA table_info({table});").fetchall()
        existing = {r["name"] for r in rows}
        for col, ddl in columns.items():
            if col in existing:
                continue
            cur.execute(f"ALTER TABLE {table} ADD COLUMN {col} {ddl};")

    def init_db(self) -> None:
        """Apply SQLite schema (DDL + migrations) via db_schema."""
        from db_schema import apply_schema

        now = _utc_now_iso()
        with self.transaction() as cur:
            apply_schema(
                cur,
                now=now,
                schema_version=SCHEMA_VERSION,
                ensure_columns=self._ensure_table_columns,
            )

    # ------------------------
    # Leagues
    # ------------------------

    def upsert_league(
        self,
        league_id: str,
        *,
        name: str,
        settings: Mapping[str, Any] | None = None,
        current_week: int = 1,
        commissioner_id: Optional[str] = None,
    ) -> None:
        lid = normalize_league_id(league_id)
        now = _utc_now_iso()
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT INTO leagues(league_id, name, commissioner_id, current_week, settings_json, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(league_id) DO UPDATE SET
                    name=excluded.name,
                    commissioner_id=excluded.commissioner_id,
                    current_week=excluded.current_week,
                    settings_json=excluded.settings_json,
                    updated_at=excluded.updated_at;
                """,
                (str(lid), str(name), commissioner_id, int(current_week), _json_dumps(dict(settings or {})), now, now),
            )

    def get_league(self, league_id: str) -> Optional[Dict[str, Any]]:
        lid = normalize_league_id(league_id)
        row = self._conn.execute("SELECT * FROM leagues WHERE league_id=?;", (str(lid),)).fetchone()
        if not row:
            return None
        d = dict(row)
        d["settings"] = _json_loads(d.get("settings_json"), {})
        if not isinstance(d["settings"], dict):
            d["settings"] = {}
        return d

    # ------------------------
    # Teams
    # ------------------------

    def upsert_team(
        self,
        team_id: str,
        *,
        league_id: str,
        name: str,
        owner_id: str,
        waiver_priority: int,
        faab_budget: int = 100,
        faab_spent: int = 0,
    ) -> None:
        tid = normalize_team_id(team_id)
        lid = normalize_league_id(league_id)
        now = _utc_now_iso()
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT INTO teams(team_id, league_id, name, owner_id, faab_budget, faab_spent, waiver_priority, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(team_id) DO UPDATE SET
                    league_id=excluded.league_id,
                    name=excluded.name,
                    owner_id=excluded.owner_id,
                    faab_budget=excluded.faab_budget,
                    faab_spent=excluded.faab_spent,
                    waiver_priority=excluded.waiver_priority,
                    updated_at=excluded.updated_at;
                """,
                (str(tid), str(lid), str(name), str(owner_id), int(faab_budget), int(faab_spent), int(waiver_priority), now, now),
            )

    def get_team(self, team_id: str) -> Optional[Dict[str, Any]]:
        tid = normalize_team_id(team_id)
        row = self._conn.execute("SELECT * FROM teams WHERE team_id=?;", (str(tid),)).fetchone()
        return dict(row) if row else None

    def list_teams(self, league_id: str) -> List[Dict[str, Any]]:
        """Teams of a league, best waiver priority first."""
        lid = normalize_league_id(league_id)
        rows = self._conn.execute(
            "SELECT * FROM teams WHERE league_id=? ORDER BY waiver_priority ASC, team_id ASC;",
            (str(lid),),
        ).fetchall()
        return [dict(r) for r in rows]

    def increment_faab_spent(self, team_id: str, amount: int) -> None:
        tid = normalize_team_id(team_id)
        amount_i = int(amount)
        if amount_i < 0:
            raise ValueError(f"FAAB increment must be non-negative, got {amount_i}")
        with self.transaction() as cur:
            cur.execute(
                "UPDATE teams SET faab_spent = faab_spent + ?, updated_at=? WHERE team_id=?;",
                (amount_i, _utc_now_iso(), str(tid)),
            )
            if cur.rowcount != 1:
                raise KeyError(f"team not found: {team_id}")

    def set_waiver_priorities(self, league_id: str, priorities: Mapping[str, int]) -> None:
        """Reassign waiver priorities for a league in one write."""
        lid = normalize_league_id(league_id)
        assert_unique_ids([str(p) for p in priorities.values()], what="waiver_priority")
        now = _utc_now_iso()
        with self.transaction() as cur:
            for team_id, priority in priorities.items():
                cur.execute(
                    "UPDATE teams SET waiver_priority=?, updated_at=? WHERE team_id=? AND league_id=?;",
                    (int(priority), now, str(normalize_team_id(team_id)), str(lid)),
                )
                if cur.rowcount != 1:
                    raise KeyError(f"team {team_id} not found in league {league_id}")

    # ------------------------
    # Players / Roster
    # ------------------------

    def upsert_player(self, player_id: str, *, name: str, position: str | None = None, nfl_team: str | None = None) -> None:
        pid = normalize_player_id(player_id)
        now = _utc_now_iso()
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT INTO players(player_id, name, position, nfl_team, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(player_id) DO UPDATE SET
                    name=excluded.name,
                    position=excluded.position,
                    nfl_team=excluded.nfl_team,
                    updated_at=excluded.updated_at;
                """,
                (str(pid), str(name), position, nfl_team, now, now),
            )

    def get_player(self, player_id: str) -> Optional[Dict[str, Any]]:
        pid = normalize_player_id(player_id)
        row = self._conn.execute("SELECT * FROM players WHERE player_id=?;", (str(pid),)).fetchone()
        return dict(row) if row else None

    def get_player_names(self, player_ids: Iterable[str]) -> Dict[str, str]:
        ids = sorted({str(normalize_player_id(p)) for p in player_ids})
        if not ids:
            return {}
        marks = ",".join("?" for _ in ids)
        rows = self._conn.execute(
            f"SELECT player_id, name FROM players WHERE player_id IN ({marks});",
            tuple(ids),
        ).fetchall()
        return {str(r["player_id"]): str(r["name"]) for r in rows}

    def add_roster_entry(
        self,
        league_id: str,
        team_id: str,
        player_id: str,
        *,
        slot: str = "BENCH",
        is_locked: bool = False,
        acquisition_type: Optional[str] = None,
    ) -> None:
        """Insert a roster entry; fails (IntegrityError) if the player is already rostered in the league."""
        lid = normalize_league_id(league_id)
        tid = normalize_team_id(team_id)
        pid = normalize_player_id(player_id)
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT INTO roster(league_id, team_id, player_id, slot, is_locked, acquisition_type, acquired_at)
                VALUES (?, ?, ?, ?, ?, ?, ?);
                """,
                (str(lid), str(tid), str(pid), str(slot), 1 if is_locked else 0, acquisition_type, _utc_now_iso()),
            )

    def remove_roster_entry(self, team_id: str, player_id: str) -> None:
        tid = normalize_team_id(team_id)
        pid = normalize_player_id(player_id)
        with self.transaction() as cur:
            cur.execute("DELETE FROM roster WHERE team_id=? AND player_id=?;", (str(tid), str(pid)))
            if cur.rowcount != 1:
                raise KeyError(f"roster entry not found: team_id={team_id} player_id={player_id}")

    def set_roster_lock(self, team_id: str, player_id: str, is_locked: bool) -> None:
        tid = normalize_team_id(team_id)
        pid = normalize_player_id(player_id)
        with self.transaction() as cur:
            cur.execute(
                "UPDATE roster SET is_locked=? WHERE team_id=? AND player_id=?;",
                (1 if is_locked else 0, str(tid), str(pid)),
            )
            if cur.rowcount != 1:
                raise KeyError(f"roster entry not found: team_id={team_id} player_id={player_id}")

    def get_roster_entry(self, league_id: str, player_id: str) -> Optional[Dict[str, Any]]:
        """Live roster entry of a player within a league (None = free agent)."""
        lid = normalize_league_id(league_id)
        pid = normalize_player_id(player_id)
        row = self._conn.execute(
            "SELECT * FROM roster WHERE league_id=? AND player_id=?;",
            (str(lid), str(pid)),
        ).fetchone()
        if not row:
            return None
        d = dict(row)
        d["is_locked"] = bool(d.get("is_locked"))
        return d

    def count_roster(self, team_id: str) -> int:
        tid = normalize_team_id(team_id)
        row = self._conn.execute("SELECT COUNT(1) AS n FROM roster WHERE team_id=?;", (str(tid),)).fetchone()
        return int(row["n"] if row is not None else 0)

    # ------------------------
    # Waiver claims
    # ------------------------

    def insert_claim(
        self,
        *,
        league_id: str,
        team_id: str,
        player_id: str,
        drop_player_id: Optional[str] = None,
        faab_bid: Optional[int] = None,
        priority: Optional[int] = None,
        week: Optional[int] = None,
        submitted_at: Optional[str] = None,
        claim_id: Optional[str] = None,
    ) -> str:
        """Insert a pending claim and return its id."""
        cid = str(normalize_claim_id(claim_id)) if claim_id is not None else f"claim-{uuid.uuid4().hex}"
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT INTO waiver_claims(
                    claim_id, league_id, team_id, player_id, drop_player_id, faab_bid, priority, week,
                    status, submitted_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, 'pending', ?);
                """,
                (
                    cid,
                    str(normalize_league_id(league_id)),
                    str(normalize_team_id(team_id)),
                    str(normalize_player_id(player_id)),
                    str(normalize_player_id(drop_player_id)) if drop_player_id is not None else None,
                    int(faab_bid) if faab_bid is not None else None,
                    int(priority) if priority is not None else None,
                    int(week) if week is not None else None,
                    submitted_at or _utc_now_iso(),
                ),
            )
        return cid

    def get_claim(self, claim_id: str) -> Optional[Dict[str, Any]]:
        cid = normalize_claim_id(claim_id)
        row = self._conn.execute("SELECT * FROM waiver_claims WHERE claim_id=?;", (str(cid),)).fetchone()
        return _claim_row_to_dict(row) if row else None

    def list_pending_claims(self, league_id: str, *, week: Optional[int] = None) -> List[Dict[str, Any]]:
        """Pending claims of a league (claims without a week, or due on/before `week`)."""
        lid = normalize_league_id(league_id)
        sql = "SELECT * FROM waiver_claims WHERE league_id=? AND status='pending'"
        params: List[Any] = [str(lid)]
        if week is not None:
            sql += " AND (week IS NULL OR week <= ?)"
            params.append(int(week))
        sql += " ORDER BY submitted_at ASC, claim_id ASC;"
        rows = self._conn.execute(sql, params).fetchall()
        return [_claim_row_to_dict(r) for r in rows]

    def list_claims(
        self,
        league_id: str,
        *,
        team_id: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 200,
    ) -> List[Dict[str, Any]]:
        lid = normalize_league_id(league_id)
        where = ["league_id = ?"]
        params: List[Any] = [str(lid)]
        if team_id is not None:
            where.append("team_id = ?")
            params.append(str(normalize_team_id(team_id)))
        if status is not None:
            where.append("status = ?")
            params.append(str(status).lower())
        sql = "SELECT * FROM waiver_claims WHERE " + " AND ".join(where)
        sql += " ORDER BY submitted_at DESC, claim_id DESC LIMIT ?;"
        params.append(max(1, int(limit)))
        rows = self._conn.execute(sql, params).fetchall()
        return [_claim_row_to_dict(r) for r in rows]

    def find_pending_claim(self, team_id: str, player_id: str) -> Optional[Dict[str, Any]]:
        row = self._conn.execute(
            "SELECT * FROM waiver_claims WHERE team_id=? AND player_id=? AND status='pending' LIMIT 1;",
            (str(normalize_team_id(team_id)), str(normalize_player_id(player_id))),
        ).fetchone()
        return _claim_row_to_dict(row) if row else None

    def sum_pending_bids(self, team_id: str) -> int:
        row = self._conn.execute(
            "SELECT COALESCE(SUM(faab_bid), 0) AS s FROM waiver_claims WHERE team_id=? AND status='pending';",
            (str(normalize_team_id(team_id)),),
        ).fetchone()
        return int(row["s"] if row is not None else 0)

    def mark_claim_successful(
        self,
        claim_id: str,
        *,
        awarded_bid: Optional[int],
        awarded_priority: Optional[int],
    ) -> bool:
        """pending -> successful. Returns False if the claim was no longer pending."""
        cid = normalize_claim_id(claim_id)
        with self.transaction() as cur:
            cur.execute(
                """
                UPDATE waiver_claims
                SET status='successful', failure_reason=NULL, awarded_bid=?, awarded_priority=?, processed_at=?
                WHERE claim_id=? AND status='pending';
                """,
                (awarded_bid, awarded_priority, _utc_now_iso(), str(cid)),
            )
            return cur.rowcount == 1

    def mark_claim_failed(self, claim_id: str, reason: str) -> bool:
        """pending -> failed. Returns False if the claim was no longer pending."""
        cid = normalize_claim_id(claim_id)
        with self.transaction() as cur:
            cur.execute(
                """
                UPDATE waiver_claims
                SET status='failed', failure_reason=?, processed_at=?
                WHERE claim_id=? AND status='pending';
                """,
                (str(reason), _utc_now_iso(), str(cid)),
            )
            return cur.rowcount == 1

    def delete_pending_claim(self, claim_id: str) -> bool:
        cid = normalize_claim_id(claim_id)
        with self.transaction() as cur:
            cur.execute("DELETE FROM waiver_claims WHERE claim_id=? AND status='pending';", (str(cid),))
            return cur.rowcount == 1

    # ------------------------
    # Notifications
    # ------------------------

    def insert_notification(
        self,
        *,
        user_id: str,
        kind: str,
        title: str,
        message: str,
        league_id: Optional[str] = None,
        data: Mapping[str, Any] | None = None,
    ) -> str:
        notification_id = str(uuid.uuid4())
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT INTO notifications(notification_id, user_id, league_id, type, title, message, data_json, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?);
                """,
                (
                    notification_id,
                    str(user_id),
                    league_id,
                    str(kind),
                    str(title),
                    str(message),
                    _json_dumps(dict(data or {})),
                    _utc_now_iso(),
                ),
            )
        return notification_id

    def list_notifications(self, user_id: str, *, undelivered_only: bool = False) -> List[Dict[str, Any]]:
        sql = "SELECT * FROM notifications WHERE user_id=?"
        if undelivered_only:
            sql += " AND delivered=0"
        sql += " ORDER BY created_at DESC, notification_id ASC;"
        rows = self._conn.execute(sql, (str(user_id),)).fetchall()
        out: List[Dict[str, Any]] = []
        for r in rows:
            d = dict(r)
            d["data"] = _json_loads(d.pop("data_json", None), {})
            d["delivered"] = bool(d.get("delivered"))
            out.append(d)
        return out

    # ------------------------
    # Transactions log
    # ------------------------

    def insert_transactions(self, entries: Sequence[Mapping[str, Any]]) -> None:
        if not entries:
            return
        now = _utc_now_iso()
        rows = []
        for e in entries:
            if not isinstance(e, Mapping):
                continue
            week_i = _coerce_int(e.get("week"), code="TX_WEEK_COERCE_FAILED")
            payload = _json_dumps(dict(e))
            tx_hash = hashlib.sha1(payload.encode("utf-8")).hexdigest()
            rows.append(
                (
                    tx_hash,
                    str(e.get("type") or "unknown"),
                    str(e.get("date") or now),
                    e.get("league_id"),
                    e.get("team_id"),
                    e.get("claim_id"),
                    week_i,
                    payload,
                    now,
                )
            )
        with self.transaction() as cur:
            cur.executemany(
                """
                INSERT OR IGNORE INTO transactions_log(
                    tx_hash, tx_type, tx_date, league_id, team_id, claim_id, week, payload_json, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);
                """,
                rows,
            )

    def list_transactions(
        self,
        *,
        league_id: Optional[str] = None,
        claim_id: Optional[str] = None,
        tx_type: Optional[str] = None,
        limit: int = 200,
    ) -> List[Dict[str, Any]]:
        where = []
        params: List[Any] = []
        if league_id:
            where.append("league_id = ?")
            params.append(str(league_id))
        if claim_id:
            where.append("claim_id = ?")
            params.append(str(claim_id))
        if tx_type:
            where.append("tx_type = ?")
            params.append(str(tx_type))

        sql = "SELECT payload_json FROM transactions_log"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY COALESCE(tx_date,'') DESC, created_at DESC LIMIT ?"
        params.append(max(1, int(limit)))

        rows = self._conn.execute(sql, params).fetchall()
        out: List[Dict[str, Any]] = []
        for r in rows:
            payload = _json_loads(r["payload_json"], None)
            if isinstance(payload, dict):
                out.append(payload)
            else:
                out.append({"value": payload})
        return out

    # ------------------------
    # Integrity
    # ------------------------

    def validate_integrity(self, league_id: Optional[str] = None) -> None:
        """
        Fail fast on broken waiver invariants.
        Run this after imports and after any batch processing.
        """
        if league_id is not None:
            league_ids = [str(normalize_league_id(league_id))]
        else:
            league_ids = [str(r["league_id"]) for r in self._conn.execute("SELECT league_id FROM leagues;").fetchall()]

        for lid in league_ids:
            league = self.get_league(lid)
            if league is None:
                raise ValueError(f"league not found: {lid}")
            teams = self.list_teams(lid)
            priorities = [int(t["waiver_priority"]) for t in teams]
            if sorted(priorities) != list(range(1, len(teams) + 1)):
                raise ValueError(f"waiver priorities of league {lid} are not a 1..N order: {priorities}")
            for t in teams:
                if int(t["faab_spent"]) > int(t["faab_budget"]):
                    raise ValueError(
                        f"team {t['team_id']} overspent FAAB: spent={t['faab_spent']} budget={t['faab_budget']}"
                    )

            ceiling = _coerce_int(
                (league.get("settings") or {}).get("maxRosterSize"),
                code="ROSTER_CEILING_COERCE_FAILED",
            )
            if ceiling is not None:
                for t in teams:
                    n = self.count_roster(t["team_id"])
                    if n > ceiling:
                        raise ValueError(f"team {t['team_id']} roster {n} exceeds ceiling {ceiling}")

            stray = self._conn.execute(
                """
                SELECT r.player_id, r.team_id
                FROM roster r
                JOIN teams t ON t.team_id = r.team_id
                WHERE r.league_id=? AND t.league_id<>r.league_id
                LIMIT 1;
                """,
                (lid,),
            ).fetchone()
            if stray:
                raise ValueError(
                    f"roster entry league mismatch: player_id={stray['player_id']} team_id={stray['team_id']}"
                )

    # ------------------------
    # Convenience
    # ------------------------

    def __enter__(self) -> "LeagueRepo":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# ----------------------------
# CLI
# ----------------------------

def _cmd_init(args) -> None:
    with LeagueRepo(args.db) as repo:
        repo.init_db()
    print(f"OK: initialized {args.db}")


def _cmd_validate(args) -> None:
    with LeagueRepo(args.db) as repo:
        repo.validate_integrity(args.league)
    print(f"OK: validation passed for {args.db}")


def _cmd_process_waivers(args) -> None:
    # local import: waivers imports league_repo
    from waivers.processor import process_waiver_claims

    with LeagueRepo(args.db) as repo:
        repo.init_db()
        result = process_waiver_claims(repo, args.league, args.week)
    print(json.dumps(result.to_dict(), indent=2, sort_keys=True))


def main(argv: Optional[Sequence[str]] = None) -> None:
    from config import configure_logging

    configure_logging()
    p = argparse.ArgumentParser(description="LeagueRepo (SQLite single source of truth)")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_init = sub.add_parser("init", help="initialize DB schema")
    p_init.add_argument("--db", required=True, help="path to sqlite db file")
    p_init.set_defaults(func=_cmd_init)

    p_val = sub.add_parser("validate", help="validate DB integrity")
    p_val.add_argument("--db", required=True, help="path to sqlite db file")
    p_val.add_argument("--league", default=None, help="limit validation to one league")
    p_val.set_defaults(func=_cmd_validate)

    p_proc = sub.add_parser("process_waivers", help="resolve pending waiver claims for one league")
    p_proc.add_argument("--db", required=True, help="path to sqlite db file")
    p_proc.add_argument("--league", required=True, help="league id")
    p_proc.add_argument("--week", type=int, default=None, help="processing week (default: league current week)")
    p_proc.set_defaults(func=_cmd_process_waivers)

    args = p.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
