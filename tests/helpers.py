"""Shared seeding for tests: a throwaway SQLite league per test case."""
from __future__ import annotations

import datetime as dt
import os
import shutil
import tempfile
from typing import Any, Dict, Iterable, Optional

import game_time
from league_repo import LeagueRepo
from waivers.models import FaabBid, LeagueSettings, PriorityRank, WaiverClaim, WaiverMode, WaiverType

BASE_TIME = dt.datetime(2024, 10, 1, 9, 0, tzinfo=dt.timezone.utc)


def at(minutes: int) -> str:
    return game_time.to_utc_like_iso(BASE_TIME + dt.timedelta(minutes=minutes))


def pin_clock(minutes: int = 0) -> None:
    game_time.set_fixed_now(BASE_TIME + dt.timedelta(minutes=minutes))


def unpin_clock() -> None:
    game_time.set_fixed_now(None)


def make_repo() -> tuple[LeagueRepo, str]:
    """Fresh migrated repo on a temp file. Caller removes the directory."""
    tmpdir = tempfile.mkdtemp(prefix="waivers-test-")
    repo = LeagueRepo(os.path.join(tmpdir, "league.db"))
    repo.init_db()
    return repo, tmpdir


def remove_tmpdir(tmpdir: str) -> None:
    shutil.rmtree(tmpdir, ignore_errors=True)


def seed_league(
    repo: LeagueRepo,
    *,
    league_id: str = "L1",
    waiver_type: str = "FAAB",
    waiver_mode: Optional[str] = None,
    max_roster_size: int = 3,
    current_week: int = 5,
    teams: int = 3,
    faab_budget: int = 100,
    minimum_bid: Optional[int] = None,
    free_agents: Iterable[str] = ("FA1", "FA2", "FA3"),
) -> Dict[str, Any]:
    """League with `teams` teams (T1 = priority 1), two rostered players each, plus free agents.

    Rostered players are named <team>_P1, <team>_P2; owners are owner-<team>.
    """
    settings: Dict[str, Any] = {"waiverType": waiver_type, "maxRosterSize": max_roster_size}
    if waiver_mode is not None:
        settings["waiverMode"] = waiver_mode
    if minimum_bid is not None:
        settings["minimumBid"] = minimum_bid
    repo.upsert_league(league_id, name=f"League {league_id}", settings=settings, current_week=current_week)

    team_ids = []
    for i in range(1, teams + 1):
        tid = f"T{i}"
        team_ids.append(tid)
        repo.upsert_team(
            tid,
            league_id=league_id,
            name=f"Team {i}",
            owner_id=f"owner-{tid}",
            waiver_priority=i,
            faab_budget=faab_budget,
        )
        for j in (1, 2):
            pid = f"{tid}_P{j}"
            repo.upsert_player(pid, name=f"Player {tid}.{j}", position="WR", nfl_team="KC")
            repo.add_roster_entry(league_id, tid, pid)

    for pid in free_agents:
        repo.upsert_player(pid, name=f"Free Agent {pid}", position="RB", nfl_team="SF")

    return {"league_id": league_id, "team_ids": team_ids}


def add_claim(
    repo: LeagueRepo,
    *,
    team_id: str,
    player_id: str,
    minutes: int,
    bid: Optional[int] = None,
    drop: Optional[str] = None,
    league_id: str = "L1",
    week: Optional[int] = 5,
    claim_id: Optional[str] = None,
) -> str:
    team = repo.get_team(team_id)
    return repo.insert_claim(
        league_id=league_id,
        team_id=team_id,
        player_id=player_id,
        drop_player_id=drop,
        faab_bid=bid,
        priority=int(team["waiver_priority"]) if team else None,
        week=week,
        submitted_at=at(minutes),
        claim_id=claim_id,
    )


def settings_for(waiver_type: WaiverType, waiver_mode: WaiverMode = WaiverMode.STATIC) -> LeagueSettings:
    return LeagueSettings(
        league_id="L1",
        name="League L1",
        waiver_type=waiver_type,
        waiver_mode=waiver_mode,
        max_roster_size=16,
        current_week=5,
    )


def claim(
    claim_id: str,
    *,
    team_id: str,
    player_id: str,
    minutes: int,
    team_priority: int,
    bid: Optional[int] = None,
) -> WaiverClaim:
    """In-memory claim for the pure resolver tests (bid=None means a priority league claim)."""
    terms = FaabBid(bid) if bid is not None else PriorityRank(team_priority)
    return WaiverClaim(
        claim_id=claim_id,
        league_id="L1",
        team_id=team_id,
        player_id=player_id,
        terms=terms,
        submitted_at=BASE_TIME + dt.timedelta(minutes=minutes),
        team_priority=team_priority,
    )
