"""Claim submission, cancellation and listing.

These run outside a waiver run and validate against state at submission time.
The run re-validates everything against live state, so a claim accepted here
can still fail later (player taken, budget spent, roster filled).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import game_time
from league_repo import CLAIM_STATUSES, LeagueRepo
from schema import normalize_league_id, normalize_player_id, normalize_team_id

from .config import DEFAULT_WAIVER_CONFIG, WaiverConfig
from .errors import (
    CLAIM_FORBIDDEN,
    CLAIM_INVALID,
    CLAIM_NOT_FOUND,
    CLAIM_NOT_PENDING,
    PLAYER_NOT_FOUND,
    TEAM_NOT_FOUND,
    WaiverError,
)
from .processor import load_league_settings

logger = logging.getLogger(__name__)


def _coerce_bid(bid_amount: Any) -> Optional[int]:
    if bid_amount is None:
        return None
    if isinstance(bid_amount, bool):
        raise WaiverError(CLAIM_INVALID, "bid_amount must be an integer", {"bid_amount": bid_amount})
    try:
        bid = int(bid_amount)
    except (TypeError, ValueError):
        raise WaiverError(CLAIM_INVALID, "bid_amount must be an integer", {"bid_amount": bid_amount})
    if isinstance(bid_amount, float) and bid != bid_amount:
        raise WaiverError(CLAIM_INVALID, "bid_amount must be an integer", {"bid_amount": bid_amount})
    return bid


def submit_claim(
    repo: LeagueRepo,
    *,
    league_id: str,
    team_id: str,
    player_id: str,
    drop_player_id: Optional[str] = None,
    bid_amount: Optional[int] = None,
    week: Optional[int] = None,
    config: WaiverConfig = DEFAULT_WAIVER_CONFIG,
) -> Dict[str, Any]:
    """Validate and store a pending claim; returns the stored claim row.

    Raises:
        WaiverError: LEAGUE_NOT_FOUND, TEAM_NOT_FOUND, PLAYER_NOT_FOUND or
            CLAIM_INVALID (details carry the offending values).
    """
    lid = str(normalize_league_id(league_id))
    tid = str(normalize_team_id(team_id))
    pid = str(normalize_player_id(player_id))
    drop_pid = str(normalize_player_id(drop_player_id)) if drop_player_id is not None else None

    settings = load_league_settings(repo, lid, config=config)

    team = repo.get_team(tid)
    if team is None or str(team.get("league_id")) != lid:
        raise WaiverError(TEAM_NOT_FOUND, "team not found in league", {"league_id": lid, "team_id": tid})
    if repo.get_player(pid) is None:
        raise WaiverError(PLAYER_NOT_FOUND, "player not found", {"player_id": pid})

    if drop_pid is not None and drop_pid == pid:
        raise WaiverError(CLAIM_INVALID, "cannot drop the player being claimed", {"player_id": pid})

    if repo.get_roster_entry(lid, pid) is not None:
        raise WaiverError(CLAIM_INVALID, "player is already on a roster", {"player_id": pid})

    if repo.find_pending_claim(tid, pid) is not None:
        raise WaiverError(CLAIM_INVALID, "team already has a pending claim for this player", {"team_id": tid, "player_id": pid})

    bid = _coerce_bid(bid_amount)
    if settings.is_faab:
        bid = 0 if bid is None else bid
        if bid < 0:
            raise WaiverError(CLAIM_INVALID, "bid_amount must be non-negative", {"bid_amount": bid})
        if bid < settings.minimum_bid:
            raise WaiverError(
                CLAIM_INVALID,
                f"minimum bid is ${settings.minimum_bid}",
                {"bid_amount": bid, "minimum_bid": settings.minimum_bid},
            )
        available = int(team["faab_budget"]) - int(team["faab_spent"]) - repo.sum_pending_bids(tid)
        if bid > available:
            raise WaiverError(
                CLAIM_INVALID,
                "bid exceeds available FAAB budget (pending bids included)",
                {"bid_amount": bid, "available": available},
            )
    elif bid:
        raise WaiverError(CLAIM_INVALID, "priority waiver leagues do not take bids", {"bid_amount": bid})
    else:
        bid = None

    if drop_pid is not None:
        entry = repo.get_roster_entry(lid, drop_pid)
        if entry is None or str(entry.get("team_id")) != tid:
            raise WaiverError(CLAIM_INVALID, "drop player not on roster", {"drop_player_id": drop_pid})
        if entry.get("is_locked"):
            raise WaiverError(CLAIM_INVALID, "cannot drop locked player", {"drop_player_id": drop_pid})
    elif repo.count_roster(tid) >= settings.max_roster_size:
        raise WaiverError(
            CLAIM_INVALID,
            "roster full, no drop specified",
            {"roster_size": repo.count_roster(tid), "max_roster_size": settings.max_roster_size},
        )

    claim_id = repo.insert_claim(
        league_id=lid,
        team_id=tid,
        player_id=pid,
        drop_player_id=drop_pid,
        faab_bid=bid,
        priority=int(team["waiver_priority"]),
        week=int(week) if week is not None else settings.current_week,
        submitted_at=game_time.now_utc_like_iso(),
    )
    logger.info("waiver claim submitted claim_id=%s team_id=%s player_id=%s bid=%s", claim_id, tid, pid, bid)
    return repo.get_claim(claim_id) or {"claim_id": claim_id}


def cancel_claim(repo: LeagueRepo, claim_id: str, *, team_id: str) -> Dict[str, Any]:
    """Withdraw a pending claim. Only the team that submitted it may cancel."""
    claim = repo.get_claim(claim_id)
    if claim is None:
        raise WaiverError(CLAIM_NOT_FOUND, "claim not found", {"claim_id": claim_id})
    tid = str(normalize_team_id(team_id))
    if str(claim["team_id"]) != tid:
        raise WaiverError(CLAIM_FORBIDDEN, "claim belongs to another team", {"claim_id": claim_id, "team_id": tid})
    if claim["status"] != "pending" or not repo.delete_pending_claim(claim_id):
        # Re-read: a concurrent run may have finalized it between the two calls.
        current = repo.get_claim(claim_id) or claim
        raise WaiverError(
            CLAIM_NOT_PENDING,
            "only pending claims can be cancelled",
            {"claim_id": claim_id, "status": current.get("status")},
        )
    logger.info("waiver claim cancelled claim_id=%s team_id=%s", claim_id, tid)
    return {"claim_id": str(claim["claim_id"]), "cancelled": True}


def list_claims(
    repo: LeagueRepo,
    league_id: str,
    *,
    team_id: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = 200,
) -> List[Dict[str, Any]]:
    """Claims of a league, newest first."""
    if status is not None and str(status).lower() not in CLAIM_STATUSES:
        raise WaiverError(CLAIM_INVALID, "unknown claim status", {"status": status, "allowed": list(CLAIM_STATUSES)})
    return repo.list_claims(league_id, team_id=team_id, status=status, limit=limit)
