"""Batch orchestrator: one waiver run for one league.

Flow:
  load settings (fatal on missing league / bad config, before any mutation)
  -> load pending claims due this week
  -> rank per player (resolver)
  -> feed every candidate to the executor in rank order
  -> rotate rolling priority once
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union

from league_repo import LeagueRepo
from schema import normalize_league_id

from .config import DEFAULT_WAIVER_CONFIG, WaiverConfig
from .errors import LEAGUE_NOT_FOUND, REASON_PROCESSING_ERROR, WAIVER_RUN_BUSY, WaiverError
from .executor import execute_claim
from .locks import waiver_run_lock
from .models import ClaimOutcome, LeagueSettings, WaiverClaim, WaiverProcessingResult, claim_from_row, parse_league_settings
from .rebalancer import rebalance_waiver_priority
from .resolver import contested_players, rank_claims
from .rules import RuleRegistry

logger = logging.getLogger(__name__)


def load_league_settings(repo: LeagueRepo, league_id: str, *, config: WaiverConfig = DEFAULT_WAIVER_CONFIG) -> LeagueSettings:
    league = repo.get_league(league_id)
    if league is None:
        raise WaiverError(LEAGUE_NOT_FOUND, "league not found", {"league_id": league_id})
    return parse_league_settings(league, default_roster_size=config.default_max_roster_size)


def _load_claims(
    repo: LeagueRepo,
    rows: List[Dict[str, Any]],
    settings: LeagueSettings,
    teams: Dict[str, Dict[str, Any]],
    result: WaiverProcessingResult,
) -> List[WaiverClaim]:
    # Teams outside the league sort last; build_claim_context fails them as a processing error.
    fallback_priority = len(teams) + 1
    claims: List[WaiverClaim] = []
    for row in rows:
        team = teams.get(str(row.get("team_id")))
        priority = int(team["waiver_priority"]) if team else fallback_priority
        try:
            claims.append(claim_from_row(row, settings, team_priority=priority))
        except (TypeError, ValueError):
            logger.warning("WAIVER_CLAIM_ROW_INVALID claim_id=%s", row.get("claim_id"), exc_info=True)
            if repo.mark_claim_failed(str(row.get("claim_id")), REASON_PROCESSING_ERROR):
                result.failed_details.append(
                    {
                        "claim_id": str(row.get("claim_id")),
                        "team": str((team or {}).get("name") or row.get("team_id")),
                        "player": str(row.get("player_id")),
                        "reason": REASON_PROCESSING_ERROR,
                    }
                )
    return claims


def _run(
    repo: LeagueRepo,
    settings: LeagueSettings,
    week: int,
    *,
    config: WaiverConfig,
    registry: Optional[RuleRegistry],
) -> WaiverProcessingResult:
    result = WaiverProcessingResult(league_id=settings.league_id, week=week)

    rows = repo.list_pending_claims(settings.league_id, week=week)
    if not rows:
        logger.info("no pending waiver claims league_id=%s week=%s", settings.league_id, week)
        return result

    teams = {str(t["team_id"]): t for t in repo.list_teams(settings.league_id)}
    claims = _load_claims(repo, rows, settings, teams, result)
    groups = rank_claims(claims, settings)
    player_names = repo.get_player_names(groups.keys())

    logger.info(
        "waiver run start league_id=%s week=%s type=%s claims=%d players=%d contested=%d",
        settings.league_id,
        week,
        settings.waiver_type.value,
        len(claims),
        len(groups),
        len(contested_players(groups)),
    )

    awarded: Set[str] = set()
    winners: Set[str] = set()
    for player_id, candidates in groups.items():
        for claim in candidates:
            outcome: ClaimOutcome = execute_claim(
                repo,
                claim,
                settings,
                awarded=awarded,
                week=week,
                config=config,
                registry=registry,
            )
            if outcome.skipped:
                continue
            team = teams.get(claim.team_id) or {}
            team_name = str(team.get("name") or claim.team_id)
            player_name = player_names.get(player_id, player_id)
            if outcome.successful:
                winners.add(claim.team_id)
                result.successful_details.append(
                    {
                        "claim_id": claim.claim_id,
                        "team": team_name,
                        "player": player_name,
                        "bid": outcome.awarded_bid,
                    }
                )
            else:
                result.failed_details.append(
                    {
                        "claim_id": claim.claim_id,
                        "team": team_name,
                        "player": player_name,
                        "reason": outcome.reason,
                    }
                )

    result.priority_changes = rebalance_waiver_priority(repo, settings.league_id, winners, settings)

    logger.info(
        "waiver run done league_id=%s week=%s processed=%d failed=%d priority_changes=%d",
        settings.league_id,
        week,
        result.processed_count,
        result.failed_count,
        len(result.priority_changes),
    )
    return result


def process_waiver_claims(
    repo_or_db_path: Union[LeagueRepo, str, Path],
    league_id: str,
    week: Optional[int] = None,
    *,
    config: WaiverConfig = DEFAULT_WAIVER_CONFIG,
    registry: Optional[RuleRegistry] = None,
) -> WaiverProcessingResult:
    """Resolve every pending claim of a league for one processing week.

    Args:
        repo_or_db_path: an open LeagueRepo, or a SQLite path (opened, migrated
            and closed here).
        week: processing week; defaults to the league's current week. Claims
            without a week, or due on/before it, are processed.

    Raises:
        WaiverError: LEAGUE_NOT_FOUND / LEAGUE_CONFIG_INVALID before anything is
            mutated; WAIVER_RUN_BUSY when another run of the same league/week
            holds the lock past config.lock_timeout_s.

    Per-claim problems never raise: they come back in result.failed_details.
    """
    if isinstance(repo_or_db_path, LeagueRepo):
        return _process(repo_or_db_path, league_id, week, config=config, registry=registry)

    with LeagueRepo(str(repo_or_db_path)) as repo:
        repo.init_db()
        return _process(repo, league_id, week, config=config, registry=registry)


def _process(
    repo: LeagueRepo,
    league_id: str,
    week: Optional[int],
    *,
    config: WaiverConfig,
    registry: Optional[RuleRegistry],
) -> WaiverProcessingResult:
    lid = str(normalize_league_id(league_id))
    settings = load_league_settings(repo, lid, config=config)
    run_week = int(week) if week is not None else settings.current_week

    try:
        with waiver_run_lock(lid, run_week, timeout_s=config.lock_timeout_s):
            return _run(repo, settings, run_week, config=config, registry=registry)
    except TimeoutError as exc:
        raise WaiverError(
            WAIVER_RUN_BUSY,
            "another waiver run for this league/week is in progress",
            {"league_id": lid, "week": run_week},
        ) from exc
