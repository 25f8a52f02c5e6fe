"""Rolling waiver priority: successful claimants move to the back of the line."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence

from league_repo import LeagueRepo

from .models import LeagueSettings

logger = logging.getLogger(__name__)


def rotate_priority(ordered_team_ids: Sequence[str], winners: Iterable[str]) -> List[str]:
    """New priority order (index 0 = priority 1).

    Non-winners keep their relative order and move up; winners go to the back
    in the relative order they held before the run.
    """
    won = set(winners)
    stay = [t for t in ordered_team_ids if t not in won]
    demoted = [t for t in ordered_team_ids if t in won]
    return stay + demoted


def rebalance_waiver_priority(
    repo: LeagueRepo,
    league_id: str,
    winners: Iterable[str],
    settings: LeagueSettings,
) -> Dict[str, int]:
    """Apply rolling priority after a run. Returns {team_id: new_priority} for changed teams.

    FAAB and static-priority leagues are left untouched.
    """
    if not settings.uses_rolling_priority:
        return {}
    winners = set(winners)
    if not winners:
        return {}

    teams = repo.list_teams(league_id)
    before = {str(t["team_id"]): int(t["waiver_priority"]) for t in teams}
    new_order = rotate_priority([str(t["team_id"]) for t in teams], winners)
    after = {team_id: i for i, team_id in enumerate(new_order, start=1)}

    changed = {team_id: p for team_id, p in after.items() if before.get(team_id) != p}
    if changed:
        repo.set_waiver_priorities(league_id, after)
        logger.info(
            "waiver priority rotated league_id=%s winners=%s changed=%d",
            league_id,
            sorted(winners),
            len(changed),
        )
    return changed
