from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

from league_repo import LeagueRepo

from ..models import LeagueSettings, WaiverClaim


@dataclass
class ClaimContext:
    repo: LeagueRepo
    settings: LeagueSettings
    team: Dict[str, Any]
    # Players already won earlier in this run (threaded in by the orchestrator).
    awarded: set[str] = field(default_factory=set)

    # -----------------------------
    # Live accessors (read through the open claim transaction)
    # -----------------------------
    def roster_entry(self, player_id: str) -> Optional[Dict[str, Any]]:
        return self.repo.get_roster_entry(self.settings.league_id, player_id)

    def roster_size(self) -> int:
        return self.repo.count_roster(self.team["team_id"])

    def remaining_faab(self) -> int:
        return int(self.team["faab_budget"]) - int(self.team["faab_spent"])


class Rule(Protocol):
    rule_id: str
    priority: int
    enabled: bool

    def validate(self, claim: WaiverClaim, ctx: ClaimContext) -> None:
        ...


def build_claim_context(
    repo: LeagueRepo,
    claim: WaiverClaim,
    settings: LeagueSettings,
    *,
    awarded: Optional[set[str]] = None,
) -> ClaimContext:
    """Load the claiming team's live row. Call inside the claim transaction."""
    team = repo.get_team(claim.team_id)
    if team is None:
        raise KeyError(f"team not found: {claim.team_id}")
    if str(team["league_id"]) != settings.league_id:
        raise KeyError(f"team {claim.team_id} is not in league {settings.league_id}")
    return ClaimContext(
        repo=repo,
        settings=settings,
        team=team,
        awarded=awarded if awarded is not None else set(),
    )
