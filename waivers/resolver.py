"""Contention resolver: group pending claims by player and rank each group.

Pure: no I/O, no mutation. The same claims always produce the same order,
whatever order they arrive in.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from .models import LeagueSettings, WaiverClaim

SortKey = Tuple


def claim_sort_key(claim: WaiverClaim, settings: LeagueSettings) -> SortKey:
    """Rank key (ascending = better).

    FAAB:     bid desc, submitted_at asc, team waiver priority asc.
    PRIORITY: team waiver priority asc, submitted_at asc.
    claim_id closes any remaining tie so ranking is total.
    """
    if settings.is_faab:
        bid = claim.bid_amount
        if bid is None:
            raise ValueError(f"FAAB league claim without a bid: {claim.claim_id}")
        return (-bid, claim.submitted_at, claim.team_priority, claim.claim_id)
    rank = claim.rank_priority
    if rank is None:
        raise ValueError(f"priority league claim without a priority rank: {claim.claim_id}")
    return (rank, claim.submitted_at, claim.claim_id)


def rank_claims(claims: Iterable[WaiverClaim], settings: LeagueSettings) -> Dict[str, List[WaiverClaim]]:
    """Group claims by requested player, best candidate first.

    The returned dict is ordered by each group's best candidate, which is the
    global order the orchestrator walks the contested players in.
    """
    ordered = sorted(claims, key=lambda c: claim_sort_key(c, settings))
    groups: Dict[str, List[WaiverClaim]] = {}
    for claim in ordered:
        groups.setdefault(claim.player_id, []).append(claim)
    return groups


def contested_players(groups: Dict[str, List[WaiverClaim]]) -> List[str]:
    return [player_id for player_id, group in groups.items() if len(group) > 1]
