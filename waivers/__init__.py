"""Waiver claim resolution.

Public API:
  process_waiver_claims(repo_or_db_path, league_id, week=None) -> WaiverProcessingResult
  submit_claim / cancel_claim / list_claims
"""

from .claims import cancel_claim, list_claims, submit_claim
from .config import DEFAULT_WAIVER_CONFIG, WaiverConfig
from .errors import ClaimRejected, WaiverError
from .models import (
    ClaimOutcome,
    FaabBid,
    LeagueSettings,
    PriorityRank,
    WaiverClaim,
    WaiverMode,
    WaiverProcessingResult,
    WaiverType,
)
from .processor import process_waiver_claims
from .rebalancer import rebalance_waiver_priority, rotate_priority
from .resolver import rank_claims

__all__ = [
    "ClaimOutcome",
    "ClaimRejected",
    "DEFAULT_WAIVER_CONFIG",
    "FaabBid",
    "LeagueSettings",
    "PriorityRank",
    "WaiverClaim",
    "WaiverConfig",
    "WaiverError",
    "WaiverMode",
    "WaiverProcessingResult",
    "WaiverType",
    "cancel_claim",
    "list_claims",
    "process_waiver_claims",
    "rank_claims",
    "rebalance_waiver_priority",
    "rotate_priority",
    "submit_claim",
]
