from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class WaiverError(Exception):
    """Structured error for waiver flows.

    Raised for fatal (whole-run) failures and for rejected claim submissions.
    The server layer maps these to HTTP 4xx while keeping a stable
    machine-readable code for clients.
    """

    code: str
    message: str
    details: Optional[Any] = None

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code}: {self.message}"


class ClaimRejected(Exception):
    """A claim failed validation inside its transaction (per-claim, never fatal)."""

    def __init__(self, reason: str, details: Optional[dict] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.details = details or {}


# Error codes (stable API surface)
LEAGUE_NOT_FOUND = "LEAGUE_NOT_FOUND"
LEAGUE_CONFIG_INVALID = "LEAGUE_CONFIG_INVALID"
TEAM_NOT_FOUND = "TEAM_NOT_FOUND"
PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
CLAIM_NOT_FOUND = "CLAIM_NOT_FOUND"
CLAIM_INVALID = "CLAIM_INVALID"
CLAIM_NOT_PENDING = "CLAIM_NOT_PENDING"
CLAIM_FORBIDDEN = "CLAIM_FORBIDDEN"
WAIVER_RUN_BUSY = "WAIVER_RUN_BUSY"

NOT_FOUND_CODES = frozenset({LEAGUE_NOT_FOUND, TEAM_NOT_FOUND, PLAYER_NOT_FOUND, CLAIM_NOT_FOUND})

# Per-claim failure reasons (persisted on waiver_claims.failure_reason)
REASON_PLAYER_UNAVAILABLE = "player unavailable"
REASON_INSUFFICIENT_FAAB = "insufficient FAAB budget"
REASON_DROP_LOCKED = "cannot drop locked player"
REASON_DROP_NOT_ON_ROSTER = "drop player not on roster"
REASON_ROSTER_FULL_NO_DROP = "roster full, no drop specified"
REASON_ROSTER_FULL = "roster full"
REASON_PROCESSING_ERROR = "processing error"
