from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

import game_time
from schema import normalize_claim_id, normalize_league_id, normalize_player_id, normalize_team_id

from .errors import LEAGUE_CONFIG_INVALID, WaiverError


class WaiverType(str, Enum):
    FAAB = "FAAB"
    PRIORITY = "PRIORITY"


class WaiverMode(str, Enum):
    ROLLING = "ROLLING"
    STATIC = "STATIC"


class ClaimStatus(str, Enum):
    PENDING = "pending"
    SUCCESSFUL = "successful"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class LeagueSettings:
    league_id: str
    name: str
    waiver_type: WaiverType
    waiver_mode: WaiverMode
    max_roster_size: int
    current_week: int
    minimum_bid: int = 0

    @property
    def is_faab(self) -> bool:
        return self.waiver_type is WaiverType.FAAB

    @property
    def uses_rolling_priority(self) -> bool:
        # Rolling only matters for priority leagues; FAAB ignores the mode.
        return self.waiver_type is WaiverType.PRIORITY and self.waiver_mode is WaiverMode.ROLLING


def _parse_enum(enum_cls, raw: Any, *, key: str, league_id: str):
    try:
        return enum_cls(str(raw).strip().upper())
    except ValueError:
        raise WaiverError(
            LEAGUE_CONFIG_INVALID,
            f"unrecognized {key}",
            {"league_id": league_id, key: raw, "allowed": [m.value for m in enum_cls]},
        )


def _parse_int_setting(raw: Any, *, key: str, league_id: str, default: int, minimum: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise WaiverError(LEAGUE_CONFIG_INVALID, f"{key} must be an integer", {"league_id": league_id, key: raw})
    if value < minimum:
        raise WaiverError(
            LEAGUE_CONFIG_INVALID,
            f"{key} must be >= {minimum}",
            {"league_id": league_id, key: value},
        )
    return value


def parse_league_settings(league: Mapping[str, Any], *, default_roster_size: int) -> LeagueSettings:
    """Turn a stored league row (untyped settings blob) into typed settings.

    Fail-closed: a missing or unknown waiverType is a league configuration
    error, never a silent fallback to priority waivers.
    """
    league_id = str(league.get("league_id"))
    raw = league.get("settings") or {}
    if not isinstance(raw, Mapping):
        raise WaiverError(LEAGUE_CONFIG_INVALID, "league settings must be an object", {"league_id": league_id})

    if raw.get("waiverType") is None:
        raise WaiverError(LEAGUE_CONFIG_INVALID, "waiverType is not configured", {"league_id": league_id})
    waiver_type = _parse_enum(WaiverType, raw.get("waiverType"), key="waiverType", league_id=league_id)

    raw_mode = raw.get("waiverMode")
    if raw_mode is None:
        waiver_mode = WaiverMode.STATIC
    else:
        waiver_mode = _parse_enum(WaiverMode, raw_mode, key="waiverMode", league_id=league_id)

    return LeagueSettings(
        league_id=league_id,
        name=str(league.get("name") or league_id),
        waiver_type=waiver_type,
        waiver_mode=waiver_mode,
        max_roster_size=_parse_int_setting(
            raw.get("maxRosterSize"), key="maxRosterSize", league_id=league_id, default=default_roster_size, minimum=1
        ),
        current_week=_parse_int_setting(
            league.get("current_week"), key="current_week", league_id=league_id, default=1, minimum=0
        ),
        minimum_bid=_parse_int_setting(
            raw.get("minimumBid"), key="minimumBid", league_id=league_id, default=0, minimum=0
        ),
    )


# -----------------------------------------------------------------------------
# Claim terms (tagged union chosen by waiver type at load time)
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FaabBid:
    amount: int

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(f"FAAB bid must be non-negative, got {self.amount}")


@dataclass(frozen=True, slots=True)
class PriorityRank:
    priority: int


ClaimTerms = Union[FaabBid, PriorityRank]


@dataclass(frozen=True, slots=True)
class WaiverClaim:
    claim_id: str
    league_id: str
    team_id: str
    player_id: str
    terms: ClaimTerms
    submitted_at: datetime
    # Team's waiver priority when the run loaded the claim (FAAB tie-break, PRIORITY rank).
    team_priority: int
    drop_player_id: Optional[str] = None
    week: Optional[int] = None
    status: ClaimStatus = ClaimStatus.PENDING

    @property
    def bid_amount(self) -> Optional[int]:
        return self.terms.amount if isinstance(self.terms, FaabBid) else None

    @property
    def rank_priority(self) -> Optional[int]:
        return self.terms.priority if isinstance(self.terms, PriorityRank) else None


def claim_from_row(row: Mapping[str, Any], settings: LeagueSettings, *, team_priority: int) -> WaiverClaim:
    terms: ClaimTerms
    if settings.is_faab:
        terms = FaabBid(int(row.get("faab_bid") or 0))
    else:
        terms = PriorityRank(int(team_priority))
    drop = row.get("drop_player_id")
    week = row.get("week")
    return WaiverClaim(
        claim_id=str(normalize_claim_id(row.get("claim_id"))),
        league_id=str(normalize_league_id(row.get("league_id"))),
        team_id=str(normalize_team_id(row.get("team_id"))),
        player_id=str(normalize_player_id(row.get("player_id"))),
        terms=terms,
        submitted_at=game_time.parse_utc_like_iso(row.get("submitted_at"), field="submitted_at"),
        team_priority=int(team_priority),
        drop_player_id=str(normalize_player_id(drop)) if drop is not None else None,
        week=int(week) if week is not None else None,
        status=ClaimStatus(str(row.get("status") or "pending")),
    )


# -----------------------------------------------------------------------------
# Outcomes
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ClaimOutcome:
    claim: WaiverClaim
    status: str  # "successful" | "failed" | "skipped"
    reason: Optional[str] = None
    awarded_bid: Optional[int] = None
    awarded_priority: Optional[int] = None

    @property
    def successful(self) -> bool:
        return self.status == ClaimStatus.SUCCESSFUL.value

    @property
    def failed(self) -> bool:
        return self.status == ClaimStatus.FAILED.value

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @classmethod
    def success(cls, claim: WaiverClaim, *, awarded_bid: Optional[int], awarded_priority: Optional[int]) -> "ClaimOutcome":
        return cls(claim, ClaimStatus.SUCCESSFUL.value, None, awarded_bid, awarded_priority)

    @classmethod
    def failure(cls, claim: WaiverClaim, reason: str) -> "ClaimOutcome":
        return cls(claim, ClaimStatus.FAILED.value, reason)

    @classmethod
    def skip(cls, claim: WaiverClaim) -> "ClaimOutcome":
        return cls(claim, "skipped")


@dataclass
class WaiverProcessingResult:
    league_id: str
    week: int
    successful_details: List[Dict[str, Any]] = field(default_factory=list)
    failed_details: List[Dict[str, Any]] = field(default_factory=list)
    priority_changes: Dict[str, int] = field(default_factory=dict)

    @property
    def processed_count(self) -> int:
        return len(self.successful_details)

    @property
    def failed_count(self) -> int:
        return len(self.failed_details)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "league_id": self.league_id,
            "week": self.week,
            "processed": self.processed_count,
            "failed": self.failed_count,
            "details": {
                "successful": [dict(d) for d in self.successful_details],
                "failed": [dict(d) for d in self.failed_details],
            },
            "priority_changes": dict(self.priority_changes),
        }
