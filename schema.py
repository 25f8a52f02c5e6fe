# schema.py
"""Canonical identifiers shared by the repository and the waiver engine.

- league_id / team_id / player_id / claim_id are opaque, non-empty strings.
- Numeric ids coming from JSON payloads are accepted and stringified.
- Never compare raw payload values against DB ids; normalize first.
"""

from __future__ import annotations

from typing import Any, Iterable, NewType

SCHEMA_VERSION = "waivers-3"

LeagueId = NewType("LeagueId", str)
TeamId = NewType("TeamId", str)
PlayerId = NewType("PlayerId", str)
ClaimId = NewType("ClaimId", str)

_MAX_ID_LEN = 128


def _normalize_id(value: Any, *, kind: str, strict: bool) -> str:
    if value is None or isinstance(value, bool):
        raise ValueError(f"{kind} is required (got {value!r})")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{kind} must be an integer-like id (got {value!r})")
        value = int(value)
    s = str(value).strip()
    if not s:
        raise ValueError(f"{kind} must be a non-empty string")
    if strict:
        if len(s) > _MAX_ID_LEN:
            raise ValueError(f"{kind} too long ({len(s)} > {_MAX_ID_LEN})")
        if any(ch.isspace() for ch in s):
            raise ValueError(f"{kind} must not contain whitespace: {s!r}")
    return s


def normalize_league_id(value: Any, *, strict: bool = True) -> LeagueId:
    return LeagueId(_normalize_id(value, kind="league_id", strict=strict))


def normalize_team_id(value: Any, *, strict: bool = True) -> TeamId:
    return TeamId(_normalize_id(value, kind="team_id", strict=strict))


def normalize_player_id(value: Any, *, strict: bool = True) -> PlayerId:
    return PlayerId(_normalize_id(value, kind="player_id", strict=strict))


def normalize_claim_id(value: Any, *, strict: bool = True) -> ClaimId:
    return ClaimId(_normalize_id(value, kind="claim_id", strict=strict))


def assert_unique_ids(ids: Iterable[str], *, what: str = "id") -> None:
    seen: set[str] = set()
    dupes: set[str] = set()
    for i in ids:
        if i in seen:
            dupes.add(i)
        seen.add(i)
    if dupes:
        raise ValueError(f"duplicate {what}: {sorted(dupes)[:20]}")
