from __future__ import annotations

import datetime as _dt
from typing import Any, Optional

# Single clock source for every persisted timestamp (claims, roster, log rows).
# Tests and replays pin it with set_fixed_now(); production reads UTC.
_FIXED_NOW: Optional[_dt.datetime] = None


def _as_utc(value: _dt.datetime) -> _dt.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=_dt.timezone.utc)
    return value.astimezone(_dt.timezone.utc)


def set_fixed_now(value: Optional[_dt.datetime]) -> None:
    """Pin the clock (None restores the wall clock)."""
    global _FIXED_NOW
    _FIXED_NOW = _as_utc(value) if value is not None else None


def now_utc() -> _dt.datetime:
    if _FIXED_NOW is not None:
        return _FIXED_NOW
    return _dt.datetime.now(_dt.timezone.utc)


def to_utc_like_iso(value: _dt.datetime) -> str:
    # Fixed-width microsecond format so lexical order equals chronological order.
    return _as_utc(value).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def now_utc_like_iso() -> str:
    return to_utc_like_iso(now_utc())


def parse_utc_like_iso(value: Any, *, field: str = "timestamp") -> _dt.datetime:
    """
    Parse a stored timestamp back into an aware UTC datetime.
    Fail-loud: claims without a parseable timestamp cannot be tie-broken.
    """
    if isinstance(value, _dt.datetime):
        return _as_utc(value)
    if value is None:
        raise ValueError(f"{field} is required")
    s = str(value).strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        parsed = _dt.datetime.fromisoformat(s)
    except ValueError as exc:
        raise ValueError(f"Invalid {field}: {value!r}") from exc
    return _as_utc(parsed)
