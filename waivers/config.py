from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class WaiverConfig:
    """Engine knobs that are not per-league settings."""

    # Roster ceiling when a league's settings omit maxRosterSize.
    default_max_roster_size: int = 16

    # New roster entries created by a successful claim.
    acquired_slot: str = "BENCH"
    acquisition_type: str = "waiver"

    # Notification records (delivery is someone else's job).
    success_notification_type: str = "WAIVER_PROCESSED"
    success_notification_title: str = "Waiver Claim Successful"
    failure_notification_type: str = "WAIVER_FAILED"
    failure_notification_title: str = "Waiver Claim Failed"
    notify_failures: bool = True

    # Transaction log rows written alongside each successful claim.
    write_transaction_log: bool = True

    # Same-process run lock for one (league, week). None = wait forever.
    lock_timeout_s: Optional[float] = None


DEFAULT_WAIVER_CONFIG = WaiverConfig()
