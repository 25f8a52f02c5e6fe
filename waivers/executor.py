"""Claim executor: validate one claim against live state and commit it atomically.

Each claim runs in its own LeagueRepo transaction. Rule rejections and
storage errors roll the whole claim back and come out as a failed
ClaimOutcome; nothing escapes past a single claim.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from league_repo import LeagueRepo

from .config import DEFAULT_WAIVER_CONFIG, WaiverConfig
from .errors import REASON_PROCESSING_ERROR, ClaimRejected
from .models import ClaimOutcome, ClaimStatus, LeagueSettings, WaiverClaim
from .rules import RuleRegistry, build_claim_context, validate_all

logger = logging.getLogger(__name__)


def with_claim_transaction(
    repo: LeagueRepo,
    claim: WaiverClaim,
    fn: Callable[[], ClaimOutcome],
) -> ClaimOutcome:
    """Run fn inside one transaction: commit on return, roll back on any raise.

    ClaimRejected becomes a failed outcome with the rule's reason; any other
    exception becomes a failed outcome with the generic processing-error reason.
    """
    try:
        with repo.transaction():
            return fn()
    except ClaimRejected as rej:
        logger.info(
            "waiver claim rejected claim_id=%s team_id=%s player_id=%s reason=%s",
            claim.claim_id,
            claim.team_id,
            claim.player_id,
            rej.reason,
        )
        return ClaimOutcome.failure(claim, rej.reason)
    except Exception:
        logger.warning(
            "WAIVER_CLAIM_COMMIT_FAILED claim_id=%s team_id=%s player_id=%s",
            claim.claim_id,
            claim.team_id,
            claim.player_id,
            exc_info=True,
        )
        return ClaimOutcome.failure(claim, REASON_PROCESSING_ERROR)


def _player_name(repo: LeagueRepo, player_id: str) -> str:
    player = repo.get_player(player_id)
    return str(player["name"]) if player else player_id


def _success_message(player_name: str, bid: Optional[int], dropped_name: Optional[str]) -> str:
    msg = f"You successfully claimed {player_name}"
    if bid:
        msg += f" for ${bid}"
    if dropped_name:
        msg += f" (dropped {dropped_name})"
    return msg + "."


def _commit_claim(
    repo: LeagueRepo,
    claim: WaiverClaim,
    settings: LeagueSettings,
    *,
    awarded: set[str],
    week: int,
    config: WaiverConfig,
    registry: Optional[RuleRegistry],
) -> ClaimOutcome:
    row = repo.get_claim(claim.claim_id)
    if row is None or row.get("status") != ClaimStatus.PENDING.value:
        # Already terminal (or cancelled): re-runs never re-evaluate.
        return ClaimOutcome.skip(claim)

    ctx = build_claim_context(repo, claim, settings, awarded=awarded)
    validate_all(claim, ctx, registry=registry)

    team = ctx.team
    bid = int(claim.bid_amount or 0) if settings.is_faab else None
    player_name = _player_name(repo, claim.player_id)
    dropped_name = _player_name(repo, claim.drop_player_id) if claim.drop_player_id else None

    if claim.drop_player_id is not None:
        repo.remove_roster_entry(claim.team_id, claim.drop_player_id)
    repo.add_roster_entry(
        settings.league_id,
        claim.team_id,
        claim.player_id,
        slot=config.acquired_slot,
        acquisition_type=config.acquisition_type,
    )
    if bid:
        repo.increment_faab_spent(claim.team_id, bid)

    awarded_priority = int(team["waiver_priority"])
    if not repo.mark_claim_successful(claim.claim_id, awarded_bid=bid, awarded_priority=awarded_priority):
        raise RuntimeError(f"claim {claim.claim_id} left pending state mid-transaction")

    if config.write_transaction_log:
        entries = []
        if claim.drop_player_id is not None:
            entries.append(
                {
                    "type": "drop",
                    "league_id": settings.league_id,
                    "team_id": claim.team_id,
                    "claim_id": claim.claim_id,
                    "week": week,
                    "player_id": claim.drop_player_id,
                    "player_name": dropped_name,
                    "via_waiver": True,
                }
            )
        entries.append(
            {
                "type": "add",
                "league_id": settings.league_id,
                "team_id": claim.team_id,
                "claim_id": claim.claim_id,
                "week": week,
                "player_id": claim.player_id,
                "player_name": player_name,
                "faab_bid": bid,
                "via_waiver": True,
            }
        )
        repo.insert_transactions(entries)

    repo.insert_notification(
        user_id=str(team["owner_id"]),
        league_id=settings.league_id,
        kind=config.success_notification_type,
        title=config.success_notification_title,
        message=_success_message(player_name, bid, dropped_name),
        data={
            "claim_id": claim.claim_id,
            "player_id": claim.player_id,
            "player_name": player_name,
            "team_id": claim.team_id,
            "team_name": team.get("name"),
            "bid_amount": bid,
            "dropped_player_id": claim.drop_player_id,
            "successful": True,
        },
    )

    return ClaimOutcome.success(claim, awarded_bid=bid, awarded_priority=awarded_priority)


def _record_failure(
    repo: LeagueRepo,
    claim: WaiverClaim,
    settings: LeagueSettings,
    reason: str,
    *,
    config: WaiverConfig,
) -> bool:
    """Persist pending -> failed (plus the failure notification) in its own transaction."""
    try:
        with repo.transaction():
            if not repo.mark_claim_failed(claim.claim_id, reason):
                return False
            if config.notify_failures:
                team = repo.get_team(claim.team_id)
                if team is not None:
                    player_name = _player_name(repo, claim.player_id)
                    repo.insert_notification(
                        user_id=str(team["owner_id"]),
                        league_id=settings.league_id,
                        kind=config.failure_notification_type,
                        title=config.failure_notification_title,
                        message=f"Your waiver claim for {player_name} failed: {reason}",
                        data={
                            "claim_id": claim.claim_id,
                            "player_id": claim.player_id,
                            "player_name": player_name,
                            "team_id": claim.team_id,
                            "bid_amount": claim.bid_amount,
                            "successful": False,
                            "failure_reason": reason,
                        },
                    )
            return True
    except Exception:
        logger.warning("WAIVER_CLAIM_FAIL_MARK_FAILED claim_id=%s reason=%s", claim.claim_id, reason, exc_info=True)
        return False


def execute_claim(
    repo: LeagueRepo,
    claim: WaiverClaim,
    settings: LeagueSettings,
    *,
    awarded: set[str],
    week: int,
    config: WaiverConfig = DEFAULT_WAIVER_CONFIG,
    registry: Optional[RuleRegistry] = None,
) -> ClaimOutcome:
    """Validate and commit a single claim; returns successful, failed or skipped.

    `awarded` is the run's set of players already won; a success adds to it.
    """
    outcome = with_claim_transaction(
        repo,
        claim,
        lambda: _commit_claim(
            repo,
            claim,
            settings,
            awarded=awarded,
            week=week,
            config=config,
            registry=registry,
        ),
    )
    if outcome.failed:
        if not _record_failure(repo, claim, settings, str(outcome.reason), config=config):
            # Nothing was stored: either someone else finalized the claim, or it is
            # still pending and the next run evaluates it again.
            logger.warning(
                "WAIVER_CLAIM_FAILURE_UNRECORDED claim_id=%s reason=%s", claim.claim_id, outcome.reason
            )
            return ClaimOutcome.skip(claim)
    elif outcome.successful:
        awarded.add(claim.player_id)
        logger.info(
            "waiver claim awarded claim_id=%s team_id=%s player_id=%s bid=%s",
            claim.claim_id,
            claim.team_id,
            claim.player_id,
            outcome.awarded_bid,
        )
    return outcome
