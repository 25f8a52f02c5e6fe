from __future__ import annotations

from dataclasses import dataclass

from ...errors import REASON_PLAYER_UNAVAILABLE, ClaimRejected
from ...models import WaiverClaim
from ..base import ClaimContext


@dataclass
class PlayerAvailabilityRule:
    rule_id: str = "player_availability"
    priority: int = 10
    enabled: bool = True

    def validate(self, claim: WaiverClaim, ctx: ClaimContext) -> None:
        if claim.player_id in ctx.awarded:
            raise ClaimRejected(
                REASON_PLAYER_UNAVAILABLE,
                {"rule": self.rule_id, "player_id": claim.player_id, "source": "awarded_this_run"},
            )
        # Live roster, not the pre-batch snapshot: an earlier claim may have just placed him.
        entry = ctx.roster_entry(claim.player_id)
        if entry is not None:
            raise ClaimRejected(
                REASON_PLAYER_UNAVAILABLE,
                {"rule": self.rule_id, "player_id": claim.player_id, "rostered_by": entry["team_id"]},
            )
