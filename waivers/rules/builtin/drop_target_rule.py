from __future__ import annotations

from dataclasses import dataclass

from ...errors import REASON_DROP_LOCKED, REASON_DROP_NOT_ON_ROSTER, ClaimRejected
from ...models import WaiverClaim
from ..base import ClaimContext


@dataclass
class DropTargetRule:
    rule_id: str = "drop_target"
    priority: int = 30
    enabled: bool = True

    def validate(self, claim: WaiverClaim, ctx: ClaimContext) -> None:
        if claim.drop_player_id is None:
            return
        entry = ctx.roster_entry(claim.drop_player_id)
        if entry is None or str(entry["team_id"]) != claim.team_id:
            raise ClaimRejected(
                REASON_DROP_NOT_ON_ROSTER,
                {"rule": self.rule_id, "team_id": claim.team_id, "drop_player_id": claim.drop_player_id},
            )
        if entry["is_locked"]:
            raise ClaimRejected(
                REASON_DROP_LOCKED,
                {"rule": self.rule_id, "team_id": claim.team_id, "drop_player_id": claim.drop_player_id},
            )
