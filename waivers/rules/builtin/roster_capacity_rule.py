from __future__ import annotations

from dataclasses import dataclass

from ...errors import REASON_ROSTER_FULL, REASON_ROSTER_FULL_NO_DROP, ClaimRejected
from ...models import WaiverClaim
from ..base import ClaimContext


@dataclass
class RosterCapacityRule:
    rule_id: str = "roster_capacity"
    priority: int = 40
    enabled: bool = True

    def validate(self, claim: WaiverClaim, ctx: ClaimContext) -> None:
        # Runs after DropTargetRule, so a named drop is known to be droppable.
        current = ctx.roster_size()
        outgoing = 1 if claim.drop_player_id is not None else 0
        new_count = current - outgoing + 1
        ceiling = int(ctx.settings.max_roster_size)
        if new_count <= ceiling:
            return
        reason = REASON_ROSTER_FULL if outgoing else REASON_ROSTER_FULL_NO_DROP
        raise ClaimRejected(
            reason,
            {"rule": self.rule_id, "team_id": claim.team_id, "count": new_count, "max": ceiling},
        )
