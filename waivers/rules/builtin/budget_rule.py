from __future__ import annotations

from dataclasses import dataclass

from ...errors import REASON_INSUFFICIENT_FAAB, ClaimRejected
from ...models import WaiverClaim
from ..base import ClaimContext


@dataclass
class BudgetRule:
    rule_id: str = "faab_budget"
    priority: int = 20
    enabled: bool = True

    def validate(self, claim: WaiverClaim, ctx: ClaimContext) -> None:
        if not ctx.settings.is_faab:
            return
        bid = int(claim.bid_amount or 0)
        remaining = ctx.remaining_faab()
        if bid > remaining:
            raise ClaimRejected(
                REASON_INSUFFICIENT_FAAB,
                {"rule": self.rule_id, "team_id": claim.team_id, "bid": bid, "remaining": remaining},
            )
