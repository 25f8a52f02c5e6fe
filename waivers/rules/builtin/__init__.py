from __future__ import annotations

from .budget_rule import BudgetRule
from .drop_target_rule import DropTargetRule
from .player_availability_rule import PlayerAvailabilityRule
from .roster_capacity_rule import RosterCapacityRule

BUILTIN_RULES = [
    PlayerAvailabilityRule(),
    BudgetRule(),
    DropTargetRule(),
    RosterCapacityRule(),
]
