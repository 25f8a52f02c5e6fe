from __future__ import annotations

from typing import Iterable, List, Optional

from ..models import WaiverClaim
from .base import ClaimContext, Rule


class RuleRegistry:
    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: List[Rule] = []
        for rule in rules:
            self.register(rule)

    def register(self, rule: Rule) -> None:
        if any(r.rule_id == rule.rule_id for r in self._rules):
            raise ValueError(f"duplicate rule_id: {rule.rule_id}")
        self._rules.append(rule)
        self._rules.sort(key=lambda r: (int(r.priority), r.rule_id))

    def enabled_rules(self) -> List[Rule]:
        return [r for r in self._rules if r.enabled]

    def __iter__(self):
        return iter(self.enabled_rules())


_DEFAULT_REGISTRY: Optional[RuleRegistry] = None


def get_default_registry() -> RuleRegistry:
    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        from .builtin import BUILTIN_RULES

        _DEFAULT_REGISTRY = RuleRegistry(BUILTIN_RULES)
    return _DEFAULT_REGISTRY


def validate_all(claim: WaiverClaim, ctx: ClaimContext, *, registry: Optional[RuleRegistry] = None) -> None:
    """Run every enabled rule in priority order; the first rejection wins."""
    for rule in registry or get_default_registry():
        rule.validate(claim, ctx)
