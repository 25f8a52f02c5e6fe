"""Waiver claim rules engine.

Rules run inside the claim transaction against live state, in priority order,
and reject a claim by raising ClaimRejected with the persisted failure reason.

How to add a new rule:
1) Create a new rule file in waivers/rules/builtin (e.g., my_rule.py).
2) Implement a Rule with rule_id, priority, enabled, and validate().
3) Register the rule in waivers/rules/builtin/__init__.py BUILTIN_RULES.
"""

from .base import ClaimContext, Rule, build_claim_context
from .registry import RuleRegistry, get_default_registry, validate_all

__all__ = [
    "ClaimContext",
    "Rule",
    "build_claim_context",
    "RuleRegistry",
    "get_default_registry",
    "validate_all",
]
