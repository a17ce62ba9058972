"""Ordinal normalization for LTM policy rules.

The appliance evaluates policy rules by their ``ordinal`` and does not
renumber them for us, so before every create/update each rule gets its
0-based position as ordinal and its actions/conditions are renamed "0", "1",
... in declaration order. Applying this to an already normalized policy
changes nothing.
"""
from dataclasses import replace
from typing import Any, Sequence


def normalize_rules(rules: Sequence[Any]) -> list:
    """Return copies of ``rules`` with ordinals and nested item names renumbered."""
    normalized = []
    for ordinal, rule in enumerate(rules):
        normalized.append(replace(
            rule,
            ordinal=ordinal,
            actions=[replace(a, name=str(i)) for i, a in enumerate(rule.actions)],
            conditions=[replace(c, name=str(i)) for i, c in enumerate(rule.conditions)],
        ))
    return normalized


def normalize_policy(policy: Any) -> Any:
    """Return a copy of ``policy`` whose rules are normalized."""
    return replace(policy, rules=normalize_rules(policy.rules))


def is_normalized(policy: Any) -> bool:
    """Check whether a policy already carries contiguous ordinals and item names."""
    for ordinal, rule in enumerate(policy.rules):
        if rule.ordinal != ordinal:
            return False
        if any(a.name != str(i) for i, a in enumerate(rule.actions)):
            return False
        if any(c.name != str(i) for i, c in enumerate(rule.conditions)):
            return False
    return True
