"""Select the single rule that applies to a file."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from smartorg.ingestion.models import FileInfo

from .conditions import ComparisonMode, evaluate
from .models import OrganizationRule


def rule_matches(
    rule: OrganizationRule, file: FileInfo, *, mode: ComparisonMode = "native"
) -> bool:
    """Return whether every condition of ``rule`` holds for ``file``.

    Rules without conditions match unconditionally. The enabled flag is not
    consulted here; ``select_rule`` filters disabled rules first.
    """
    return all(evaluate(condition, file, mode=mode) for condition in rule.conditions)


def candidate_order(rules: Iterable[OrganizationRule]) -> list[OrganizationRule]:
    """Return enabled rules, highest priority first, ties in input order."""
    # sorted() is stable, so equal priorities keep their insertion order.
    return sorted((rule for rule in rules if rule.enabled), key=lambda rule: -rule.priority)


def select_rule(
    file: FileInfo,
    rules: Sequence[OrganizationRule],
    *,
    mode: ComparisonMode = "native",
) -> Optional[OrganizationRule]:
    """Return the highest-priority enabled rule matching ``file``, if any.

    Args:
        file: Snapshot being organized.
        rules: Rule list in insertion order; it is not modified.
        mode: Comparison mode forwarded to the condition evaluator.

    Returns:
        Optional[OrganizationRule]: The one rule to apply, or ``None``.
    """
    for rule in candidate_order(rules):
        if rule_matches(rule, file, mode=mode):
            return rule
    return None


__all__ = ["rule_matches", "candidate_order", "select_rule"]
