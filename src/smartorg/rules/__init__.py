"""Rule data model, condition evaluation and rule selection."""

from .conditions import (
    applicable_operators,
    evaluate,
    is_operator_applicable,
    render_value,
    validate_rule,
)
from .defaults import default_rules
from .matcher import candidate_order, rule_matches, select_rule
from .models import (
    ActionType,
    ConditionOperator,
    ConditionType,
    OrganizationRule,
    RuleAction,
    RuleCondition,
)

__all__ = [
    "ActionType",
    "ConditionOperator",
    "ConditionType",
    "OrganizationRule",
    "RuleAction",
    "RuleCondition",
    "applicable_operators",
    "candidate_order",
    "default_rules",
    "evaluate",
    "is_operator_applicable",
    "render_value",
    "rule_matches",
    "select_rule",
    "validate_rule",
]
