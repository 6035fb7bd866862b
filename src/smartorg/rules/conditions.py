"""Condition evaluation and authoring-time rule validation.

Two comparison modes are supported:

``native``
    Sizes compare as numbers and dates as timestamps. Date literals may be
    ISO-8601 strings or POSIX epoch seconds.

``legacy``
    Every attribute is rendered to a string first and numeric operators parse
    both sides as floats. Dates render as ISO-8601, which never parses as a
    float, so ordered date comparisons are always false in this mode.

Both modes fail closed: anything that cannot be parsed or compiled makes the
condition false rather than raising.
"""

from __future__ import annotations

import logging
import math
import operator as _op
import re
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable, Literal, Optional

from smartorg.ingestion.models import FileInfo

from .models import ConditionOperator, ConditionType, OrganizationRule, RuleCondition

LOGGER = logging.getLogger(__name__)

ComparisonMode = Literal["native", "legacy"]

_TEXT_OPERATORS = frozenset(
    {
        ConditionOperator.EQUALS,
        ConditionOperator.CONTAINS,
        ConditionOperator.STARTS_WITH,
        ConditionOperator.ENDS_WITH,
        ConditionOperator.MATCHES_REGEX,
    }
)
_ORDERED_OPERATORS = frozenset(
    {
        ConditionOperator.EQUALS,
        ConditionOperator.GREATER_THAN,
        ConditionOperator.LESS_THAN,
        ConditionOperator.GREATER_OR_EQUAL,
        ConditionOperator.LESS_OR_EQUAL,
    }
)
_NUMERIC_COMPARATORS: dict[ConditionOperator, Callable[[float, float], bool]] = {
    ConditionOperator.EQUALS: _op.eq,
    ConditionOperator.GREATER_THAN: _op.gt,
    ConditionOperator.LESS_THAN: _op.lt,
    ConditionOperator.GREATER_OR_EQUAL: _op.ge,
    ConditionOperator.LESS_OR_EQUAL: _op.le,
}


def applicable_operators(condition_type: ConditionType) -> frozenset[ConditionOperator]:
    """Return the operators a rule author may pair with ``condition_type``."""
    if condition_type.is_textual:
        return _TEXT_OPERATORS
    if condition_type is ConditionType.FILE_TYPE:
        return frozenset({ConditionOperator.EQUALS})
    return _ORDERED_OPERATORS


def is_operator_applicable(condition_type: ConditionType, operator: ConditionOperator) -> bool:
    return operator in applicable_operators(condition_type)


def validate_rule(rule: OrganizationRule) -> list[str]:
    """Return configuration problems in ``rule``; an empty list means it is valid.

    This is meant for rule editors and importers. ``evaluate`` never calls it.
    """
    problems: list[str] = []
    for index, condition in enumerate(rule.conditions, start=1):
        if not is_operator_applicable(condition.condition_type, condition.operator):
            problems.append(
                f"Condition {index}: operator '{condition.operator.value}' cannot be used "
                f"with '{condition.condition_type.value}'."
            )
        if condition.operator is ConditionOperator.MATCHES_REGEX:
            try:
                re.compile(condition.value)
            except re.error as exc:
                problems.append(f"Condition {index}: invalid regular expression ({exc}).")
    for index, action in enumerate(rule.actions, start=1):
        missing = action.missing_parameters()
        if missing:
            problems.append(
                f"Action {index} ({action.action_type.value}): missing "
                f"{', '.join(missing)}."
            )
    return problems


def render_value(condition_type: ConditionType, file: FileInfo) -> str:
    """Render the inspected attribute of ``file`` as a string."""
    if condition_type is ConditionType.NAME:
        return file.name
    if condition_type is ConditionType.EXTENSION:
        return file.extension
    if condition_type is ConditionType.SIZE:
        return str(file.size)
    if condition_type is ConditionType.CREATION_DATE:
        return _iso8601(file.created_at)
    if condition_type is ConditionType.MODIFICATION_DATE:
        return _iso8601(file.modified_at)
    if condition_type is ConditionType.PATH:
        return str(file.path)
    return file.file_type.value


def evaluate(
    condition: RuleCondition,
    file: FileInfo,
    *,
    mode: ComparisonMode = "native",
) -> bool:
    """Return whether ``condition`` holds for ``file``.

    The result depends only on the two arguments and ``mode``.
    """
    if mode == "legacy":
        return _evaluate_legacy(condition, file)

    condition_type = condition.condition_type
    if condition_type is ConditionType.SIZE:
        return _compare_numbers(float(file.size), _parse_float(condition.value), condition.operator)
    if condition_type.is_temporal:
        if condition_type is ConditionType.CREATION_DATE:
            moment = file.created_at
        else:
            moment = file.modified_at
        return _compare_numbers(
            _as_utc(moment).timestamp(), _parse_moment(condition.value), condition.operator
        )

    target = render_value(condition_type, file)
    expected = condition.value
    if not condition.case_sensitive:
        target = target.casefold()
        expected = expected.casefold()

    if condition.operator is ConditionOperator.MATCHES_REGEX:
        flags = 0 if condition.case_sensitive else re.IGNORECASE
        return _regex_search(condition.value, flags, target)
    return _compare_text(target, expected, condition.operator)


def _evaluate_legacy(condition: RuleCondition, file: FileInfo) -> bool:
    target = render_value(condition.condition_type, file)
    expected = condition.value
    if not condition.case_sensitive:
        target = target.lower()
        expected = expected.lower()

    if condition.operator is ConditionOperator.MATCHES_REGEX:
        return _regex_search(expected, 0, target)
    if condition.operator in _TEXT_OPERATORS:
        return _compare_text(target, expected, condition.operator)
    return _compare_numbers(_parse_float(target), _parse_float(expected), condition.operator)


def _compare_text(target: str, expected: str, operator: ConditionOperator) -> bool:
    if operator is ConditionOperator.EQUALS:
        return target == expected
    if operator is ConditionOperator.CONTAINS:
        return expected in target
    if operator is ConditionOperator.STARTS_WITH:
        return target.startswith(expected)
    if operator is ConditionOperator.ENDS_WITH:
        return target.endswith(expected)
    # Ordered operators on text attributes are an authoring error.
    return False


def _compare_numbers(
    left: Optional[float], right: Optional[float], operator: ConditionOperator
) -> bool:
    comparator = _NUMERIC_COMPARATORS.get(operator)
    if comparator is None or left is None or right is None:
        return False
    return comparator(left, right)


def _regex_search(pattern: str, flags: int, target: str) -> bool:
    compiled = _compile(pattern, flags)
    if compiled is None:
        return False
    return compiled.search(target) is not None


@lru_cache(maxsize=256)
def _compile(pattern: str, flags: int) -> Optional[re.Pattern[str]]:
    try:
        return re.compile(pattern, flags)
    except re.error as exc:
        LOGGER.debug("Ignoring malformed pattern %r: %s", pattern, exc)
        return None


def _parse_float(raw: str) -> Optional[float]:
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    if math.isnan(value):
        return None
    return value


def _parse_moment(raw: str) -> Optional[float]:
    text = raw.strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return _as_utc(datetime.fromisoformat(text)).timestamp()
    except ValueError:
        return _parse_float(text)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _iso8601(value: datetime) -> str:
    return _as_utc(value).astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


__all__ = [
    "ComparisonMode",
    "applicable_operators",
    "is_operator_applicable",
    "validate_rule",
    "render_value",
    "evaluate",
]
