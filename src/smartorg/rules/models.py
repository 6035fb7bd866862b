"""Rule, condition and action data models."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Older camel-case spellings still found in saved rule files.
_ALIASES: dict[str, dict[str, str]] = {
    "ConditionType": {
        "fileName": "name",
        "fileExtension": "extension",
        "fileSize": "size",
        "filePath": "path",
    },
    "ConditionOperator": {
        "matches": "matchesRegex",
        "greaterThanOrEqual": "greaterOrEqual",
        "lessThanOrEqual": "lessOrEqual",
    },
    "ActionType": {"addToTrash": "trash"},
}


class _LegacyAliasEnum(str, Enum):
    """String enum that also accepts the older camel-case spellings."""

    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str):
            target = _ALIASES.get(cls.__name__, {}).get(value)
            if target is not None:
                return cls(target)
        return None


class ConditionType(_LegacyAliasEnum):
    """File attribute inspected by a condition."""

    NAME = "name"
    EXTENSION = "extension"
    SIZE = "size"
    CREATION_DATE = "creationDate"
    MODIFICATION_DATE = "modificationDate"
    PATH = "path"
    FILE_TYPE = "fileType"

    @property
    def is_textual(self) -> bool:
        return self in (ConditionType.NAME, ConditionType.EXTENSION, ConditionType.PATH)

    @property
    def is_temporal(self) -> bool:
        return self in (ConditionType.CREATION_DATE, ConditionType.MODIFICATION_DATE)


class ConditionOperator(_LegacyAliasEnum):
    """Comparison applied between a file attribute and a condition value."""

    EQUALS = "equals"
    CONTAINS = "contains"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    MATCHES_REGEX = "matchesRegex"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    GREATER_OR_EQUAL = "greaterOrEqual"
    LESS_OR_EQUAL = "lessOrEqual"


class ActionType(_LegacyAliasEnum):
    """Operation performed on a file matched by a rule."""

    MOVE_TO_FOLDER = "moveToFolder"
    COPY_TO_FOLDER = "copyToFolder"
    RENAME_FILE = "renameFile"
    TRASH = "trash"
    CREATE_FOLDER = "createFolder"
    ADD_TAG = "addTag"

    @property
    def required_parameters(self) -> tuple[str, ...]:
        return _REQUIRED_PARAMETERS[self]

    @property
    def supported(self) -> bool:
        """Whether the executor performs this action at all."""
        return self not in (ActionType.CREATE_FOLDER, ActionType.ADD_TAG)


_REQUIRED_PARAMETERS: dict[ActionType, tuple[str, ...]] = {
    ActionType.MOVE_TO_FOLDER: ("destinationPath",),
    ActionType.COPY_TO_FOLDER: ("destinationPath",),
    ActionType.RENAME_FILE: ("newName",),
    ActionType.TRASH: (),
    ActionType.CREATE_FOLDER: ("folderName", "parentPath"),
    ActionType.ADD_TAG: ("tagName",),
}


class RuleCondition(BaseModel):
    """Single predicate over one file attribute.

    Attributes:
        condition_type: Attribute inspected.
        operator: Comparison to apply.
        value: Literal compared against the attribute; parsed as a number or
            timestamp for size and date comparisons.
        case_sensitive: Disable case folding of both sides.
    """

    condition_type: ConditionType
    operator: ConditionOperator
    value: str
    case_sensitive: bool = False


class RuleAction(BaseModel):
    """Action performed when a rule matches.

    Attributes:
        action_type: Kind of action.
        parameters: Named string parameters, see ``ActionType.required_parameters``.
    """

    action_type: ActionType
    parameters: Dict[str, str] = Field(default_factory=dict)

    def missing_parameters(self) -> list[str]:
        """Return required parameter names that are absent or blank."""
        return [
            name
            for name in self.action_type.required_parameters
            if not self.parameters.get(name, "").strip()
        ]


class OrganizationRule(BaseModel):
    """Named, prioritized bundle of AND-combined conditions and ordered actions.

    An empty ``conditions`` list matches every file.

    Attributes:
        id: Identity used to update or remove the rule.
        name: Display name.
        enabled: Disabled rules are never selected.
        priority: Higher values are tried first.
        conditions: Predicates that must all hold.
        actions: Actions executed in order when the rule is selected.
        created_at: Creation time.
        last_modified: Time of the last mutation.
    """

    id: UUID = Field(default_factory=uuid4)
    name: str
    enabled: bool = True
    priority: int = 0
    conditions: List[RuleCondition] = Field(default_factory=list)
    actions: List[RuleAction] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    last_modified: datetime = Field(default_factory=_utcnow)

    def touch(self) -> None:
        """Mark the rule as modified now."""
        self.last_modified = _utcnow()


__all__ = [
    "ConditionType",
    "ConditionOperator",
    "ActionType",
    "RuleCondition",
    "RuleAction",
    "OrganizationRule",
]
