"""Seed rules installed when no saved state exists."""

from __future__ import annotations

from pathlib import PurePosixPath

from smartorg.classification import FileType

from .models import (
    ActionType,
    ConditionOperator,
    ConditionType,
    OrganizationRule,
    RuleAction,
    RuleCondition,
)

_SEEDED_CATEGORIES = (
    (FileType.DOCUMENT, "Documents"),
    (FileType.IMAGE, "Images"),
    (FileType.VIDEO, "Videos"),
)


def default_rules(destination_root: str = "~/Documents/Organized") -> list[OrganizationRule]:
    """Return the Documents, Images and Videos routing rules."""
    rules: list[OrganizationRule] = []
    for file_type, folder in _SEEDED_CATEGORIES:
        destination = str(PurePosixPath(destination_root) / folder)
        rules.append(
            OrganizationRule(
                name=folder,
                conditions=[
                    RuleCondition(
                        condition_type=ConditionType.FILE_TYPE,
                        operator=ConditionOperator.EQUALS,
                        value=file_type.value,
                    )
                ],
                actions=[
                    RuleAction(
                        action_type=ActionType.MOVE_TO_FOLDER,
                        parameters={"destinationPath": destination},
                    )
                ],
            )
        )
    return rules


__all__ = ["default_rules"]
