"""Persisted engine state and aggregate statistics."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from smartorg.organization.models import FileOperation
from smartorg.rules.models import OrganizationRule


class OrganizationStatistics(BaseModel):
    """Running counters maintained by the operation ledger.

    Attributes:
        files_organized: Successful operations recorded.
        errors: Failed operations recorded.
        last_organization_date: Time of the most recent recorded operation.
    """

    files_organized: int = 0
    errors: int = 0
    last_organization_date: Optional[datetime] = None


class OrganizerState(BaseModel):
    """Everything the engine owns, in a form a store can serialize."""

    rules: List[OrganizationRule] = Field(default_factory=list)
    watched_directories: List[Path] = Field(default_factory=list)
    history: List[FileOperation] = Field(default_factory=list)
    statistics: OrganizationStatistics = Field(default_factory=OrganizationStatistics)


__all__ = ["OrganizationStatistics", "OrganizerState"]
