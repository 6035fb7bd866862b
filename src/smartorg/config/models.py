"""Configuration models describing smartorg settings."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class SmartOrgBaseModel(BaseModel):
    """Shared configuration for smartorg Pydantic settings models."""

    model_config = ConfigDict(extra="forbid")


class OrganizerOptions(SmartOrgBaseModel):
    """Settings that govern organize passes.

    Attributes:
        history_limit: Number of operation records retained by the ledger.
        include_hidden: Whether dot-files are offered to the rule matcher.
        max_workers: Number of directories processed concurrently in a full pass.
        comparison_mode: ``native`` compares sizes and dates as numbers and
            timestamps; ``legacy`` keeps the string-rendered comparisons.
        seed_default_rules: Whether an empty state is seeded with the default rules.
        default_destination_root: Folder that receives the default rule destinations.
    """

    history_limit: int = Field(default=100, ge=1)
    include_hidden: bool = False
    max_workers: int = Field(default=1, ge=1)
    comparison_mode: Literal["native", "legacy"] = "native"
    seed_default_rules: bool = True
    default_destination_root: str = "~/Documents/Organized"


class StateOptions(SmartOrgBaseModel):
    """Location of the persisted engine state.

    Attributes:
        path: JSON file holding rules, watched directories, history and statistics.
    """

    path: str = "~/.smartorg/state.json"


class WatchOptions(SmartOrgBaseModel):
    """Settings for the directory watch service.

    Attributes:
        debounce_seconds: Quiet period before a changed directory is organized.
        interval_seconds: Period of full passes while watching; zero disables them.
    """

    debounce_seconds: float = Field(default=2.0, gt=0)
    interval_seconds: float = Field(default=0.0, ge=0)


class LoggingSettings(SmartOrgBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        file: Optional log file path; enables the rotating file handler.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    file: Optional[str] = None
    max_size_mb: int = 10
    backup_count: int = 5


class CLIOptions(SmartOrgBaseModel):
    """CLI presentation defaults.

    Attributes:
        history_limit: Default number of history rows rendered.
    """

    history_limit: int = 10


class SmartOrgConfig(SmartOrgBaseModel):
    """Top-level configuration struct for smartorg."""

    organizer: OrganizerOptions = Field(default_factory=OrganizerOptions)
    state: StateOptions = Field(default_factory=StateOptions)
    watch: WatchOptions = Field(default_factory=WatchOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "SmartOrgBaseModel",
    "OrganizerOptions",
    "StateOptions",
    "WatchOptions",
    "LoggingSettings",
    "CLIOptions",
    "SmartOrgConfig",
]
