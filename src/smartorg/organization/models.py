"""Operation records produced by the action executor."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from smartorg.rules.models import ActionType


class OperationKind(str, Enum):
    """Filesystem effect recorded in the ledger."""

    MOVE = "move"
    COPY = "copy"
    RENAME = "rename"
    DELETE = "delete"


ACTION_OPERATION_KINDS: dict[ActionType, OperationKind] = {
    ActionType.MOVE_TO_FOLDER: OperationKind.MOVE,
    ActionType.COPY_TO_FOLDER: OperationKind.COPY,
    ActionType.RENAME_FILE: OperationKind.RENAME,
    ActionType.TRASH: OperationKind.DELETE,
}


class FileOperation(BaseModel):
    """Ledger entry describing one attempted filesystem operation.

    Attributes:
        id: Identity of the record.
        file_name: Name of the file when the operation was attempted.
        source_path: Path of the file before the operation.
        destination_path: Resulting path for successful moves, copies and renames.
        kind: Operation attempted.
        timestamp: When the attempt finished.
        success: Whether the filesystem change happened.
        error_message: Reason for a failure.
    """

    model_config = ConfigDict(frozen=True)

    outcome: Literal["operation"] = "operation"
    id: UUID = Field(default_factory=uuid4)
    file_name: str
    source_path: str
    destination_path: Optional[str] = None
    kind: OperationKind
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    success: bool
    error_message: Optional[str] = None

    @property
    def description(self) -> str:
        """Short sentence summarizing the record."""
        if not self.success:
            verb = {
                OperationKind.MOVE: "move",
                OperationKind.COPY: "copy",
                OperationKind.RENAME: "rename",
                OperationKind.DELETE: "delete",
            }[self.kind]
            return f"Failed to {verb}: {self.error_message or 'Unknown error'}"
        if self.kind is OperationKind.DELETE:
            return "Moved to trash"
        verb = {
            OperationKind.MOVE: "Moved",
            OperationKind.COPY: "Copied",
            OperationKind.RENAME: "Renamed",
        }[self.kind]
        return f"{verb} to {self.destination_path or 'unknown'}"


class UnsupportedAction(BaseModel):
    """Outcome for an action the executor deliberately does not perform.

    These never reach the ledger: nothing happened on disk, so there is
    neither a success nor a failure to count.
    """

    model_config = ConfigDict(frozen=True)

    outcome: Literal["unsupported"] = "unsupported"
    action_type: ActionType
    file_name: str
    source_path: str
    reason: str


ActionOutcome = Union[FileOperation, UnsupportedAction]


__all__ = [
    "ACTION_OPERATION_KINDS",
    "ActionOutcome",
    "FileOperation",
    "OperationKind",
    "UnsupportedAction",
]
