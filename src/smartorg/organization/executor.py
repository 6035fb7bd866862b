"""Executor for rule actions."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from send2trash import send2trash

from smartorg.ingestion.models import FileInfo
from smartorg.rules.models import ActionType, RuleAction

from .models import (
    ACTION_OPERATION_KINDS,
    ActionOutcome,
    FileOperation,
    OperationKind,
    UnsupportedAction,
)

LOGGER = logging.getLogger(__name__)


class ActionConfigurationError(ValueError):
    """Raised internally when an action lacks a required parameter."""


class ActionExecutor:
    """Perform one rule action against one file and describe the outcome.

    The executor never raises for configuration or filesystem problems; they
    come back as failed ``FileOperation`` records. It also never touches the
    ledger, the caller decides what to commit.
    """

    def execute(self, action: RuleAction, file: FileInfo) -> ActionOutcome:
        """Run ``action`` for ``file``.

        Args:
            action: Action taken from the matched rule.
            file: Snapshot of the file captured during the scan.

        Returns:
            ActionOutcome: A ``FileOperation`` for supported actions, success or
            failure, or an ``UnsupportedAction`` for placeholder action types.
        """
        action_type = action.action_type
        if not action_type.supported:
            return UnsupportedAction(
                action_type=action_type,
                file_name=file.name,
                source_path=str(file.path),
                reason=f"'{action_type.value}' is not implemented; no change was made.",
            )

        kind = ACTION_OPERATION_KINDS[action_type]
        try:
            missing = action.missing_parameters()
            if missing:
                raise ActionConfigurationError(
                    f"Missing required parameter(s) for {action_type.value}: {', '.join(missing)}"
                )
            for name, value in action.parameters.items():
                if "\x00" in value:
                    raise ActionConfigurationError(f"Parameter {name} contains a NUL byte.")
            destination = self._perform(action, file)
        except (OSError, ValueError) as exc:
            message = str(exc) or exc.__class__.__name__
            LOGGER.warning("%s failed for %s: %s", kind.value, file.path, message)
            return self._record(file, kind, success=False, error_message=message)

        return self._record(
            file,
            kind,
            success=True,
            destination=str(destination) if destination is not None else None,
        )

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #

    def _perform(self, action: RuleAction, file: FileInfo) -> Path | None:
        source = Path(file.path)
        action_type = action.action_type

        if action_type is ActionType.TRASH:
            self._require_source(source)
            send2trash(os.fspath(source))
            return None

        if action_type is ActionType.RENAME_FILE:
            new_name = action.parameters["newName"].strip()
            if new_name in ("", ".", "..") or Path(new_name).name != new_name:
                raise ActionConfigurationError(
                    f"newName must be a plain file name without directories: {new_name!r}"
                )
            destination = source.parent / new_name
            self._require_source(source)
            self._refuse_overwrite(destination)
            source.rename(destination)
            return destination

        folder = Path(action.parameters["destinationPath"].strip()).expanduser()
        destination = folder / file.name
        self._require_source(source)
        destination.parent.mkdir(parents=True, exist_ok=True)
        self._refuse_overwrite(destination)
        if action_type is ActionType.MOVE_TO_FOLDER:
            shutil.move(os.fspath(source), os.fspath(destination))
        else:
            shutil.copy2(source, destination)
        return destination

    def _require_source(self, source: Path) -> None:
        if not source.exists():
            raise FileNotFoundError(f"Source file no longer exists: {source}")

    def _refuse_overwrite(self, destination: Path) -> None:
        if destination.exists() or destination.is_symlink():
            raise FileExistsError(f"Destination already exists: {destination}")

    def _record(
        self,
        file: FileInfo,
        kind: OperationKind,
        *,
        success: bool,
        destination: str | None = None,
        error_message: str | None = None,
    ) -> FileOperation:
        return FileOperation(
            file_name=file.name,
            source_path=str(file.path),
            destination_path=destination,
            kind=kind,
            success=success,
            error_message=error_message,
        )


__all__ = ["ActionConfigurationError", "ActionExecutor"]
