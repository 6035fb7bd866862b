"""State persistence for the organizer engine."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from pydantic import ValidationError

from .errors import StateError
from .ledger import DEFAULT_HISTORY_LIMIT, OperationLedger
from .models import OrganizationStatistics, OrganizerState

DEFAULT_STATE_PATH = Path("~/.smartorg/state.json")


class StateStore(Protocol):
    """Collaborator that restores and persists the engine state."""

    def load(self) -> Optional[OrganizerState]:
        """Return previously saved state, or ``None`` when nothing was saved."""

    def save(self, state: OrganizerState) -> None:
        """Persist ``state``."""


class StateRepository:
    """Store engine state as a JSON document on disk."""

    def __init__(self, path: Path | None = None) -> None:
        """Initialize the repository.

        Args:
            path: JSON file to use; defaults to ``~/.smartorg/state.json``.
        """
        self._path = (path or DEFAULT_STATE_PATH).expanduser()

    @property
    def path(self) -> Path:
        """Return the resolved state file path."""
        return self._path

    def load(self) -> Optional[OrganizerState]:
        """Load the saved state.

        Returns:
            Optional[OrganizerState]: Saved state, or ``None`` if the file is absent.

        Raises:
            StateError: If the file cannot be read or does not describe a valid state.
        """
        if not self._path.exists():
            return None

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StateError(f"Invalid organizer state data: {exc}") from exc

        try:
            return OrganizerState.model_validate(data)
        except ValidationError as exc:
            raise StateError(f"Invalid organizer state data: {exc}") from exc

    def save(self, state: OrganizerState) -> None:
        """Write ``state`` atomically by replacing the file.

        Args:
            state: State to serialize.

        Raises:
            StateError: If the file cannot be written.
        """
        payload = json.dumps(state.model_dump(mode="json"), indent=2, sort_keys=False)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(
                prefix=".state-", suffix=".json", dir=self._path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(temp_name, self._path)
        except OSError as exc:
            raise StateError(f"Could not write organizer state to {self._path}: {exc}") from exc


class MemoryStateStore:
    """Keep state in memory; used when embedding the engine and in tests."""

    def __init__(self, state: OrganizerState | None = None) -> None:
        self._state = state.model_copy(deep=True) if state is not None else None
        self.saves = 0

    def load(self) -> Optional[OrganizerState]:
        return self._state.model_copy(deep=True) if self._state is not None else None

    def save(self, state: OrganizerState) -> None:
        self._state = state.model_copy(deep=True)
        self.saves += 1


__all__ = [
    "DEFAULT_HISTORY_LIMIT",
    "DEFAULT_STATE_PATH",
    "MemoryStateStore",
    "OperationLedger",
    "OrganizationStatistics",
    "OrganizerState",
    "StateError",
    "StateRepository",
    "StateStore",
]
