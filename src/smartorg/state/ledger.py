"""Bounded operation history with running counters."""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Iterable

from smartorg.organization.models import FileOperation

from .models import OrganizationStatistics

DEFAULT_HISTORY_LIMIT = 100


class OperationLedger:
    """Most-recent-first record of operations plus success/error counters.

    All writers go through one lock so that prepending, truncating and
    updating the counters happen as a single step.
    """

    def __init__(
        self,
        *,
        limit: int = DEFAULT_HISTORY_LIMIT,
        history: Iterable[FileOperation] = (),
        statistics: OrganizationStatistics | None = None,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self._limit = limit
        self._lock = threading.Lock()
        self._history: list[FileOperation] = list(history)[:limit]
        self._statistics = (statistics or OrganizationStatistics()).model_copy()

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def history(self) -> tuple[FileOperation, ...]:
        """Recorded operations, newest first."""
        with self._lock:
            return tuple(self._history)

    @property
    def statistics(self) -> OrganizationStatistics:
        """Copy of the current counters."""
        with self._lock:
            return self._statistics.model_copy()

    def record(self, operation: FileOperation) -> OrganizationStatistics:
        """Commit ``operation`` and return the updated counters.

        The oldest entries are discarded once the history exceeds the limit.
        """
        with self._lock:
            self._history.insert(0, operation)
            del self._history[self._limit :]
            if operation.success:
                self._statistics.files_organized += 1
            else:
                self._statistics.errors += 1
            self._statistics.last_organization_date = datetime.now(timezone.utc)
            return self._statistics.model_copy()

    def reset_statistics(self) -> OrganizationStatistics:
        """Zero the counters; the history is kept."""
        with self._lock:
            self._statistics = OrganizationStatistics()
            return self._statistics.model_copy()

    def clear_history(self) -> None:
        with self._lock:
            self._history.clear()


__all__ = ["DEFAULT_HISTORY_LIMIT", "OperationLedger"]
