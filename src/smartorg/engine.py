"""Organizer engine: owns rules, watched directories and the operation ledger."""

from __future__ import annotations

import asyncio
import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Literal, Optional, Sequence
from uuid import UUID

from smartorg.config import SmartOrgConfig
from smartorg.ingestion import DirectoryScanner, FileInfo
from smartorg.organization import ActionExecutor, FileOperation, OperationKind, UnsupportedAction
from smartorg.rules import OrganizationRule, default_rules, select_rule
from smartorg.state import (
    MemoryStateStore,
    OperationLedger,
    OrganizationStatistics,
    OrganizerState,
    StateError,
    StateStore,
)

LOGGER = logging.getLogger(__name__)

Topic = Literal["rules", "watched", "operation", "statistics", "organizing"]


class Signal(str, Enum):
    """Named triggers delivered by notification collaborators."""

    ORGANIZE_NOW = "organizeNow"
    SHOW_SETTINGS = "showSettings"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """Notification sent to subscribers after the engine state changed.

    Attributes:
        topic: Which part of the state changed.
        state: Snapshot taken right after the change.
        organizing: Whether a pass was running when the event was emitted.
    """

    topic: Topic
    state: OrganizerState
    organizing: bool


@dataclass(slots=True)
class PassReport:
    """Outcome of one organize pass.

    Attributes:
        directories: Directories the pass visited, in completion order.
        operations: Records committed to the ledger during the pass.
        unsupported: Placeholder actions that were skipped.
        scan_errors: Directory path mapped to the error that prevented its scan.
        skipped: True when another pass was already running.
        stopped: True when a stop request prevented some directories from starting.
        started_at: Pass start time.
        finished_at: Pass end time.
    """

    directories: list[Path] = field(default_factory=list)
    operations: list[FileOperation] = field(default_factory=list)
    unsupported: list[UnsupportedAction] = field(default_factory=list)
    scan_errors: dict[str, str] = field(default_factory=dict)
    skipped: bool = False
    stopped: bool = False
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None

    @property
    def succeeded(self) -> int:
        return sum(1 for operation in self.operations if operation.success)

    @property
    def failed(self) -> int:
        return sum(1 for operation in self.operations if not operation.success)


@dataclass(slots=True)
class _DirectoryOutcome:
    directory: Path
    operations: list[FileOperation] = field(default_factory=list)
    unsupported: list[UnsupportedAction] = field(default_factory=list)
    error: Optional[str] = None
    stopped: bool = False


class Organizer:
    """Rule-driven organizer for a set of watched directories.

    At most one organize pass runs at a time; triggers that arrive while a
    pass is running are ignored rather than queued.
    """

    def __init__(
        self,
        config: SmartOrgConfig | None = None,
        store: StateStore | None = None,
        *,
        executor: ActionExecutor | None = None,
        scanner: DirectoryScanner | None = None,
    ) -> None:
        """Restore state from ``store`` or seed the defaults.

        Args:
            config: Engine configuration; defaults apply when omitted.
            store: Persistence collaborator; an in-memory store when omitted.
            executor: Action executor override.
            scanner: Directory scanner override.

        Raises:
            StateError: If the store holds state that cannot be read.
        """
        self._config = config or SmartOrgConfig()
        self._options = self._config.organizer
        self._store: StateStore = store if store is not None else MemoryStateStore()
        self._executor = executor or ActionExecutor()
        self._scanner = scanner or DirectoryScanner(include_hidden=self._options.include_hidden)

        self._state_lock = threading.RLock()
        self._persist_lock = threading.Lock()
        self._pass_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._subscribers: list[Callable[[ChangeEvent], None]] = []

        saved = self._store.load()
        seeded = saved is None
        if saved is None:
            saved = OrganizerState()
            if self._options.seed_default_rules:
                saved.rules = default_rules(self._options.default_destination_root)

        self._rules: list[OrganizationRule] = list(saved.rules)
        self._watched: list[Path] = []
        for directory in saved.watched_directories:
            normalized = _normalize_directory(directory)
            if normalized not in self._watched:
                self._watched.append(normalized)
        self._ledger = OperationLedger(
            limit=self._options.history_limit,
            history=saved.history,
            statistics=saved.statistics,
        )
        if seeded:
            self._persist()

    # ------------------------------------------------------------------ #
    # Observable state                                                   #
    # ------------------------------------------------------------------ #

    @property
    def config(self) -> SmartOrgConfig:
        return self._config

    @property
    def rules(self) -> list[OrganizationRule]:
        """Copies of the rules in insertion order."""
        with self._state_lock:
            return [rule.model_copy(deep=True) for rule in self._rules]

    @property
    def watched_directories(self) -> list[Path]:
        with self._state_lock:
            return list(self._watched)

    @property
    def recent_operations(self) -> tuple[FileOperation, ...]:
        """Ledger history, newest first."""
        return self._ledger.history

    @property
    def statistics(self) -> OrganizationStatistics:
        return self._ledger.statistics

    @property
    def is_organizing(self) -> bool:
        return self._pass_lock.locked()

    def snapshot(self) -> OrganizerState:
        """Return a detached copy of everything the engine owns."""
        with self._state_lock:
            return OrganizerState(
                rules=[rule.model_copy(deep=True) for rule in self._rules],
                watched_directories=list(self._watched),
                history=list(self._ledger.history),
                statistics=self._ledger.statistics,
            )

    def subscribe(self, callback: Callable[[ChangeEvent], None]) -> Callable[[], None]:
        """Register ``callback`` for change events and return an unsubscribe function."""
        with self._state_lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with self._state_lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return _unsubscribe

    # ------------------------------------------------------------------ #
    # Watch list and rule mutations                                      #
    # ------------------------------------------------------------------ #

    def add_watched_directory(self, path: str | os.PathLike[str]) -> bool:
        """Start watching ``path``; returns False when it was already watched."""
        directory = _normalize_directory(path)
        with self._state_lock:
            if directory in self._watched:
                return False
            self._watched.append(directory)
        self._changed("watched")
        return True

    def remove_watched_directory(self, path: str | os.PathLike[str]) -> bool:
        """Stop watching ``path``; returns False when it was not watched."""
        directory = _normalize_directory(path)
        with self._state_lock:
            if directory not in self._watched:
                return False
            self._watched.remove(directory)
        self._changed("watched")
        return True

    def add_rule(self, rule: OrganizationRule) -> OrganizationRule:
        """Append ``rule`` to the rule list.

        Raises:
            ValueError: If a rule with the same id already exists.
        """
        stored = rule.model_copy(deep=True)
        with self._state_lock:
            if any(existing.id == stored.id for existing in self._rules):
                raise ValueError(f"Rule {stored.id} already exists.")
            self._rules.append(stored)
        self._changed("rules")
        return stored.model_copy(deep=True)

    def update_rule(self, rule: OrganizationRule) -> bool:
        """Replace the rule with the same id, keeping its position in the list."""
        stored = rule.model_copy(deep=True)
        stored.touch()
        with self._state_lock:
            index = self._index_of(stored.id)
            if index is None:
                return False
            self._rules[index] = stored
        self._changed("rules")
        return True

    def remove_rule(self, rule: OrganizationRule | UUID | str) -> bool:
        rule_id = _rule_id(rule)
        with self._state_lock:
            index = self._index_of(rule_id)
            if index is None:
                return False
            del self._rules[index]
        self._changed("rules")
        return True

    def set_rule_enabled(self, rule: OrganizationRule | UUID | str, enabled: bool) -> bool:
        rule_id = _rule_id(rule)
        with self._state_lock:
            index = self._index_of(rule_id)
            if index is None:
                return False
            current = self._rules[index]
            if current.enabled == enabled:
                return True
            updated = current.model_copy(update={"enabled": enabled})
            updated.touch()
            self._rules[index] = updated
        self._changed("rules")
        return True

    def reset_statistics(self) -> OrganizationStatistics:
        statistics = self._ledger.reset_statistics()
        self._changed("statistics")
        return statistics

    def clear_history(self) -> None:
        self._ledger.clear_history()
        self._changed("operation")

    # ------------------------------------------------------------------ #
    # Organize passes                                                    #
    # ------------------------------------------------------------------ #

    def organize_all(self) -> PassReport:
        """Organize every watched directory once.

        Never raises: per-file failures become failed operation records and
        unreadable directories are reported in ``PassReport.scan_errors``.
        """
        return self._run_pass(None)

    def organize_directory(self, path: str | os.PathLike[str]) -> PassReport:
        """Organize a single directory, watched or not."""
        return self._run_pass([_normalize_directory(path)])

    async def organize_all_async(self) -> PassReport:
        """Run ``organize_all`` in a worker thread."""
        return await asyncio.to_thread(self.organize_all)

    def request_stop(self) -> None:
        """Ask the running pass not to start any further directories."""
        self._stop_event.set()

    def handle_signal(self, signal: Signal | str) -> Optional[PassReport]:
        """Dispatch a named notification signal."""
        resolved = Signal(signal)
        if resolved is Signal.ORGANIZE_NOW:
            return self.organize_all()
        LOGGER.debug("Signal %s has no engine effect.", resolved.value)
        return None

    def _run_pass(self, directories: Optional[Sequence[Path]]) -> PassReport:
        if not self._pass_lock.acquire(blocking=False):
            LOGGER.info("Organize pass already in progress; ignoring trigger.")
            report = PassReport(skipped=True)
            report.finished_at = report.started_at
            return report

        report = PassReport()
        try:
            self._stop_event.clear()
            self._emit("organizing")
            targets = self.watched_directories if directories is None else list(directories)
            for outcome in self._process(targets):
                if outcome.stopped:
                    report.stopped = True
                    continue
                report.directories.append(outcome.directory)
                report.operations.extend(outcome.operations)
                report.unsupported.extend(outcome.unsupported)
                if outcome.error is not None:
                    report.scan_errors[str(outcome.directory)] = outcome.error
        finally:
            report.finished_at = datetime.now(timezone.utc)
            self._pass_lock.release()
            self._emit("organizing")
        return report

    def _process(self, targets: list[Path]) -> Iterable[_DirectoryOutcome]:
        workers = min(self._options.max_workers, len(targets))
        if workers <= 1:
            return [self._organize_guarded(directory) for directory in targets]
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="smartorg") as pool:
            return list(pool.map(self._organize_guarded, targets))

    def _organize_guarded(self, directory: Path) -> _DirectoryOutcome:
        if self._stop_event.is_set():
            return _DirectoryOutcome(directory=directory, stopped=True)
        try:
            return self._organize_directory(directory)
        except Exception as exc:  # pragma: no cover - keeps one directory from ending the pass
            LOGGER.exception("Unexpected failure while organizing %s", directory)
            return _DirectoryOutcome(directory=directory, error=f"{exc.__class__.__name__}: {exc}")

    def _organize_directory(self, directory: Path) -> _DirectoryOutcome:
        outcome = _DirectoryOutcome(directory=directory)
        try:
            files = self._scanner.scan(directory)
        except OSError as exc:
            LOGGER.warning("Skipping %s: %s", directory, exc)
            outcome.error = str(exc) or exc.__class__.__name__
            return outcome

        rules = self.rules
        mode = self._options.comparison_mode
        for file in files:
            rule = select_rule(file, rules, mode=mode)
            if rule is None:
                continue
            LOGGER.debug("Rule %r selected for %s", rule.name, file.path)
            current = file
            for action in rule.actions:
                result = self._executor.execute(action, current)
                if isinstance(result, UnsupportedAction):
                    LOGGER.info(
                        "Skipping %s for %s: %s",
                        result.action_type.value,
                        file.name,
                        result.reason,
                    )
                    outcome.unsupported.append(result)
                    continue
                self._commit(result)
                outcome.operations.append(result)
                current = _follow(current, result)
        return outcome

    def _commit(self, operation: FileOperation) -> None:
        self._ledger.record(operation)
        self._changed("operation")

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #

    def _index_of(self, rule_id: UUID) -> Optional[int]:
        for index, rule in enumerate(self._rules):
            if rule.id == rule_id:
                return index
        return None

    def _changed(self, topic: Topic) -> None:
        state = self._persist()
        self._emit(topic, state)

    def _persist(self) -> OrganizerState:
        with self._persist_lock:
            state = self.snapshot()
            try:
                self._store.save(state)
            except (StateError, OSError) as exc:
                LOGGER.error("Could not save organizer state: %s", exc)
        return state

    def _emit(self, topic: Topic, state: OrganizerState | None = None) -> None:
        with self._state_lock:
            subscribers = list(self._subscribers)
        if not subscribers:
            return
        event = ChangeEvent(
            topic=topic,
            state=state if state is not None else self.snapshot(),
            organizing=self.is_organizing,
        )
        for callback in subscribers:
            try:
                callback(event)
            except Exception:  # pragma: no cover - subscriber bugs must not break a pass
                LOGGER.exception("Change subscriber %r failed", callback)


def _follow(file: FileInfo, operation: FileOperation) -> FileInfo:
    """Return the snapshot later actions of the same rule should act on."""
    if not operation.success or operation.destination_path is None:
        return file
    if operation.kind not in (OperationKind.MOVE, OperationKind.RENAME):
        return file
    destination = Path(operation.destination_path)
    return file.model_copy(update={"path": destination, "name": destination.name})


def _normalize_directory(path: str | os.PathLike[str]) -> Path:
    return Path(os.path.normpath(Path(path).expanduser().absolute()))


def _rule_id(rule: OrganizationRule | UUID | str) -> UUID:
    if isinstance(rule, OrganizationRule):
        return rule.id
    if isinstance(rule, UUID):
        return rule
    return UUID(str(rule))


__all__ = ["ChangeEvent", "Organizer", "PassReport", "Signal"]
