"""State repository tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from smartorg.organization import FileOperation, OperationKind
from smartorg.rules import default_rules
from smartorg.state import (
    MemoryStateStore,
    OrganizationStatistics,
    OrganizerState,
    StateError,
    StateRepository,
)


def _state(tmp_path: Path) -> OrganizerState:
    """Return a sample organizer state.

    Args:
        tmp_path: Temporary directory provided by pytest.

    Returns:
        OrganizerState: State with seeded rules, one watched directory and one record.
    """
    operation = FileOperation(
        file_name="a.jpg",
        source_path=str(tmp_path / "inbox" / "a.jpg"),
        destination_path=str(tmp_path / "Images" / "a.jpg"),
        kind=OperationKind.MOVE,
        success=True,
    )
    return OrganizerState(
        rules=default_rules(str(tmp_path)),
        watched_directories=[tmp_path / "inbox"],
        history=[operation],
        statistics=OrganizationStatistics(files_organized=1),
    )


def test_missing_file_loads_as_none(tmp_path: Path) -> None:
    repo = StateRepository(tmp_path / "state.json")

    assert repo.load() is None


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    """Ensure a saved state loads back with the same content.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    repo = StateRepository(tmp_path / "nested" / "state.json")
    state = _state(tmp_path)

    repo.save(state)
    loaded = repo.load()

    assert loaded is not None
    assert [rule.id for rule in loaded.rules] == [rule.id for rule in state.rules]
    assert loaded.watched_directories == [tmp_path / "inbox"]
    assert loaded.history[0].destination_path == state.history[0].destination_path
    assert loaded.statistics.files_organized == 1
    assert not list(repo.path.parent.glob(".state-*"))


def test_invalid_json_raises_state_error(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(StateError):
        StateRepository(path).load()


def test_invalid_shape_raises_state_error(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text('{"rules": "nope"}', encoding="utf-8")

    with pytest.raises(StateError):
        StateRepository(path).load()


def test_default_path_expands_home(home: Path) -> None:
    assert StateRepository().path == home / ".smartorg" / "state.json"


def test_memory_store_returns_copies(tmp_path: Path) -> None:
    store = MemoryStateStore()
    assert store.load() is None

    state = _state(tmp_path)
    store.save(state)
    state.watched_directories.clear()

    loaded = store.load()
    assert loaded is not None
    assert loaded.watched_directories == [tmp_path / "inbox"]
    assert store.saves == 1
