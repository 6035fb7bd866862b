"""Shared fixtures for smartorg tests."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import pytest

from smartorg.classification import classify
from smartorg.ingestion import FileInfo


@pytest.fixture
def make_info() -> Callable[..., FileInfo]:
    """Return a factory for in-memory file snapshots.

    Returns:
        Callable[..., FileInfo]: Factory accepting a name and optional overrides.
    """

    def _make(
        name: str,
        *,
        directory: str = "/data/inbox",
        size: int = 0,
        created_at: datetime | None = None,
        modified_at: datetime | None = None,
    ) -> FileInfo:
        stamp = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
        return FileInfo(
            name=name,
            path=Path(directory) / name,
            size=size,
            created_at=created_at or stamp,
            modified_at=modified_at or stamp,
            file_type=classify(Path(name).suffix),
        )

    return _make


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME at a temporary directory so ``~`` expands inside tmp_path."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir
