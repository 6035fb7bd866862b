"""Snapshots of filesystem entries offered to the rule matcher."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from smartorg.classification import FileType, classify


class FileInfo(BaseModel):
    """Immutable description of one file captured at scan time.

    Attributes:
        name: Final path component, extension included.
        path: Absolute path of the file when it was scanned.
        size: Size in bytes.
        created_at: Creation (birth) time, falling back to the inode change time.
        modified_at: Last content modification time.
        file_type: Category derived from the extension.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    path: Path
    size: int = 0
    created_at: datetime
    modified_at: datetime
    file_type: FileType = FileType.OTHER

    @property
    def extension(self) -> str:
        """Lower-cased extension without the leading dot."""
        return Path(self.name).suffix.lower().lstrip(".")

    @classmethod
    def from_path(cls, path: Path, stat: os.stat_result | None = None) -> "FileInfo":
        """Build a snapshot for ``path``.

        Metadata that cannot be read defaults to a zero size and the current
        time instead of failing the scan.
        """
        if stat is None:
            try:
                stat = path.stat()
            except OSError:
                stat = None

        now = datetime.now(timezone.utc)
        if stat is None:
            size, created, modified = 0, now, now
        else:
            size = stat.st_size
            birth = getattr(stat, "st_birthtime", None)
            created = _from_timestamp(birth if birth is not None else stat.st_ctime, now)
            modified = _from_timestamp(stat.st_mtime, now)

        return cls(
            name=path.name,
            path=path.absolute(),
            size=size,
            created_at=created,
            modified_at=modified,
            file_type=classify(path.suffix),
        )


def _from_timestamp(value: float | None, fallback: datetime) -> datetime:
    if value is None:
        return fallback
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return fallback


__all__ = ["FileInfo"]
