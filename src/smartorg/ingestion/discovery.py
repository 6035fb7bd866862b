"""File discovery utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

from .models import FileInfo


class DirectoryScanner:
    """List the direct file children of a directory as ``FileInfo`` snapshots."""

    def __init__(self, *, include_hidden: bool = False) -> None:
        self.include_hidden = include_hidden

    def scan(self, directory: Path) -> list[FileInfo]:
        """Return snapshots for the files directly inside ``directory``.

        Subdirectories are skipped and never descended into.

        Args:
            directory: Directory to enumerate.

        Returns:
            list[FileInfo]: One snapshot per file, in directory listing order.

        Raises:
            OSError: If the directory itself cannot be listed.
        """
        root = directory.expanduser()
        return list(self._iter_files(root))

    def _iter_files(self, root: Path) -> Iterator[FileInfo]:
        # Materialize the listing first so a vanished or unreadable directory
        # fails before any snapshot is produced.
        entries = sorted(root.iterdir())
        for entry in entries:
            if not self.include_hidden and entry.name.startswith("."):
                continue
            try:
                if entry.is_dir():
                    continue
                stat = entry.stat()
            except OSError:
                stat = None
            yield FileInfo.from_path(entry, stat)


__all__ = ["DirectoryScanner"]
