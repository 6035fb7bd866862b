"""Extension based file-type categories.

``EXTENSION_CATEGORIES`` is the single table consulted by both the rule
matcher and anything that displays a file's category, so the two can never
disagree about what an extension means.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping


class FileType(str, Enum):
    """Coarse category derived from a file extension."""

    DOCUMENT = "document"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    ARCHIVE = "archive"
    EXECUTABLE = "executable"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        """Return the human readable label for the category."""
        return self.value.capitalize()


_GROUPS: dict[FileType, tuple[str, ...]] = {
    FileType.DOCUMENT: (
        "pdf", "doc", "docx", "txt", "rtf", "pages", "odt", "xls", "xlsx", "ppt", "pptx", "csv",
    ),
    FileType.IMAGE: ("jpg", "jpeg", "png", "gif", "bmp", "tiff", "svg", "webp", "heic", "raw"),
    FileType.VIDEO: ("mp4", "mov", "avi", "mkv", "wmv", "flv", "webm", "m4v"),
    FileType.AUDIO: ("mp3", "wav", "aac", "flac", "ogg", "m4a", "wma"),
    FileType.ARCHIVE: ("zip", "rar", "7z", "tar", "gz", "bz2", "xz"),
    FileType.EXECUTABLE: ("app", "dmg", "pkg", "deb", "exe", "msi"),
}


def _build_table() -> Mapping[str, FileType]:
    table: dict[str, FileType] = {}
    for file_type, extensions in _GROUPS.items():
        for extension in extensions:
            if extension in table:
                raise ValueError(
                    f"Extension {extension!r} listed for both {table[extension].value} "
                    f"and {file_type.value}"
                )
            table[extension] = file_type
    return MappingProxyType(table)


EXTENSION_CATEGORIES: Mapping[str, FileType] = _build_table()


def classify(extension: str | None) -> FileType:
    """Return the category for ``extension``; unknown or empty maps to ``OTHER``.

    A leading dot is ignored so both ``"pdf"`` and ``".PDF"`` resolve the same way.
    """
    if not extension:
        return FileType.OTHER
    return EXTENSION_CATEGORIES.get(extension.lower().lstrip("."), FileType.OTHER)


__all__ = ["FileType", "EXTENSION_CATEGORIES", "classify"]
