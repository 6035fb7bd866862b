"""File-type classification package."""

from .categories import EXTENSION_CATEGORIES, FileType, classify

__all__ = [
    "EXTENSION_CATEGORIES",
    "FileType",
    "classify",
]
