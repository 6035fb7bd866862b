"""Directory scanning and file snapshots."""

from .discovery import DirectoryScanner
from .models import FileInfo

__all__ = ["DirectoryScanner", "FileInfo"]
