"""Directory watching built on watchdog."""

from .service import WatchService

__all__ = ["WatchService"]
