"""Filesystem watch service that triggers organize passes."""

from __future__ import annotations

import logging
import queue
import threading
import time
from pathlib import Path
from typing import Any, Callable, Optional

try:  # pragma: no cover - optional dependency wiring
    from watchdog.events import FileSystemEvent, FileSystemEventHandler
    from watchdog.observers import Observer
except ImportError:  # pragma: no cover - fallback when watchdog missing
    Observer = None
    FileSystemEvent = Any  # type: ignore[assignment]
    FileSystemEventHandler = object  # type: ignore[assignment]

from smartorg.engine import Organizer, PassReport

LOGGER = logging.getLogger(__name__)


class WatchService:
    """Turn filesystem notifications and timer ticks into organize passes."""

    def __init__(
        self,
        organizer: Organizer,
        *,
        debounce_seconds: Optional[float] = None,
        interval_seconds: Optional[float] = None,
    ) -> None:
        """Initialize the watch service.

        Args:
            organizer: Engine whose watched directories are monitored.
            debounce_seconds: Quiet period before a changed directory is organized;
                defaults to the ``watch.debounce_seconds`` setting.
            interval_seconds: Period between full passes; zero disables them.
                Defaults to the ``watch.interval_seconds`` setting.
        """
        settings = organizer.config.watch
        self._organizer = organizer
        self._debounce = max(
            0.1, debounce_seconds if debounce_seconds is not None else settings.debounce_seconds
        )
        interval = interval_seconds if interval_seconds is not None else settings.interval_seconds
        self._interval = interval if interval > 0 else None
        self._queue: queue.Queue[Path | None] = queue.Queue()
        self._stop_event = threading.Event()
        self._observer: object | None = None

    def process_once(self) -> PassReport:
        """Organize every watched directory once."""
        return self._organizer.organize_all()

    def watch(self, callback: Callable[[PassReport], None]) -> None:
        """Monitor the watched directories until ``stop`` is called.

        Args:
            callback: Invoked with the report of every pass that ran.

        Raises:
            RuntimeError: If watchdog is unavailable or the service already runs.
        """
        if Observer is None:
            raise RuntimeError(
                "watchdog is required for continuous watch mode. "
                "Install it via `pip install watchdog`."
            )
        if self._observer is not None:
            raise RuntimeError("WatchService is already running.")

        self._stop_event.clear()
        self._drain()
        observer = Observer()
        for directory in self._organizer.watched_directories:
            if not directory.is_dir():
                LOGGER.warning("Not watching %s: directory does not exist.", directory)
                continue
            handler = _WatchEventHandler(directory, self._queue)
            observer.schedule(handler, str(directory), recursive=False)
        self._observer = observer
        observer.start()
        try:
            self._run_loop(callback)
        finally:
            self.stop()

    def stop(self) -> None:
        """Stop watching and ask any running pass to wind down."""
        self._stop_event.set()
        self._organizer.request_stop()
        observer = self._observer
        if observer is not None:
            observer.stop()
            observer.join(timeout=5)
            self._observer = None
        self._queue.put(None)

    def notify(self, directory: Path) -> None:
        """Mark ``directory`` as changed, as a filesystem event would."""
        self._queue.put(directory)

    def _run_loop(self, callback: Callable[[PassReport], None]) -> None:
        dirty: set[Path] = set()
        flush_deadline: Optional[float] = None
        next_full_pass = time.monotonic() + self._interval if self._interval else None

        while not self._stop_event.is_set():
            deadlines = [value for value in (flush_deadline, next_full_pass) if value is not None]
            timeout = max(0.0, min(deadlines) - time.monotonic()) if deadlines else None

            try:
                directory = self._queue.get(timeout=timeout)
            except queue.Empty:
                directory = None
            else:
                if directory is None:
                    break
                dirty.add(directory)
                flush_deadline = time.monotonic() + self._debounce
                continue

            now = time.monotonic()
            if next_full_pass is not None and now >= next_full_pass:
                dirty.clear()
                flush_deadline = None
                next_full_pass = now + (self._interval or 0)
                self._dispatch(self._organizer.organize_all(), callback)
                continue

            if flush_deadline is not None and now >= flush_deadline:
                pending = sorted(dirty)
                dirty.clear()
                flush_deadline = None
                for target in pending:
                    if self._stop_event.is_set():
                        break
                    report = self._organizer.organize_directory(target)
                    if report.skipped:
                        # A pass was already running; retry after another quiet period.
                        dirty.add(target)
                        flush_deadline = time.monotonic() + self._debounce
                        continue
                    self._dispatch(report, callback)

    def _drain(self) -> None:
        # Discard wake-ups left behind by a previous stop().
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return

    def _dispatch(self, report: PassReport, callback: Callable[[PassReport], None]) -> None:
        if report.skipped:
            return
        callback(report)


class _WatchEventHandler(FileSystemEventHandler):
    """Forward file events for one directory into the service queue."""

    def __init__(self, directory: Path, queue_handle: queue.Queue[Path | None]) -> None:
        self._directory = directory
        self._queue = queue_handle

    def on_created(self, event: FileSystemEvent) -> None:
        self._enqueue(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._enqueue(event)

    def on_moved(self, event: FileSystemEvent) -> None:  # pragma: no cover - watchdog-specific
        destination = getattr(event, "dest_path", "")
        if destination and Path(destination).parent == self._directory:
            self._queue.put(self._directory)

    def _enqueue(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._queue.put(self._directory)


__all__ = ["WatchService"]
