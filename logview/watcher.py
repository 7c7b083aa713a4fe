"""Live follow mode: re-run the tail differ when the log file changes.

The differ is stateless; this module owns the cursor and the schedule.
A watchdog observer wakes the loop on file-system events, and the poll
interval acts as a fallback for file systems that don't report them.
"""

import logging
import os
import threading

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from logview.filters import LogQuery, build_filter_chain
from logview.models import LogEntry
from logview.parser import parse_line
from logview.reader import index_lines, load_lines
from logview.tail import tail_diff

logger = logging.getLogger(__name__)


class FileChangeHandler(FileSystemEventHandler):
    """Sets an event whenever the watched file is created, modified or moved into place."""

    def __init__(self, path: str, changed: threading.Event):
        super().__init__()
        self._path = os.path.abspath(path)
        self._changed = changed

    def _matches(self, event) -> bool:
        if event.is_directory:
            return False
        paths = [event.src_path, getattr(event, "dest_path", "")]
        return any(p and os.path.abspath(p) == self._path for p in paths)

    def on_created(self, event):
        if self._matches(event):
            self._changed.set()

    def on_modified(self, event):
        if self._matches(event):
            self._changed.set()

    def on_moved(self, event):
        if self._matches(event):
            self._changed.set()


class LogFollower:
    def __init__(self, path: str, template="default", poll_interval: float = 2.0,
                 callback=None, query: LogQuery | None = None):
        self._path = path
        self._template = template
        self._poll_interval = poll_interval
        self._callback = callback
        self._query = query
        self._changed = threading.Event()
        self.cursor = 0

    def prime(self, lines: int) -> list[LogEntry]:
        """Return the matching entries among the last N lines and set the cursor.

        Both come from the same read, so a line appended meanwhile is left
        for the next poll instead of being delivered twice.
        """
        content = load_lines(self._path)
        indexed = index_lines(content) if content is not None else []
        self.cursor = len(indexed)
        if lines <= 0:
            return []
        matches = build_filter_chain(self._query)
        entries = (parse_line(self._template, line, number) for number, line in indexed[-lines:])
        return [entry for entry in entries if matches(entry)]

    def poll(self) -> list[LogEntry]:
        """Fetch entries appended since the cursor and advance it."""
        result = tail_diff(self._path, self._template, self.cursor, True, self._query)
        if result.total_lines < self.cursor:
            logger.info("%s shrank (%d -> %d lines), reading from the top",
                        self._path, self.cursor, result.total_lines)
            self.cursor = 0
            result = tail_diff(self._path, self._template, 0, True, self._query)
        self.cursor = result.total_lines
        return result.entries or []

    def run(self, shutdown: threading.Event):
        """Deliver new entries to the callback until shutdown is set."""
        observer = None
        directory = os.path.dirname(os.path.abspath(self._path))
        if os.path.isdir(directory):
            observer = Observer()
            observer.schedule(FileChangeHandler(self._path, self._changed), directory, recursive=False)
            observer.start()
            logger.debug("Watching directory: %s", directory)
        else:
            logger.warning("Directory %s does not exist, polling only", directory)

        try:
            while not shutdown.is_set():
                self._changed.wait(self._poll_interval)
                self._changed.clear()
                if shutdown.is_set():
                    break
                for entry in self.poll():
                    if self._callback:
                        self._callback(entry)
        finally:
            if observer is not None:
                observer.stop()
                observer.join(timeout=5)
