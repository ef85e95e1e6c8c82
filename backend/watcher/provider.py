"""
Tripwire Notification Provider.

Cross-platform file system notifications using watchdog.
Each directory gets its own non-recursive watch so that the set of
watched directories is explicit and can grow as directories appear.
Requires Python 3.11+.
"""

import os
import queue
import threading
from collections.abc import Iterator
from typing import Protocol

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import ObservedWatch

from utils.logger import LoggerMixin
from watcher.models import RawNotification


class NotificationProvider(Protocol):
    """What a watch target needs from a filesystem notification source."""

    def start(self) -> None:
        """Begin delivering notifications."""
        ...

    def add_watch(self, path: str) -> None:
        """Watch one directory (not its subdirectories)."""
        ...

    def add_tree(self, path: str) -> None:
        """Watch a directory and every directory below it."""
        ...

    def notifications(self) -> Iterator[RawNotification]:
        """Yield notifications until the provider is closed."""
        ...

    def close(self) -> None:
        """Release resources and end the notification stream."""
        ...


class _QueueingHandler(FileSystemEventHandler):
    """Forwards watchdog events into a queue as raw notifications."""

    def __init__(self, notes: "queue.Queue[RawNotification | None]") -> None:
        super().__init__()
        self._notes = notes

    def on_any_event(self, event: FileSystemEvent) -> None:
        path = os.fsdecode(event.src_path)
        if event.event_type == "moved":
            # Old name is renamed away, new name appears
            self._notes.put(RawNotification(path, "moved", event.is_directory))
            dest = os.fsdecode(event.dest_path)
            self._notes.put(RawNotification(dest, "created", event.is_directory))
            return
        self._notes.put(RawNotification(path, event.event_type, event.is_directory))


def _raise(error: OSError) -> None:
    raise error


class WatchdogProvider(LoggerMixin):
    """
    Notification provider backed by a watchdog Observer.

    Notifications are queued by the observer thread and consumed by
    whoever iterates notifications(); close() ends that iteration.
    """

    def __init__(self) -> None:
        self._observer = Observer()
        self._notes: queue.Queue[RawNotification | None] = queue.Queue()
        self._handler = _QueueingHandler(self._notes)
        self._watches: dict[str, ObservedWatch] = {}
        self._lock = threading.Lock()
        self._closed = False

    def start(self) -> None:
        """Start the observer thread."""
        self._observer.start()

    def add_watch(self, path: str) -> None:
        """
        Watch a single directory.

        A directory that was watched before and has been recreated gets
        a fresh watch, since the old one died with the old directory.
        """
        with self._lock:
            if self._closed:
                return
            stale = self._watches.pop(path, None)
            if stale is not None:
                try:
                    self._observer.unschedule(stale)
                except KeyError:
                    pass
            self._watches[path] = self._observer.schedule(
                self._handler, path, recursive=False
            )
        self.log.debug("directory_watched", path=path)

    def add_tree(self, path: str) -> None:
        """
        Watch a directory tree.

        Raises:
            OSError: If any directory of the tree cannot be listed or watched
        """
        for dirpath, _dirnames, _filenames in os.walk(path, onerror=_raise):
            self.add_watch(dirpath)

    def notifications(self) -> Iterator[RawNotification]:
        """Yield notifications until close() is called."""
        while True:
            note = self._notes.get()
            if note is None:
                return
            yield note

    def close(self) -> None:
        """Stop the observer and end the notification stream."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._watches.clear()

        if self._observer.is_alive():
            self._observer.stop()
            self._observer.join()
        self._notes.put(None)
