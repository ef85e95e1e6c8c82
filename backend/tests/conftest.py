"""
Tripwire Test Configuration.

Pytest fixtures and test doubles.
Requires Python 3.11+.
"""

import queue
import threading
import time
from collections.abc import Callable, Iterator
from datetime import datetime
from pathlib import Path

import pytest
import structlog

from utils.config import WatcherSettings
from utils.errors import AuditLogError
from watcher.models import RawNotification


class RecordingChangeLogger:
    """Change logger keeping records in memory."""

    def __init__(self, fail: bool = False, error: Exception | None = None) -> None:
        self.records: list[tuple[str, str, datetime]] = []
        self.fail = fail
        self.error = error
        self._lock = threading.Lock()

    def record(self, path: str, kind: str, timestamp: datetime) -> None:
        if self.error is not None:
            raise self.error
        if self.fail:
            raise AuditLogError("store is gone")
        with self._lock:
            self.records.append((path, kind, timestamp))

    @property
    def paths(self) -> list[str]:
        with self._lock:
            return [r[0] for r in self.records]


class RecordingCommandLogger:
    """Command logger keeping records in memory."""

    def __init__(self, fail: bool = False, error: Exception | None = None) -> None:
        self.records: list[tuple[str, datetime]] = []
        self.fail = fail
        self.error = error

    def record(self, command: str, timestamp: datetime) -> None:
        if self.error is not None:
            raise self.error
        if self.fail:
            raise AuditLogError("store is gone")
        self.records.append((command, timestamp))

    @property
    def commands(self) -> list[str]:
        return [r[0] for r in self.records]


class FakeProvider:
    """Notification provider driven by the test."""

    def __init__(self) -> None:
        self.watched: list[str] = []
        self.started = False
        self.closed = False
        self.fail_on_add: str | None = None
        self._notes: queue.Queue[RawNotification | None] = queue.Queue()

    def start(self) -> None:
        self.started = True

    def add_watch(self, path: str) -> None:
        self.watched.append(path)

    def add_tree(self, path: str) -> None:
        if self.fail_on_add == path:
            raise PermissionError(13, "Permission denied", path)
        self.add_watch(path)

    def emit(self, path: str, event_type: str, is_directory: bool = False) -> None:
        self._notes.put(RawNotification(path, event_type, is_directory))

    def notifications(self) -> Iterator[RawNotification]:
        while True:
            note = self._notes.get()
            if note is None:
                return
            yield note

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._notes.put(None)


def wait_until(condition: Callable[[], bool], timeout: float = 5.0, interval: float = 0.02) -> bool:
    """Poll a condition until it holds or the timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(interval)
    return condition()


def read_log(path: Path) -> str:
    """Read a log sink file, treating a missing file as empty."""
    if not path.exists():
        return ""
    return path.read_text()


@pytest.fixture
def settings() -> WatcherSettings:
    """Watcher settings with the default quiet interval and a short grace period."""
    return WatcherSettings(quiet_interval_ms=100, cancel_poll_ms=20, terminate_grace_s=1.0)


@pytest.fixture
def change_logger() -> RecordingChangeLogger:
    return RecordingChangeLogger()


@pytest.fixture
def command_logger() -> RecordingCommandLogger:
    return RecordingCommandLogger()


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def watch_dir(tmp_path: Path) -> Path:
    """An empty directory to watch."""
    directory = tmp_path / "watched"
    directory.mkdir()
    return directory


@pytest.fixture
def log_file(tmp_path: Path) -> Path:
    """Log sink location outside the watched directory."""
    logs = tmp_path / "logs"
    logs.mkdir()
    return logs / "build.log"


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Undo any configure_logging() done by a test."""
    yield
    structlog.reset_defaults()
