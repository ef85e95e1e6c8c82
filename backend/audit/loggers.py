"""
Tripwire Audit Loggers.

The two narrow logging capabilities the watch pipeline depends on.
Requires Python 3.11+.
"""

from datetime import datetime
from typing import Protocol


class ChangeLogger(Protocol):
    """Records one debounced, filtered change."""

    def record(self, path: str, kind: str, timestamp: datetime) -> None:
        """
        Persist a change.

        Raises:
            AuditLogError: If the record could not be written
        """
        ...


class CommandLogger(Protocol):
    """Records one command just before it runs."""

    def record(self, command: str, timestamp: datetime) -> None:
        """
        Persist a command invocation.

        Raises:
            AuditLogError: If the record could not be written
        """
        ...


class NullChangeLogger:
    """Change logger used when no audit store is configured."""

    def record(self, path: str, kind: str, timestamp: datetime) -> None:
        return None


class NullCommandLogger:
    """Command logger used when no audit store is configured."""

    def record(self, command: str, timestamp: datetime) -> None:
        return None
