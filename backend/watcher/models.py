"""
Tripwire Watch Models.

Data structures flowing through a watch target's pipeline.
Requires Python 3.11+.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class EventKind(str, Enum):
    """Kinds of filesystem change a pipeline understands."""

    ATTRIB = "attrib"
    CREATE = "create"
    WRITE = "write"
    REMOVE = "remove"
    RENAME = "rename"

    @property
    def label(self) -> str:
        """Label written to the change log."""
        if self is EventKind.REMOVE:
            return "delete"
        return self.value

    @classmethod
    def from_event_type(cls, event_type: str, is_directory: bool = False) -> "EventKind":
        """
        Classify a watchdog event type.

        Directory modifications only mean that an entry inside changed,
        and the entry itself reports that change, so they count as
        attribute noise along with open/close notifications.
        """
        if event_type == "created":
            return cls.CREATE
        if event_type == "modified":
            return cls.ATTRIB if is_directory else cls.WRITE
        if event_type == "deleted":
            return cls.REMOVE
        if event_type == "moved":
            return cls.RENAME
        return cls.ATTRIB


@dataclass(frozen=True)
class RawNotification:
    """A notification as reported by the provider, before classification."""

    path: str
    event_type: str
    is_directory: bool = False


@dataclass(frozen=True)
class ChangeEvent:
    """A classified change on one path."""

    path: str
    kind: EventKind

    @classmethod
    def from_notification(cls, note: RawNotification) -> "ChangeEvent":
        """Build a change event from a raw provider notification."""
        return cls(
            path=note.path,
            kind=EventKind.from_event_type(note.event_type, note.is_directory),
        )


@dataclass(frozen=True)
class WatchTarget:
    """
    One watched root with its command sequence and filters.

    Immutable; one instance drives one pipeline.
    """

    path: Path
    commands: tuple[str, ...] = ()
    log_file: Path | None = None
    include: tuple[str, ...] = field(default_factory=tuple)
    exclude: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept lists from callers but store tuples so the target stays hashable
        object.__setattr__(self, "path", Path(self.path))
        object.__setattr__(self, "commands", tuple(self.commands))
        object.__setattr__(self, "include", tuple(self.include))
        object.__setattr__(self, "exclude", tuple(self.exclude))
        if self.log_file is not None:
            object.__setattr__(self, "log_file", Path(self.log_file))
