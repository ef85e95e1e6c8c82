"""
Tripwire Watcher Package.

Event intake, filtering, debouncing and per-target lifecycle.
Requires Python 3.11+.
"""

from watcher.models import ChangeEvent, EventKind, RawNotification, WatchTarget
from watcher.path_filter import PathFilter, compile_patterns
from watcher.debouncer import DebounceRegistry
from watcher.provider import NotificationProvider, WatchdogProvider
from watcher.target import TargetPipeline, start_target

__all__ = [
    "ChangeEvent",
    "EventKind",
    "RawNotification",
    "WatchTarget",
    "PathFilter",
    "compile_patterns",
    "DebounceRegistry",
    "NotificationProvider",
    "WatchdogProvider",
    "TargetPipeline",
    "start_target",
]
