"""
Tripwire Debounce Registry.

Coalesces rapid events on the same path into one change.
Requires Python 3.11+.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from utils.logger import LoggerMixin
from watcher.models import ChangeEvent


@dataclass(eq=False)
class PendingTimer:
    """A path waiting for its quiet interval to elapse."""

    event: ChangeEvent
    timer: threading.Timer | None = None


class DebounceRegistry(LoggerMixin):
    """
    Per-target map from path to a single-shot timer.

    Every event on a path restarts that path's timer, so a burst fires
    once, a quiet interval after its last event, carrying the last kind
    seen. Paths are independent of each other.
    """

    def __init__(
        self,
        on_fire: Callable[[ChangeEvent], Any],
        delay_ms: int = 100,
    ) -> None:
        """
        Initialize the registry.

        Args:
            on_fire: Called from the timer thread with the coalesced event
            delay_ms: Quiet interval in milliseconds
        """
        self._delay = delay_ms / 1000.0
        self._on_fire = on_fire
        self._pending: dict[str, PendingTimer] = {}
        self._firing: set[threading.Thread] = set()
        self._lock = threading.Lock()
        self._closed = False

    def touch(self, event: ChangeEvent) -> bool:
        """
        Register an event, arming or restarting the timer for its path.

        Returns:
            False if the registry has been stopped and the event was dropped
        """
        with self._lock:
            if self._closed:
                return False

            previous = self._pending.get(event.path)
            if previous is not None and previous.timer is not None:
                previous.timer.cancel()

            pending = PendingTimer(event=event)
            pending.timer = threading.Timer(self._delay, self._fire, args=(pending,))
            pending.timer.daemon = True
            self._pending[event.path] = pending
            pending.timer.start()

        return True

    def _fire(self, pending: PendingTimer) -> None:
        """Emit the coalesced event unless the timer was replaced meanwhile."""
        path = pending.event.path
        with self._lock:
            # A cancel can lose the race against an expiring timer; the
            # registry entry is the source of truth.
            if self._pending.get(path) is not pending:
                return
            del self._pending[path]
            self._firing.add(threading.current_thread())

        self.log.debug("change_fired", path=path, kind=pending.event.kind.label)
        try:
            self._on_fire(pending.event)
        except Exception as e:
            self.log.error("fire_handler_failed", path=path, error=str(e))
        finally:
            with self._lock:
                self._firing.discard(threading.current_thread())

    def stop(self) -> None:
        """
        Drop all pending timers and wait for handlers already running.

        Touches after stop are ignored.
        """
        with self._lock:
            self._closed = True
            threads: list[threading.Thread] = [
                p.timer for p in self._pending.values() if p.timer is not None
            ]
            threads.extend(self._firing)
            self._pending.clear()

        current = threading.current_thread()
        for thread in threads:
            if isinstance(thread, threading.Timer):
                thread.cancel()
            if thread is not current:
                thread.join()

    @property
    def pending_count(self) -> int:
        """Get number of paths waiting to fire."""
        with self._lock:
            return len(self._pending)

    @property
    def pending_paths(self) -> list[str]:
        """Get list of paths waiting to fire."""
        with self._lock:
            return list(self._pending.keys())
