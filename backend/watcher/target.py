"""
Tripwire Target Pipeline.

Wires one watch target together: provider -> filter -> debounce ->
change log + execution gate -> command runner, and tears it down again.
Requires Python 3.11+.
"""

import threading
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from audit.loggers import (
    ChangeLogger,
    CommandLogger,
    NullChangeLogger,
    NullCommandLogger,
)
from executor.gate import ExecutionGate
from executor.runner import CommandRunner
from utils.config import WatcherSettings, get_settings
from utils.errors import AuditLogError, SetupError, abort_process, as_audit_error
from utils.logger import LoggerMixin
from watcher.debouncer import DebounceRegistry
from watcher.models import ChangeEvent, EventKind, RawNotification, WatchTarget
from watcher.path_filter import PathFilter
from watcher.provider import NotificationProvider, WatchdogProvider


class TargetPipeline(LoggerMixin):
    """
    Runtime state of one watch target.

    Owns a notification consumer thread, a debounce registry and an
    execution gate with its executor thread. Nothing is shared with
    other targets except the audit loggers.
    """

    def __init__(
        self,
        target: WatchTarget,
        change_logger: ChangeLogger | None = None,
        command_logger: CommandLogger | None = None,
        provider: NotificationProvider | None = None,
        settings: WatcherSettings | None = None,
        on_fatal: Callable[..., Any] = abort_process,
    ) -> None:
        """
        Initialize the pipeline without starting it.

        Args:
            target: What to watch and what to run
            change_logger: Records every fired change
            command_logger: Records every command before it runs
            provider: Notification source, watchdog by default
            settings: Timing settings, from the environment by default
            on_fatal: Called with the error when an audit write fails
        """
        settings = settings or get_settings().watcher

        self._target = target
        self._change_logger = change_logger or NullChangeLogger()
        self._provider: NotificationProvider = provider or WatchdogProvider()
        self._on_fatal = on_fatal
        self._filter = PathFilter(target.include, target.exclude)
        self._cancel = threading.Event()

        self._runner = CommandRunner(
            commands=target.commands,
            command_logger=command_logger,
            cancel=self._cancel,
            log_file=target.log_file,
            poll_interval=settings.cancel_poll,
            terminate_grace=settings.terminate_grace_s,
            on_fatal=on_fatal,
        )
        self._gate = ExecutionGate(self._runner.run, name=f"executor:{target.path}")
        self._registry = DebounceRegistry(self._on_change, delay_ms=settings.quiet_interval_ms)
        self._consumer = threading.Thread(
            target=self._consume, name=f"consumer:{target.path}", daemon=True
        )

        self._state_lock = threading.Lock()
        self._started = False
        self._stopped = threading.Event()
        self._stop_done = threading.Event()

    @property
    def target(self) -> WatchTarget:
        return self._target

    def start(self) -> None:
        """
        Watch the target's tree and start both threads.

        Raises:
            SetupError: If the root cannot be enumerated or watched
        """
        root = str(self._target.path)
        with self._state_lock:
            if self._started:
                return
            if not self._target.path.is_dir():
                raise SetupError(root, "not a directory")
            try:
                self._provider.add_tree(root)
                self._provider.start()
            except OSError as e:
                self._provider.close()
                raise SetupError(root, str(e)) from e
            self._gate.start()
            self._consumer.start()
            self._started = True

        self.log.info(
            "target_started",
            path=root,
            commands=len(self._target.commands),
            include=self._filter.include_count,
            exclude=self._filter.exclude_count,
        )

    def _consume(self) -> None:
        for note in self._provider.notifications():
            self.handle_notification(note)

    def handle_notification(self, note: RawNotification) -> bool:
        """
        Classify, filter and debounce one raw notification.

        Returns:
            True if the notification reached the debounce registry
        """
        event = ChangeEvent.from_notification(note)
        if event.kind is EventKind.ATTRIB:
            return False

        if event.kind is EventKind.CREATE and note.is_directory:
            # New subtrees must be watched before anything inside them is missed
            try:
                self._provider.add_tree(event.path)
            except OSError as e:
                self.log.warning("subtree_watch_failed", path=event.path, error=str(e))

        if not self._filter.accepts(event.path):
            return False

        return self._registry.touch(event)

    def _on_change(self, event: ChangeEvent) -> None:
        """Fire handler: log the change, then ask for a run."""
        error: AuditLogError | None = None
        try:
            self._change_logger.record(event.path, event.kind.label, datetime.now(timezone.utc))
        except Exception as e:
            error = as_audit_error(e)

        queued = self._gate.request()
        self.log.debug("run_requested", path=event.path, queued=queued)

        if error is not None:
            self._on_fatal(error, path=event.path)

    def stop(self) -> None:
        """
        Stop the pipeline and wait until every thread it owns has exited.

        The running command is cancelled; a run already owed is drained
        without starting any command. Safe to call more than once and from
        several threads; every caller returns only after shutdown finished.
        """
        with self._state_lock:
            first = not self._stopped.is_set()
            self._stopped.set()
            started = self._started

        if not first:
            self._stop_done.wait()
            return

        try:
            self._cancel.set()
            self._gate.close()
            self._provider.close()
            self._registry.stop()
            if started:
                self._consumer.join()
        finally:
            self._stop_done.set()

        self.log.info("target_stopped", path=str(self._target.path))

    def wait(self, timeout: float | None = None) -> bool:
        """Block until stop() has been called."""
        return self._stopped.wait(timeout)

    @property
    def is_running(self) -> bool:
        """Check if the pipeline is started and not stopped."""
        return self._started and not self._stopped.is_set()

    def __enter__(self) -> "TargetPipeline":
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.stop()


def start_target(
    target: WatchTarget,
    change_logger: ChangeLogger | None = None,
    command_logger: CommandLogger | None = None,
    **kwargs: Any,
) -> TargetPipeline:
    """
    Start watching a target.

    Returns:
        The running pipeline; call stop() on it to shut it down

    Raises:
        SetupError: If the target could not be started
    """
    pipeline = TargetPipeline(target, change_logger, command_logger, **kwargs)
    pipeline.start()
    return pipeline
