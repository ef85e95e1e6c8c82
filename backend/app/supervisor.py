"""
Tripwire Supervisor.

Starts every configured target and stops them all on a signal.
Requires Python 3.11+.
"""

import signal
import threading
from collections.abc import Callable, Iterable
from types import FrameType

from audit.store import AuditLoggers
from utils.errors import SetupError
from utils.logger import LoggerMixin
from watcher.models import WatchTarget
from watcher.target import TargetPipeline, start_target

STOP_SIGNALS = (signal.SIGINT, signal.SIGQUIT, signal.SIGTERM)


class Supervisor(LoggerMixin):
    """Owns the running pipelines of one process."""

    def __init__(
        self,
        loggers: AuditLoggers,
        starter: Callable[..., TargetPipeline] = start_target,
    ) -> None:
        self._loggers = loggers
        self._starter = starter
        self._pipelines: list[TargetPipeline] = []
        self._shutdown = threading.Event()

    def start_all(self, targets: Iterable[WatchTarget]) -> int:
        """
        Start every target; a target that fails to start is skipped.

        Returns:
            Number of targets running
        """
        for target in targets:
            try:
                pipeline = self._starter(
                    target,
                    change_logger=self._loggers.changes,
                    command_logger=self._loggers.commands,
                )
            except SetupError as e:
                self.log.error("target_start_failed", path=e.path, error=e.reason)
                continue
            self._pipelines.append(pipeline)
        return len(self._pipelines)

    def install_signal_handlers(self) -> None:
        """Turn SIGINT, SIGQUIT and SIGTERM into a shutdown request."""
        for sig in STOP_SIGNALS:
            signal.signal(sig, self._on_signal)

    def _on_signal(self, signum: int, frame: FrameType | None) -> None:
        print("\nAborting...")
        self.request_stop()

    def request_stop(self) -> None:
        """Ask run_until_stopped() to shut everything down."""
        self._shutdown.set()

    def run_until_stopped(self) -> None:
        """Block until a stop is requested, then stop every target."""
        # Signal handlers only run when the main thread wakes up
        while not self._shutdown.wait(1.0):
            pass
        self.stop_all()

    def stop_all(self) -> None:
        """Stop every target, waiting for each to finish."""
        for pipeline in self._pipelines:
            pipeline.stop()
        self._pipelines.clear()

    @property
    def pipelines(self) -> list[TargetPipeline]:
        return list(self._pipelines)
