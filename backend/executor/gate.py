"""
Tripwire Execution Gate.

Single-flight scheduling of command sequences for one watch target.
Requires Python 3.11+.
"""

import threading
from collections.abc import Callable
from typing import Any

from utils.logger import LoggerMixin


class ExecutionGate(LoggerMixin):
    """
    A capacity-1 run slot drained by a dedicated executor thread.

    request() never blocks: if a run is already owed, the new request is
    dropped because the owed run will see the latest filesystem state
    anyway. The executor runs one unit of work per request, never two at
    once. close() is a separate signal owned by the gate, so the executor
    can be stopped whether or not another request ever arrives.
    """

    def __init__(self, work: Callable[[], Any], name: str = "executor") -> None:
        """
        Initialize the gate.

        Args:
            work: Runs one full command sequence; called on the executor thread
            name: Executor thread name
        """
        self._work = work
        self._cond = threading.Condition()
        self._pending = False
        self._closed = False
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def start(self) -> None:
        """Start the executor thread."""
        self._thread.start()

    def request(self) -> bool:
        """
        Ask for one more run.

        Returns:
            True if the request took the slot, False if it was dropped
            because a run is already owed or the gate is closed
        """
        with self._cond:
            if self._closed or self._pending:
                return False
            self._pending = True
            self._cond.notify()
            return True

    def _run(self) -> None:
        while True:
            with self._cond:
                while not self._pending and not self._closed:
                    self._cond.wait()
                if not self._pending:
                    break
                self._pending = False

            try:
                self._work()
            except Exception:
                self.log.exception("run_failed")

        self.log.debug("executor_exited")

    def close(self) -> None:
        """
        Stop accepting requests and wait for the executor to exit.

        A run in progress, or one already owed, is completed first.
        """
        with self._cond:
            self._closed = True
            self._cond.notify_all()

        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join()

    @property
    def pending(self) -> bool:
        """Whether a run is owed but not started."""
        with self._cond:
            return self._pending

    @property
    def is_running(self) -> bool:
        """Whether the executor thread is alive."""
        return self._thread.is_alive()
