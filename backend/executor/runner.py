"""
Tripwire Command Runner.

Runs a target's command sequence under a cancellation token.
Requires Python 3.11+.
"""

import os
import signal
import subprocess
import threading
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, BinaryIO

from audit.loggers import CommandLogger, NullCommandLogger
from executor.sink import open_log_sink
from utils.errors import abort_process, as_audit_error
from utils.logger import LoggerMixin


class CommandRunner(LoggerMixin):
    """
    Runs commands in declared order, stopping at the first failure.

    Each command runs through the shell in its own process group, with
    stdout and stderr combined into the log sink. When the cancellation
    token is set the running process group gets SIGTERM (then SIGKILL
    after a grace period) and no further commands start.
    """

    def __init__(
        self,
        commands: Sequence[str],
        command_logger: CommandLogger | None = None,
        cancel: threading.Event | None = None,
        log_file: Path | None = None,
        poll_interval: float = 0.05,
        terminate_grace: float = 5.0,
        on_fatal: Callable[..., Any] = abort_process,
    ) -> None:
        """
        Initialize the runner.

        Args:
            commands: Shell commands, run in order
            command_logger: Records every command before it starts
            cancel: Token that aborts the running and remaining commands
            log_file: Log sink path, or None for stdout
            poll_interval: Seconds between cancellation checks
            terminate_grace: Seconds between SIGTERM and SIGKILL
            on_fatal: Called with the error when a command record fails
        """
        self._commands = tuple(commands)
        self._command_logger = command_logger or NullCommandLogger()
        self._cancel = cancel or threading.Event()
        self._log_file = log_file
        self._poll_interval = poll_interval
        self._terminate_grace = terminate_grace
        self._on_fatal = on_fatal

    def run(self) -> bool:
        """
        Run the whole sequence into the configured log sink.

        Returns:
            True if every command exited with status 0
        """
        with open_log_sink(self._log_file) as sink:
            return self.run_commands(sink)

    def run_commands(self, sink: BinaryIO) -> bool:
        """
        Run the whole sequence into the given sink.

        Returns:
            True if every command exited with status 0
        """
        for index, command in enumerate(self._commands):
            if self._cancel.is_set():
                self.log.info("sequence_cancelled", skipped=len(self._commands) - index)
                return False

            self._record(command)
            returncode, output = self._execute(command)

            try:
                sink.write(output)
            except OSError as e:
                self.log.error("log_sink_write_failed", error=str(e))

            if returncode != 0:
                self.log.info("command_failed", command=command, returncode=returncode)
                return False

        return True

    def _record(self, command: str) -> None:
        try:
            self._command_logger.record(command, datetime.now(timezone.utc))
        except Exception as e:
            self._on_fatal(as_audit_error(e), command=command)

    def _execute(self, command: str) -> tuple[int, bytes]:
        """Run one command to completion or cancellation."""
        self.log.debug("command_started", command=command)
        try:
            proc = subprocess.Popen(
                command,
                shell=True,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                start_new_session=True,
            )
        except OSError as e:
            self.log.error("command_spawn_failed", command=command, error=str(e))
            return -1, b""

        while True:
            try:
                output, _ = proc.communicate(timeout=self._poll_interval)
                break
            except subprocess.TimeoutExpired:
                if self._cancel.is_set():
                    output = self._terminate(proc)
                    break

        return proc.returncode, output

    def _terminate(self, proc: subprocess.Popen[bytes]) -> bytes:
        """Stop a cancelled command's process group and collect its output."""
        self.log.info("command_terminating", pid=proc.pid)
        self._signal_group(proc, signal.SIGTERM)
        try:
            output, _ = proc.communicate(timeout=self._terminate_grace)
        except subprocess.TimeoutExpired:
            self._signal_group(proc, signal.SIGKILL)
            output, _ = proc.communicate()
        return output

    @staticmethod
    def _signal_group(proc: subprocess.Popen[bytes], sig: signal.Signals) -> None:
        try:
            os.killpg(proc.pid, sig)
        except ProcessLookupError:
            pass
