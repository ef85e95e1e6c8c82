"""
Tripwire Errors.

Exception hierarchy and the fatal-abort path for audit failures.
Requires Python 3.11+.
"""

import os
import sys

from utils.logger import get_logger

# EX_SOFTWARE from sysexits.h
AUDIT_FAILURE_EXIT_CODE = 70

logger = get_logger("errors")


class TripwireError(Exception):
    """Base class for all Tripwire errors."""


class ConfigError(TripwireError):
    """The watch file could not be read or validated."""


class SetupError(TripwireError):
    """A watch target could not be started."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"couldn't begin watching {path}: {reason}")
        self.path = path
        self.reason = reason


class AuditLogError(TripwireError):
    """A change or command record could not be written to the audit store."""


def abort_process(error: BaseException, **context: object) -> None:
    """
    Terminate the whole process after an audit write failure.

    Losing audit rows silently is not an option, so this never returns.
    Uses os._exit because it is typically called from a timer or executor
    thread, where SystemExit would only end that thread.
    """
    logger.critical("audit_write_failed", error=str(error), **context)
    sys.stdout.flush()
    sys.stderr.flush()
    os._exit(AUDIT_FAILURE_EXIT_CODE)


def as_audit_error(error: Exception) -> AuditLogError:
    """Wrap any exception raised by an audit logger as an AuditLogError."""
    if isinstance(error, AuditLogError):
        return error
    wrapped = AuditLogError(f"{type(error).__name__}: {error}")
    wrapped.__cause__ = error
    return wrapped
