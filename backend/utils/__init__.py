"""
Tripwire Utilities Package.

Settings, structured logging and errors shared by every package.
Requires Python 3.11+.
"""

from utils.config import Settings, get_settings
from utils.logger import configure_logging, get_logger, logger, LoggerMixin
from utils.errors import (
    AuditLogError,
    ConfigError,
    SetupError,
    TripwireError,
    abort_process,
    as_audit_error,
)

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "logger",
    "LoggerMixin",
    "AuditLogError",
    "ConfigError",
    "SetupError",
    "TripwireError",
    "abort_process",
    "as_audit_error",
]
