"""
Tripwire Audit Package.

Change and command logs in a relational store.
Requires Python 3.11+.
"""

from audit.loggers import (
    ChangeLogger,
    CommandLogger,
    NullChangeLogger,
    NullCommandLogger,
)
from audit.store import AuditConfig, AuditLoggers, open_audit_loggers

__all__ = [
    "ChangeLogger",
    "CommandLogger",
    "NullChangeLogger",
    "NullCommandLogger",
    "AuditConfig",
    "AuditLoggers",
    "open_audit_loggers",
]
