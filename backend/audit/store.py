"""
Tripwire Audit Store.

Relational storage of change and command logs.
Tables are created by the operator; this module only checks that the
configured ones exist and prepares one INSERT statement for each.
Requires Python 3.11+.
"""

import sqlite3
import threading
from collections.abc import Iterable
from datetime import datetime
from enum import Enum
from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field

from audit.loggers import (
    ChangeLogger,
    CommandLogger,
    NullChangeLogger,
    NullCommandLogger,
)
from utils.errors import AuditLogError
from utils.logger import LoggerMixin, get_logger

logger = get_logger(__name__)

_DISABLED = "will not store event and command logs"


class StoreKind(str, Enum):
    """Supported audit store backends."""

    SQLITE = "sqlite"


class AuditConfig(BaseModel):
    """
    Audit store block of the watch file.

    changes: table with path, event, occured_at columns
    commands: table with command, run_at columns
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    kind: str = Field(alias="type")
    location: str
    changes: str = ""
    commands: str = ""

    @property
    def store_kind(self) -> StoreKind | None:
        """Backend for this config, or None if unsupported."""
        try:
            return StoreKind(self.kind.lower())
        except ValueError:
            return None


def validate_tables(existing: Iterable[str], changes: str, commands: str) -> tuple[bool, bool]:
    """
    Check which configured tables exist, ignoring case.

    Returns:
        (changes table exists, commands table exists)
    """
    names = {name.lower() for name in existing}
    return bool(changes) and changes.lower() in names, bool(commands) and commands.lower() in names


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


def changes_statement(table: str) -> str:
    """INSERT statement for the change log table."""
    if not table:
        raise ValueError("no table specified")
    return f"INSERT INTO {_quote(table)}(path, event, occured_at) VALUES (?, ?, ?)"


def commands_statement(table: str) -> str:
    """INSERT statement for the command log table."""
    if not table:
        raise ValueError("no table specified")
    return f"INSERT INTO {_quote(table)}(command, run_at) VALUES (?, ?)"


class SQLiteAuditStore(LoggerMixin):
    """
    One SQLite connection shared by every watch target.

    Writes are serialized by a lock; each INSERT is committed on its own.
    """

    def __init__(self, location: str) -> None:
        self._location = location
        self._conn = sqlite3.connect(location, check_same_thread=False)
        self._lock = threading.Lock()

    def table_names(self) -> list[str]:
        """List the base tables in the database."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table'"
            ).fetchall()
        return [row[0] for row in rows]

    def prepare(self, statement: str, param_count: int) -> str:
        """
        Compile a statement without running it.

        Raises:
            sqlite3.Error: If the statement does not fit the table
        """
        with self._lock:
            self._conn.execute("EXPLAIN " + statement, (None,) * param_count).fetchall()
        return statement

    def execute(self, statement: str, params: tuple[Any, ...]) -> None:
        """
        Run one INSERT and commit it.

        Raises:
            AuditLogError: If the write failed
        """
        try:
            with self._lock:
                self._conn.execute(statement, params)
                self._conn.commit()
        except sqlite3.Error as e:
            raise AuditLogError(f"audit write failed: {e}") from e

    def close(self) -> None:
        """Close the connection."""
        with self._lock:
            self._conn.close()


class SQLiteChangeLogger:
    """Change logger writing to a prepared INSERT."""

    def __init__(self, store: SQLiteAuditStore, statement: str) -> None:
        self._store = store
        self._statement = statement

    def record(self, path: str, kind: str, timestamp: datetime) -> None:
        self._store.execute(self._statement, (path, kind, timestamp.isoformat()))


class SQLiteCommandLogger:
    """Command logger writing to a prepared INSERT."""

    def __init__(self, store: SQLiteAuditStore, statement: str) -> None:
        self._store = store
        self._statement = statement

    def record(self, command: str, timestamp: datetime) -> None:
        self._store.execute(self._statement, (command, timestamp.isoformat()))


class AuditLoggers(NamedTuple):
    """Loggers handed to every watch target, plus the store behind them."""

    changes: ChangeLogger
    commands: CommandLogger
    store: SQLiteAuditStore | None = None

    def close(self) -> None:
        if self.store is not None:
            self.store.close()


def open_audit_loggers(config: AuditConfig | None) -> AuditLoggers:
    """
    Open the audit store and prepare both loggers.

    Every problem here degrades to a null logger with a message; audit
    logging is only fatal once it has been set up and a write fails.

    Args:
        config: Audit block from the watch file, or None

    Returns:
        Change and command loggers, null where unavailable
    """
    disabled = AuditLoggers(NullChangeLogger(), NullCommandLogger())

    if config is None:
        logger.info("no_database_config", detail=_DISABLED)
        return disabled

    if config.store_kind is None:
        logger.info("database_type_unknown", type=config.kind, detail=_DISABLED)
        return disabled

    try:
        store = SQLiteAuditStore(config.location)
        existing = store.table_names()
    except sqlite3.Error as e:
        logger.warning("database_init_failed", error=str(e), detail=_DISABLED)
        return disabled

    changes_ok, commands_ok = validate_tables(existing, config.changes, config.commands)

    changes: ChangeLogger = NullChangeLogger()
    if not changes_ok:
        logger.warning("will_not_store_event_log", reason="no such table", table=config.changes)
    else:
        try:
            statement = store.prepare(changes_statement(config.changes), 3)
            changes = SQLiteChangeLogger(store, statement)
        except (sqlite3.Error, ValueError) as e:
            logger.warning("will_not_store_event_log", reason=str(e))

    commands: CommandLogger = NullCommandLogger()
    if not commands_ok:
        logger.warning("will_not_store_command_log", reason="no such table", table=config.commands)
    else:
        try:
            statement = store.prepare(commands_statement(config.commands), 2)
            commands = SQLiteCommandLogger(store, statement)
        except (sqlite3.Error, ValueError) as e:
            logger.warning("will_not_store_command_log", reason=str(e))

    return AuditLoggers(changes, commands, store)
