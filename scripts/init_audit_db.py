#!/usr/bin/env python3
"""
Tripwire Audit Database Initialization Script.

Creates the change and command log tables in a SQLite database.
Requires Python 3.11+.

Usage:
    python scripts/init_audit_db.py /var/lib/tripwire/audit.db
"""

import argparse
import sqlite3
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from utils.logger import configure_logging, get_logger


configure_logging()
logger = get_logger("init_audit_db")


def init_database(location: Path, changes: str, commands: str) -> None:
    """
    Create the audit tables if they do not exist.

    Args:
        location: SQLite database file
        changes: Change log table name
        commands: Command log table name
    """
    location.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(location) as conn:
        conn.execute(
            f'CREATE TABLE IF NOT EXISTS "{changes}" ('
            "path VARCHAR(4096), event VARCHAR(64), occured_at TIMESTAMP)"
        )
        conn.execute(
            f'CREATE TABLE IF NOT EXISTS "{commands}" ('
            "command VARCHAR(4096), run_at TIMESTAMP)"
        )
    logger.info("audit_tables_ready", location=str(location), changes=changes, commands=commands)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Create the Tripwire audit tables")
    parser.add_argument("location", type=Path, help="SQLite database file")
    parser.add_argument("--changes", default="changes", help="Change log table name")
    parser.add_argument("--commands", default="commands", help="Command log table name")
    args = parser.parse_args()

    try:
        init_database(args.location, args.changes, args.commands)
    except sqlite3.Error as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
