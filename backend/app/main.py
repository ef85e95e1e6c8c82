"""
Tripwire Command-Line Entry Point.

Usage:
    tripwire /path/to/watch.yaml

Requires Python 3.11+.
"""

import argparse
import sys
from pathlib import Path

from app.config_file import load_config
from app.supervisor import Supervisor
from audit.store import open_audit_loggers
from utils.config import get_settings
from utils.errors import ConfigError
from utils.logger import configure_logging, get_logger

logger = get_logger("tripwire")


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="tripwire",
        description="Run command sequences when watched directories change",
    )
    parser.add_argument(
        "config",
        type=Path,
        help="Path to the YAML watch file",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {settings.app_version}",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    configure_logging()
    settings = get_settings()
    print(f"{settings.app_name} version {settings.app_version}")

    try:
        watch_file = load_config(args.config)
    except ConfigError as e:
        logger.error("config_load_failed", path=str(args.config), error=str(e))
        return 1

    loggers = open_audit_loggers(watch_file.audit)
    supervisor = Supervisor(loggers)

    try:
        if supervisor.start_all(watch_file.targets) == 0:
            logger.error("no_targets_running", configured=len(watch_file.targets))
            return 1

        supervisor.install_signal_handlers()
        supervisor.run_until_stopped()
    finally:
        supervisor.stop_all()
        loggers.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
