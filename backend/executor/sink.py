"""
Tripwire Log Sink.

Destination for the combined output of a target's commands.
Requires Python 3.11+.
"""

import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO

from utils.logger import get_logger

logger = get_logger(__name__)


def _stdout() -> BinaryIO:
    sys.stdout.flush()
    return sys.stdout.buffer


@contextmanager
def open_log_sink(path: Path | None) -> Iterator[BinaryIO]:
    """
    Open the log sink for one command sequence.

    Files are opened in append mode and synced to disk on exit. Without
    a path, or when the file cannot be opened, output goes to stdout.

    Args:
        path: Log file path, or None for stdout

    Yields:
        Binary stream to append command output to
    """
    sink: BinaryIO
    owned = False
    if path is None:
        sink = _stdout()
    else:
        try:
            sink = open(path, "ab")
            owned = True
        except OSError as e:
            logger.warning("log_sink_unavailable", path=str(path), error=str(e))
            sink = _stdout()

    try:
        yield sink
    finally:
        try:
            sink.flush()
            if owned:
                os.fsync(sink.fileno())
        except OSError as e:
            logger.warning("log_sink_sync_failed", path=str(path), error=str(e))
        finally:
            if owned:
                sink.close()
