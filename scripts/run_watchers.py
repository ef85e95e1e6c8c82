#!/usr/bin/env python3
"""
Tripwire Runner Script.

Runs the watchers described in a watch file until interrupted.
Requires Python 3.11+.

Usage:
    python scripts/run_watchers.py /path/to/watch.yaml
"""

import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from app.main import main


if __name__ == "__main__":
    sys.exit(main())
