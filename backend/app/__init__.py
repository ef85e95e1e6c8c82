"""
Tripwire Application Package.

Watch file loading, target supervision and the command-line entry point.
Requires Python 3.11+.
"""

from app.config_file import TargetConfig, WatchFile, load_config
from app.supervisor import Supervisor

__all__ = ["TargetConfig", "WatchFile", "load_config", "Supervisor"]
