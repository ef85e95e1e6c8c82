"""
Tripwire Executor Package.

Single-flight execution of command sequences.
Requires Python 3.11+.
"""

from executor.gate import ExecutionGate
from executor.runner import CommandRunner
from executor.sink import open_log_sink

__all__ = ["ExecutionGate", "CommandRunner", "open_log_sink"]
