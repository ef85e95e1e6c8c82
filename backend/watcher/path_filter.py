"""
Tripwire Path Filter.

Include/exclude regular expression filtering of event paths.
Requires Python 3.11+.
"""

import re
from collections.abc import Iterable

from utils.logger import get_logger

logger = get_logger(__name__)


def compile_patterns(patterns: Iterable[str]) -> list[re.Pattern[str]]:
    """
    Compile regular expressions, dropping the malformed ones.

    Args:
        patterns: Regular expression sources

    Returns:
        Compiled patterns, in input order, without the invalid ones
    """
    compiled: list[re.Pattern[str]] = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as e:
            logger.warning("invalid_pattern_ignored", pattern=pattern, error=str(e))
    return compiled


class PathFilter:
    """
    Decides whether an event path is relevant.

    A path passes when the include set is empty or one include pattern
    matches it, and no exclude pattern matches it. Matching is a search
    over the full path string.
    """

    def __init__(
        self,
        include: Iterable[str] = (),
        exclude: Iterable[str] = (),
    ) -> None:
        self._include = compile_patterns(include)
        self._exclude = compile_patterns(exclude)

    def accepts(self, path: str) -> bool:
        """Check whether an event on this path should be debounced."""
        if self._include and not any(p.search(path) for p in self._include):
            return False
        return not any(p.search(path) for p in self._exclude)

    @property
    def include_count(self) -> int:
        return len(self._include)

    @property
    def exclude_count(self) -> int:
        return len(self._exclude)
