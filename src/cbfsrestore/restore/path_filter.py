"""
Regular-expression filter deciding which archive paths get restored.
"""

import re

from cbfsrestore.core.constants import DEFAULT_MATCH_PATTERN
from cbfsrestore.core.errors import InvalidPatternError


class PathFilter:
    """Unanchored regex match against a record path (``^a/`` anchors explicitly)."""

    def __init__(self, pattern: str = DEFAULT_MATCH_PATTERN):
        try:
            self._regex = re.compile(pattern)
        except re.error as e:
            raise InvalidPatternError(f"Error parsing match pattern {pattern!r}: {e}") from e

    @property
    def pattern(self) -> str:
        return self._regex.pattern

    def matches(self, path: str) -> bool:
        return self._regex.search(path) is not None

    __call__ = matches

    def __repr__(self):
        return f"PathFilter({self.pattern!r})"
