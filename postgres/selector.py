"""Select which databases get per-database charts.

Patterns are shell-style globs checked in order; a leading `!` negates a
pattern. The first pattern that matches a name decides whether the database is
selected, and a name matching no pattern is not selected. An empty pattern
list selects every database.
"""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Iterable


@dataclass(frozen=True, slots=True)
class _Pattern:
    glob: str
    negated: bool


class DatabaseSelector:
    """Ordered include/exclude glob patterns for database names."""

    __slots__ = ("_patterns",)

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        """Parse selector patterns.

        Args:
            patterns: Glob patterns, each optionally prefixed with `!`.

        Raises:
            ValueError: When a pattern is empty or only a `!`.
        """

        parsed: list[_Pattern] = []
        for raw in patterns:
            pattern = raw.strip()
            negated = pattern.startswith("!")
            glob = pattern[1:].strip() if negated else pattern
            if not glob:
                raise ValueError(f"Invalid database selector pattern: {raw!r}.")
            parsed.append(_Pattern(glob=glob, negated=negated))
        self._patterns: tuple[_Pattern, ...] = tuple(parsed)

    def __repr__(self) -> str:
        patterns = [("!" if p.negated else "") + p.glob for p in self._patterns]
        return f"DatabaseSelector({patterns!r})"

    def matches(self, dbname: str) -> bool:
        """Return True when `dbname` should be charted."""

        if not self._patterns:
            return True
        for pattern in self._patterns:
            if fnmatchcase(dbname, pattern.glob):
                return not pattern.negated
        return False
