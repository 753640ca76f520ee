"""Severity definitions for rule occurrences."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional


class Severity(str, Enum):
    """Enumerate the SARIF-compatible severity levels."""

    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"

    @property
    def rank(self) -> int:
        """Return an integer ranking, higher is more severe."""

        ordering = {
            Severity.ERROR: 2,
            Severity.WARNING: 1,
            Severity.NOTE: 0,
        }
        return ordering[self]

    @classmethod
    def parse(cls, value: object) -> Optional["Severity"]:
        """Map a raw value onto a severity, ``None`` when unset or unknown."""

        if isinstance(value, Severity):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


def highest(severities: Iterable[Severity], default: Severity = Severity.NOTE) -> Severity:
    """Return the most severe level in ``severities`` (error > warning > note)."""

    result = default
    for severity in severities:
        if severity.rank > result.rank:
            result = severity
    return result
