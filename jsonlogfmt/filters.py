"""Severity threshold filter."""

from typing import Callable

from jsonlogfmt.levels import Severity
from jsonlogfmt.mapper import Record


def admit(record: Record, threshold: Severity) -> bool:
    """True if the record is at least as severe as the threshold."""
    return record.severity <= threshold


def level_filter(threshold: Severity) -> Callable[[Record], bool]:
    """Return a predicate that admits records at or above ``threshold``."""
    return lambda record, t=threshold: admit(record, t)
