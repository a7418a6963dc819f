"""Severity levels: lower value means more severe."""

from enum import IntEnum


class Severity(IntEnum):
    CRIT = 0
    ERROR = 1
    WARN = 2
    INFO = 3
    DEBUG = 4

    @property
    def short_name(self) -> str:
        """Four-letter display name, e.g. 'eror' or 'dbug'."""
        return _SHORT_NAMES[self]

    @classmethod
    def from_name(cls, name: str) -> "Severity":
        """Look up a level by name (case-insensitive). Raises ValueError if unknown."""
        try:
            return _NAME_LOOKUP[name.strip().lower()]
        except (KeyError, AttributeError):
            raise ValueError(f"Unknown level: {name!r}") from None


_SHORT_NAMES = {
    Severity.CRIT: "crit",
    Severity.ERROR: "eror",
    Severity.WARN: "warn",
    Severity.INFO: "info",
    Severity.DEBUG: "dbug",
}

_NAME_LOOKUP = {
    "crit": Severity.CRIT,
    "error": Severity.ERROR,
    "eror": Severity.ERROR,
    "warn": Severity.WARN,
    "info": Severity.INFO,
    "debug": Severity.DEBUG,
    "dbug": Severity.DEBUG,
}

LEVEL_CHOICES = ("debug", "info", "warn", "error", "crit")
