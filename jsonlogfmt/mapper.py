"""Map one decoded JSON object onto a normalized Record."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from jsonlogfmt.config import DEFAULT_TIME_LAYOUT, FieldMapping
from jsonlogfmt.levels import Severity

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

INVALID_LEVEL = "invalid-level"
INVALID_MESSAGE = "invalid-message"
INVALID_TIME = "invalid-time"

# fromisoformat() only takes up to microseconds
_FRACTION = re.compile(r"(\.\d{6})\d+")
_RFC3339 = re.compile(
    r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})",
    re.ASCII,
)


@dataclass(frozen=True)
class FieldWarning:
    kind: str
    key: str
    raw_value: Any
    raw_type: str
    reason: str


@dataclass(frozen=True)
class Record:
    timestamp: datetime = ZERO_TIME
    severity: Severity = Severity.INFO
    message: str = ""
    attributes: tuple[tuple[str, Any], ...] = field(default_factory=tuple)


def json_type_name(value: Any) -> str:
    """Name of the JSON type a decoded value came from."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, Decimal, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def parse_time(value: str, layout: str = DEFAULT_TIME_LAYOUT) -> datetime:
    """Parse a timestamp string. Raises ValueError when it doesn't match.

    The default layout is strict RFC 3339: date, 'T', time, optional
    fractional seconds of any length and a 'Z' or '+hh:mm' offset. Any other
    layout is a strptime format, and its results without an offset are
    taken as UTC.
    """
    if layout.lower() == DEFAULT_TIME_LAYOUT:
        if not _RFC3339.fullmatch(value):
            raise ValueError(f"{value!r} is not an RFC 3339 timestamp")
        text = value[:-1] + "+00:00" if value.endswith("Z") else value
        return datetime.fromisoformat(_FRACTION.sub(r"\1", text))

    ts = datetime.strptime(value, layout)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _warning(kind: str, key: str, value: Any, reason: str) -> FieldWarning:
    return FieldWarning(
        kind=kind,
        key=key,
        raw_value=value,
        raw_type=json_type_name(value),
        reason=reason,
    )


def _map_level(key: str, value: Any) -> tuple[Severity, FieldWarning | None]:
    if isinstance(value, bool) or not isinstance(value, (int, Decimal)):
        return Severity.INFO, _warning(
            INVALID_LEVEL, key, value, "level key didn't contain a number"
        )
    if not isinstance(value, int):
        return Severity.INFO, _warning(
            INVALID_LEVEL, key, value, "level number is not an integer"
        )
    if not Severity.CRIT <= value <= Severity.DEBUG:
        return Severity.INFO, _warning(
            INVALID_LEVEL, key, value,
            f"level number out of range {int(Severity.CRIT)}-{int(Severity.DEBUG)}",
        )
    return Severity(value), None


def map_event(
    event: dict[str, Any],
    mapping: FieldMapping,
    time_layout: str = DEFAULT_TIME_LAYOUT,
) -> tuple[Record, list[FieldWarning]]:
    """Split an event into timestamp, level, message and remaining attributes.

    Bad values for the three reserved keys never fail the mapping: each one
    adds a FieldWarning and the field keeps its default. Every other key is
    copied into attributes in event order.
    """
    timestamp = ZERO_TIME
    severity = Severity.INFO
    message = ""
    attributes = []
    warnings = []

    for key, value in event.items():
        if key == mapping.level_key:
            severity, warning = _map_level(key, value)
            if warning:
                warnings.append(warning)

        elif key == mapping.message_key:
            if isinstance(value, str):
                message = value
            else:
                warnings.append(_warning(
                    INVALID_MESSAGE, key, value, "message key didn't contain a string"
                ))

        elif key == mapping.time_key:
            if not isinstance(value, str):
                warnings.append(_warning(
                    INVALID_TIME, key, value, "expected a string under the time key"
                ))
                continue
            try:
                timestamp = parse_time(value, time_layout)
            except ValueError as exc:
                warnings.append(_warning(
                    INVALID_TIME, key, value, f"couldn't parse time: {exc}"
                ))

        else:
            attributes.append((key, value))

    record = Record(
        timestamp=timestamp,
        severity=severity,
        message=message,
        attributes=tuple(attributes),
    )
    return record, warnings
