"""Output formatters: colorized terminal lines and logfmt."""

import json
from datetime import datetime
from decimal import Decimal
from typing import IO, Any, Callable

from jsonlogfmt.config import FieldMapping
from jsonlogfmt.levels import Severity
from jsonlogfmt.mapper import Record

# ANSI color codes
COLORS = {
    Severity.CRIT: 35,   # magenta
    Severity.ERROR: 31,  # red
    Severity.WARN: 33,   # yellow
    Severity.INFO: 32,   # green
    Severity.DEBUG: 36,  # cyan
}
RESET = "\033[0m"

TERM_TIME_FORMAT = "%m-%d|%H:%M:%S"
# %Y is not zero-padded below year 1000 on every platform
LOGFMT_TIME_FORMAT = "-%m-%dT%H:%M:%S%z"
MSG_JUSTIFY = 40


def _compact_json(value: Any) -> str:
    """Compact JSON text for nested values, keeping Decimals exact."""
    if isinstance(value, dict):
        items = ",".join(
            f"{json.dumps(k, ensure_ascii=False)}:{_compact_json(v)}"
            for k, v in value.items()
        )
        return "{" + items + "}"
    if isinstance(value, list):
        return "[" + ",".join(_compact_json(v) for v in value) + "]"
    if isinstance(value, Decimal):
        return str(value)
    return json.dumps(value, ensure_ascii=False)


def escape_string(s: str) -> str:
    """Quote and escape ``s`` only if it has spaces, control chars, '=' or '"'."""
    if not any(c <= " " or c in '="' for c in s):
        return s
    escaped = (
        s.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def format_value(value: Any) -> str:
    """Render a decoded JSON value for a key=value pair."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Severity):
        return value.short_name
    if isinstance(value, (int, Decimal)):
        return str(value)
    if isinstance(value, datetime):
        return f"{value.year:04d}" + value.strftime(LOGFMT_TIME_FORMAT)
    if isinstance(value, str):
        return escape_string(value)
    return escape_string(_compact_json(value))


def _pairs(pairs, color: int | None) -> str:
    parts = []
    for key, value in pairs:
        if color:
            parts.append(f"\033[{color}m{key}{RESET}={format_value(value)}")
        else:
            parts.append(f"{key}={format_value(value)}")
    return " ".join(parts)


def format_terminal(record: Record, color: bool = True) -> str:
    """Return a human-friendly line: level, short timestamp, message, attributes."""
    lvl = record.severity.short_name.upper()
    ts = record.timestamp.strftime(TERM_TIME_FORMAT)
    code = COLORS[record.severity] if color else None

    if code:
        line = f"\033[{code}m{lvl}{RESET}[{ts}] {record.message} "
    else:
        line = f"[{lvl}] [{ts}] {record.message} "

    if not record.attributes:
        return line[:-1]
    if len(record.message) < MSG_JUSTIFY:
        line += " " * (MSG_JUSTIFY - len(record.message))

    return line + _pairs(record.attributes, code)


def format_logfmt(record: Record, mapping: FieldMapping) -> str:
    """Return a logfmt line, reserved fields first under their configured keys."""
    common = (
        (mapping.time_key, record.timestamp),
        (mapping.level_key, record.severity),
        (mapping.message_key, record.message),
    )
    return _pairs(common + record.attributes, None)


def _use_color(color: str, out: IO | None) -> bool:
    if color == "always":
        return True
    if color == "never":
        return False
    return _is_tty(out)


def _is_tty(out: IO | None) -> bool:
    try:
        return out is not None and out.isatty()
    except (AttributeError, ValueError):
        return False


def get_formatter(
    output_format: str = "auto",
    color: str = "auto",
    mapping: FieldMapping | None = None,
    out: IO | None = None,
) -> Callable[[Record], str]:
    """Factory that returns the right formatter for the output stream.

    ``auto`` picks the terminal format when ``out`` is a TTY and logfmt
    otherwise.
    """
    mapping = mapping or FieldMapping()
    if output_format == "auto":
        output_format = "terminal" if _is_tty(out) else "logfmt"

    if output_format == "logfmt":
        return lambda record: format_logfmt(record, mapping)

    use_color = _use_color(color, out)
    return lambda record: format_terminal(record, color=use_color)
