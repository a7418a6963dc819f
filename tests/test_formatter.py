"""Tests for jsonlogfmt/formatter.py"""

import io
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from jsonlogfmt.config import FieldMapping
from jsonlogfmt.decoder import JSONNumber
from jsonlogfmt.formatter import (
    COLORS,
    RESET,
    escape_string,
    format_logfmt,
    format_terminal,
    format_value,
    get_formatter,
)
from jsonlogfmt.levels import Severity
from jsonlogfmt.mapper import Record


class TTYStringIO(io.StringIO):
    def isatty(self):
        return True


def _record(severity=Severity.INFO, message="a", attributes=()):
    return Record(
        timestamp=datetime(2024, 1, 1, 0, 0, 0, tzinfo=timezone.utc),
        severity=severity,
        message=message,
        attributes=attributes,
    )


class TestEscapeString:
    def test_plain_word_unquoted(self):
        assert escape_string("hello") == "hello"

    def test_space_quoted(self):
        assert escape_string("hello world") == '"hello world"'

    def test_equals_and_quote(self):
        assert escape_string('a="b"') == '"a=\\"b\\""'

    def test_newline_escaped(self):
        assert escape_string("a\nb") == '"a\\nb"'

    def test_empty(self):
        assert escape_string("") == ""


class TestFormatValue:
    @pytest.mark.parametrize("value,expected", [
        (None, "null"),
        (True, "true"),
        (False, "false"),
        (42, "42"),
        (123456789012345678901234567890, "123456789012345678901234567890"),
        (Decimal("1.50"), "1.50"),
        ("x y", '"x y"'),
        (Severity.WARN, "warn"),
    ])
    def test_scalars(self, value, expected):
        assert format_value(value) == expected

    def test_nested_as_compact_json(self):
        assert format_value({"a": [1, Decimal("2.5")]}) == '{"a":[1,2.5]}'

    def test_nested_with_space_quoted(self):
        assert format_value(["x y"]) == '"[\\"x y\\"]"'

    def test_zero_time(self):
        assert format_value(Record().timestamp) == "0001-01-01T00:00:00+0000"


class TestFormatLogfmt:
    def test_reserved_fields_first(self):
        record = _record(attributes=(("k", "v"), ("n", 1)))
        assert format_logfmt(record, FieldMapping()) == (
            "t=2024-01-01T00:00:00+0000 lvl=info msg=a k=v n=1"
        )

    def test_uses_configured_keys(self):
        mapping = FieldMapping(time_key="ts", level_key="level", message_key="text")
        result = format_logfmt(_record(Severity.ERROR, "boom"), mapping)
        assert result == "ts=2024-01-01T00:00:00+0000 level=eror text=boom"

    def test_message_with_spaces(self):
        result = format_logfmt(_record(message="hello world"), FieldMapping())
        assert 'msg="hello world"' in result

    def test_default_record(self):
        assert format_logfmt(Record(), FieldMapping()) == (
            "t=0001-01-01T00:00:00+0000 lvl=info msg="
        )


class TestFormatTerminal:
    def test_plain_without_attributes(self):
        assert format_terminal(_record(), color=False) == "[INFO] [01-01|00:00:00] a"

    def test_plain_message_justified(self):
        record = _record(Severity.ERROR, "a", (("k", "v"),))
        assert format_terminal(record, color=False) == (
            "[EROR] [01-01|00:00:00] a " + " " * 39 + "k=v"
        )

    def test_long_message_not_padded(self):
        msg = "m" * 50
        record = _record(message=msg, attributes=(("k", "v"),))
        assert format_terminal(record, color=False).endswith(msg + " k=v")

    def test_colored_level_and_keys(self):
        record = _record(Severity.ERROR, "a", (("k", "v"),))
        result = format_terminal(record, color=True)
        code = COLORS[Severity.ERROR]
        assert result.startswith(f"\033[{code}mEROR{RESET}[01-01|00:00:00] a")
        assert result.endswith(f"\033[{code}mk{RESET}=v")

    @pytest.mark.parametrize("severity", list(Severity))
    def test_every_level_has_color(self, severity):
        result = format_terminal(_record(severity), color=True)
        assert f"\033[{COLORS[severity]}m" in result


class TestGetFormatter:
    def test_auto_non_tty_is_logfmt(self):
        fmt = get_formatter(out=io.StringIO())
        assert fmt(_record()).startswith("t=")

    def test_auto_tty_is_colored_terminal(self):
        fmt = get_formatter(out=TTYStringIO())
        assert fmt(_record()).startswith(f"\033[{COLORS[Severity.INFO]}mINFO")

    def test_terminal_never_color(self):
        fmt = get_formatter("terminal", "never", out=TTYStringIO())
        assert "\033[" not in fmt(_record())

    def test_terminal_always_color(self):
        fmt = get_formatter("terminal", "always", out=io.StringIO())
        assert "\033[" in fmt(_record())

    def test_terminal_auto_color_follows_tty(self):
        fmt = get_formatter("terminal", "auto", out=io.StringIO())
        assert fmt(_record()) == "[INFO] [01-01|00:00:00] a"

    def test_logfmt_uses_mapping(self):
        mapping = FieldMapping(time_key="when")
        fmt = get_formatter("logfmt", mapping=mapping, out=TTYStringIO())
        assert fmt(_record()).startswith("when=")


class TestDecodedNumbers:
    def test_scalar_keeps_literal(self):
        assert format_value(JSONNumber("1e2")) == "1e2"

    def test_nested_keeps_literal(self):
        assert format_value({"n": JSONNumber("1E400")}) == '{"n":1E400}'
