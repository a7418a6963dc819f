"""Incremental decoder for a stream of concatenated JSON objects.

Input is pulled one line at a time, so an object is yielded as soon as the
line that completes it has been read. Several objects may share a line and a
single object may span many lines. Integers stay exact (Python ints) and
other numbers become JSONNumber, never float.
"""

import json
import logging
from decimal import Decimal
from typing import IO, Any, Iterator

logger = logging.getLogger(__name__)

_WHITESPACE = " \t\n\r"


class DecodeError(ValueError):
    """Raised when the input stream holds malformed JSON."""

    def __init__(self, msg: str, offset: int):
        super().__init__(f"{msg} (at character {offset})")
        self.msg = msg
        self.offset = offset


class JSONNumber(Decimal):
    """Decimal that renders as the literal it was decoded from."""

    def __new__(cls, text: str):
        number = super().__new__(cls, text)
        number.text = text
        return number

    def __str__(self):
        return self.text


def _parse_int(text: str) -> int | JSONNumber:
    try:
        return int(text)
    except ValueError:
        # past the interpreter's int/str digit limit
        return JSONNumber(text)


def _reject_constant(name: str):
    raise ValueError(f"non-standard JSON constant {name}")


class StreamDecoder:
    """Iterate over the JSON objects in ``stream``.

    ``stream`` may be a text or a binary file object; binary input must be
    UTF-8. Iteration stops cleanly at end of input and raises DecodeError on
    the first malformed value.
    """

    def __init__(self, stream: IO):
        self._stream = stream
        self._buffer = ""
        self._pos = 0
        self._consumed = 0
        self._eof = False
        # bracket nesting of an unfinished value, tracked across lines
        self._depth = 0
        self._in_string = False
        self._escape = False
        self._decoder = json.JSONDecoder(
            parse_float=JSONNumber,
            parse_int=_parse_int,
            parse_constant=_reject_constant,
        )

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return self

    def __next__(self) -> dict[str, Any]:
        while True:
            self._skip_whitespace()
            if self._pos >= len(self._buffer):
                if self._eof:
                    raise StopIteration
                self._fill()
                continue

            # An unfinished value can't complete until its brackets close.
            if self._depth > 0 and not self._eof:
                self._fill()
                continue

            try:
                value, end = self._decoder.raw_decode(self._buffer, self._pos)
            except json.JSONDecodeError as exc:
                if self._eof or exc.pos < len(self._buffer.rstrip(_WHITESPACE)):
                    raise DecodeError(exc.msg, self._consumed + exc.pos) from None
                self._start_scan()
                self._fill()
                continue
            except ValueError as exc:
                raise DecodeError(str(exc), self._consumed + self._pos) from None
            except RecursionError:
                raise DecodeError("nesting too deep", self._consumed + self._pos) from None

            # A number or literal touching the end of the buffer may continue
            # in the next chunk of input.
            if end >= len(self._buffer) and not self._eof:
                self._fill()
                continue

            self._depth = 0
            start = self._pos
            self._pos = end
            if not isinstance(value, dict):
                raise DecodeError(
                    f"expected a JSON object, got {type(value).__name__}",
                    self._consumed + start,
                )
            return value

    def _skip_whitespace(self) -> None:
        buf = self._buffer
        pos = self._pos
        while pos < len(buf) and buf[pos] in _WHITESPACE:
            pos += 1
        self._pos = pos

    def _start_scan(self) -> None:
        """Count the open brackets of the unfinished value at the buffer position."""
        self._depth = 0
        self._in_string = False
        self._escape = False
        self._scan(self._buffer[self._pos:])

    def _scan(self, text: str) -> None:
        depth = self._depth
        in_string = self._in_string
        escape = self._escape
        for c in text:
            if in_string:
                if escape:
                    escape = False
                elif c == "\\":
                    escape = True
                elif c == '"':
                    in_string = False
            elif c == '"':
                in_string = True
            elif c in "{[":
                depth += 1
            elif c in "}]":
                depth -= 1
        self._depth = depth
        self._in_string = in_string
        self._escape = escape

    def _fill(self) -> None:
        """Read one more line of input, dropping the already-decoded prefix."""
        if self._pos:
            self._consumed += self._pos
            self._buffer = self._buffer[self._pos:]
            self._pos = 0

        line = self._stream.readline()
        if not line:
            self._eof = True
            logger.debug("End of input after %d characters",
                         self._consumed + len(self._buffer))
            return
        if isinstance(line, bytes):
            try:
                line = line.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise DecodeError(
                    f"invalid UTF-8 in input: {exc.reason}",
                    self._consumed + len(self._buffer),
                ) from None
        if self._depth > 0:
            self._scan(line)
        self._buffer += line
