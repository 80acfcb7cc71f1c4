"""External representations of runtime values.

`write_string` produces text the reader reads back to an equal datum for
every data type; `display_string` is the human form, with strings and
characters printed raw.
"""

from __future__ import annotations

from io import StringIO

from geiser_stklos import SchemeValue
from geiser_stklos.types.symbol import Symbol
from geiser_stklos.types.values import Char, Vector, MultipleValues

_CHAR_NAMES: dict[str, str] = {
    " ": "space",
    "\n": "newline",
    "\t": "tab",
    "\r": "return",
    "\0": "null",
    "\a": "alarm",
    "\b": "backspace",
    "\x7f": "delete",
    "\x1b": "escape",
}

_STRING_ESCAPES: dict[str, str] = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
}


def _escape(text: str) -> str:
    return "".join(_STRING_ESCAPES.get(ch, ch) for ch in text)


def _write(value: SchemeValue, buffer: StringIO, readable: bool) -> None:
    if value is True:
        buffer.write("#t")
    elif value is False:
        buffer.write("#f")
    elif isinstance(value, Char):
        if readable:
            buffer.write("#\\" + _CHAR_NAMES.get(str(value), str(value)))
        else:
            buffer.write(str(value))
    elif isinstance(value, str):
        if readable:
            buffer.write('"' + _escape(value) + '"')
        else:
            buffer.write(value)
    elif isinstance(value, Symbol):
        buffer.write(value.id)
    elif isinstance(value, float):
        if value != value:
            buffer.write("+nan.0")
        elif value in (float("inf"), float("-inf")):
            buffer.write("+inf.0" if value > 0 else "-inf.0")
        else:
            buffer.write(repr(value))
    elif isinstance(value, Vector):
        buffer.write("#(")
        _write_items(value, buffer, readable)
        buffer.write(")")
    elif isinstance(value, list):
        buffer.write("(")
        _write_items(value, buffer, readable)
        buffer.write(")")
    elif isinstance(value, tuple) and len(value) == 2:
        items, tail = value
        buffer.write("(")
        _write_items(items, buffer, readable)
        buffer.write(" . ")
        _write(tail, buffer, readable)
        buffer.write(")")
    elif isinstance(value, MultipleValues):
        _write_items(value.values, buffer, readable)
    else:
        buffer.write(repr(value))


def _write_items(items, buffer: StringIO, readable: bool) -> None:
    first = True
    for item in items:
        if not first:
            buffer.write(" ")
        _write(item, buffer, readable)
        first = False


def write_string(value: SchemeValue) -> str:
    with StringIO() as buffer:
        _write(value, buffer, True)
        return buffer.getvalue()


def display_string(value: SchemeValue) -> str:
    with StringIO() as buffer:
        _write(value, buffer, False)
        return buffer.getvalue()
