"""Runtime value types that have no direct Python counterpart."""

from __future__ import annotations

from typing import Iterable

from geiser_stklos import SchemeValue


class VoidType:
    """The unspecified value returned by define, set!, display and friends."""

    _instance: VoidType | None = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "#void"


Void = VoidType()


class MultipleValues:
    """Result of `(values ...)` with zero or two-plus values."""

    __slots__ = ("values",)

    def __init__(self, values: Iterable[SchemeValue]):
        self.values: list[SchemeValue] = list(values)

    def __repr__(self):
        return f"MultipleValues({self.values!r})"

    def __eq__(self, other):
        return isinstance(other, MultipleValues) and self.values == other.values


class Char(str):
    """A character; a str subclass so it prints differently from strings."""

    __slots__ = ()

    def __repr__(self):
        return f"Char({str.__repr__(self)})"


class Vector(list):
    """A Scheme vector; distinct from a proper list only in how it prints."""

    __slots__ = ()


def value_list(value: SchemeValue) -> list[SchemeValue]:
    """Spread an evaluation result into the list of values it denotes.

    Void and `(values)` denote no value at all.
    """
    if isinstance(value, MultipleValues):
        return list(value.values)
    if value is Void:
        return []
    return [value]


class OutputPort:
    """A textual output port; `stream` is swapped while output is captured."""

    __slots__ = ("name", "stream")

    def __init__(self, name: str, stream):
        self.name = name
        self.stream = stream

    def write(self, text: str) -> None:
        self.stream.write(text)

    def flush(self) -> None:
        flush = getattr(self.stream, "flush", None)
        if flush is not None:
            flush()

    def __repr__(self):
        return f"#[output-port {self.name}]"
