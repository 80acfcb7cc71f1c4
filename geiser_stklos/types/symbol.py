"""Scheme symbols.

Every name has exactly one Symbol: the constructor answers the entry of a
process-wide table, so `eq?` on symbols is an identity test and symbols
read in one request compare equal to those read in another.
"""

from __future__ import annotations

import sys
from typing import Dict

_TABLE: Dict[str, "Symbol"] = {}


class Symbol:
    __slots__ = ("id",)

    def __new__(cls, name: str) -> Symbol:
        sym = _TABLE.get(name)
        if sym is None:
            sym = object.__new__(cls)
            sym.id = sys.intern(name)
            _TABLE[sym.id] = sym
        return sym

    def __reduce__(self):
        # copies and unpickled symbols go back through the table
        return (Symbol, (self.id,))

    def __repr__(self) -> str:
        return self.id if self.id else "||"

    def __str__(self) -> str:
        return self.id
