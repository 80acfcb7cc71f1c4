"""Signatures, documentation and autodoc entries for bound names."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from geiser_stklos import SExpression, SchemeValue
from geiser_stklos.reader.printer import write_string
from geiser_stklos.responder.introspection import lookup
from geiser_stklos.types.bind import split_formals
from geiser_stklos.types.procedure import Closure, Procedure
from geiser_stklos.types.symbol import Symbol

logger = logging.getLogger(__name__)

REST_MARKER = "..."


def normalize_formals(formals: SExpression) -> Tuple[List[Symbol], bool]:
    """Required parameter names and whether a rest parameter follows.

    `(a b . c)` gives `([a, b], True)`; `formals` itself is left untouched.
    """
    required, rest = split_formals(formals)
    return list(required), rest is not None


@dataclass(frozen=True)
class Signature:
    name: Symbol
    required: Tuple[Symbol, ...]
    has_rest: bool
    module: str

    @classmethod
    def of_closure(cls, name: Symbol, proc: Closure, module: str) -> Signature:
        required, has_rest = normalize_formals(proc.formals)
        return cls(name, tuple(required), has_rest, module)

    def args_sexp(self) -> SExpression:
        optional = ["optional", REST_MARKER] if self.has_rest else ["optional"]
        return ["args", [["required", *self.required], optional, ["key"]]]

    def to_sexp(self) -> SExpression:
        return [self.name, self.args_sexp(), ["module", Symbol(self.module)]]


def _entry(key: str, value: SExpression) -> SExpression:
    """`(key . value)`, kept a proper list when value is one."""
    if isinstance(value, list):
        return [key, *value]
    return [key], value


def _as_symbol(name: SchemeValue) -> Optional[Symbol]:
    if isinstance(name, Symbol):
        return name
    if isinstance(name, str) and name:
        return Symbol(name)
    return None


def symbol_documentation(interp, name: SchemeValue, module: SchemeValue = None) -> SExpression:
    """Signature and docstring of `name`, or "" when it is unbound."""
    sym = _as_symbol(name)
    found = lookup(interp, sym, module) if sym is not None else None
    if found is None:
        return ""
    value, where = found
    if isinstance(value, Procedure):
        if isinstance(value, Closure):
            signature = Signature.of_closure(sym, value, where.name).to_sexp()
        else:
            signature = ""
        docstring = f"A procedure in module {where.name}.\n{value.doc}"
    else:
        signature = [sym, Signature(sym, (), False, where.name).args_sexp()]
        docstring = f"An object in module {where.name}.\n\nValue:\n{write_string(value)}"
    return [_entry("signature", signature), _entry("docstring", docstring)]


def autodoc(interp, ids: SchemeValue, module: SchemeValue = None) -> List[SExpression]:
    """One entry per bound id, in order; unbound ids are left out."""
    if not isinstance(ids, list):
        ids = [ids]
    entries: List[SExpression] = []
    for name in ids:
        sym = _as_symbol(name)
        found = lookup(interp, sym, module) if sym is not None else None
        if found is None:
            continue
        value, where = found
        if isinstance(value, Closure):
            entries.append(Signature.of_closure(sym, value, where.name).to_sexp())
        elif isinstance(value, Procedure):
            entries.append([sym, ["module", Symbol(where.name)]])
        else:
            entries.append([sym, _entry("value", write_string(value)), ["module", Symbol(where.name)]])
    return entries


def macroexpand(interp, form: SExpression, expand_all: bool = False) -> str:
    """Printed expansion of `form` in the current module."""
    return write_string(interp.macroexpand(form, interp.current_module, expand_all=expand_all))
