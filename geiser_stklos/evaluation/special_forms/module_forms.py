"""Module special forms: define-module, select-module, export, import and
define-library.
"""

from __future__ import annotations

from typing import List

from geiser_stklos import SExpression, SchemeValue
from geiser_stklos.errors import ArityError, ModuleError, SchemeSyntaxError
from geiser_stklos.evaluation.evaluator import evaluate
from geiser_stklos.types.environment import Environment
from geiser_stklos.types.module import Module
from geiser_stklos.types.symbol import Symbol
from geiser_stklos.types.values import Void

EXPORT = Symbol("export")
IMPORT = Symbol("import")
BEGIN = Symbol("begin")
INCLUDE = Symbol("include")

# R7RS library names standing for the built-in SCHEME module.
_BUILTIN_LIBRARY_ROOTS = ("scheme", "srfi", "stklos")


def _symbols(items: List[SExpression], what: str) -> List[Symbol]:
    for s in items:
        if not isinstance(s, Symbol):
            raise SchemeSyntaxError(f"{what} expects symbols, got {s!r}")
    return list(items)


def _run_in(module: Module, forms: List[SExpression], interp) -> None:
    previous = interp.current_module
    interp.current_module = module
    try:
        for form in forms:
            evaluate(form, module, interp)
    finally:
        interp.current_module = previous


def define_module_form(tail: List[SExpression], env: Environment, interp) -> SchemeValue:
    """(define-module name body...)"""
    if not tail:
        raise ArityError("define-module requires a name")
    name_expr, *body = tail
    module = interp.make_module(interp.module_name_of(name_expr))
    _run_in(module, body, interp)
    return Void


def select_module_form(tail: List[SExpression], env: Environment, interp) -> SchemeValue:
    """(select-module name): later top-level forms evaluate in that module."""
    if len(tail) != 1:
        raise ArityError("select-module requires exactly 1 argument")
    name = interp.module_name_of(tail[0])
    module = interp.modules.find(name)
    if module is None:
        raise ModuleError(f"module `{name}' does not exist")
    interp.current_module = module
    return Void


def export_form(tail: List[SExpression], env: Environment, interp) -> SchemeValue:
    env.module.export(*_symbols(tail, "export"))
    return Void


def _import_into(module: Module, specs: List[SExpression], interp) -> None:
    for spec in specs:
        name = interp.module_name_of(spec)
        found = interp.modules.find(name)
        if found is None:
            if isinstance(spec, list) and spec and str(spec[0]) in _BUILTIN_LIBRARY_ROOTS:
                continue
            raise ModuleError(f"cannot import `{name}': no such module")
        module.import_module(found)


def import_form(tail: List[SExpression], env: Environment, interp) -> SchemeValue:
    _import_into(env.module, tail, interp)
    return Void


def define_library_form(tail: List[SExpression], env: Environment, interp) -> SchemeValue:
    """(define-library (name ...) (export ...) (import ...) (begin ...))"""
    if not tail:
        raise ArityError("define-library requires a name")
    name_expr, *decls = tail
    module = interp.make_module(interp.module_name_of(name_expr))
    for decl in decls:
        if not isinstance(decl, list) or not decl:
            raise SchemeSyntaxError("bad library declaration")
        kind, *items = decl
        if kind == EXPORT:
            module.export(*_symbols(items, "export"))
        elif kind == IMPORT:
            _import_into(module, items, interp)
        elif kind == BEGIN:
            _run_in(module, items, interp)
        elif kind == INCLUDE:
            for filename in items:
                interp.load(filename, module)
        else:
            raise SchemeSyntaxError(f"unknown library declaration {kind}")
    return Void
