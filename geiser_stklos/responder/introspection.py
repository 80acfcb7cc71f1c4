"""Module and symbol enumeration for completion and export listings."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Callable, List

from geiser_stklos import SExpression, SchemeValue
from geiser_stklos.responder.envelope import target_module
from geiser_stklos.errors import ModuleError
from geiser_stklos.types.module import Module
from geiser_stklos.types.procedure import Procedure, Syntax
from geiser_stklos.types.symbol import Symbol


class Binding(enum.Enum):
    PROCEDURE = "procs"
    SYNTAX = "syntax"
    VARIABLE = "vars"


Classifier = Callable[[Module, Symbol], Binding]

_UNBOUND = object()


def classify_legacy(module: Module, name: Symbol) -> Binding:
    """Keywords have no value on older runtimes: unbound means syntax."""
    value = module.lookup_or(name, _UNBOUND)
    if value is _UNBOUND:
        return Binding.SYNTAX
    if isinstance(value, Procedure):
        return Binding.PROCEDURE
    return Binding.VARIABLE


def classify_modern(module: Module, name: Symbol) -> Binding:
    """Keywords are bound to syntax objects on newer runtimes."""
    value = module.lookup_or(name, _UNBOUND)
    if isinstance(value, Procedure):
        return Binding.PROCEDURE
    if isinstance(value, Syntax):
        return Binding.SYNTAX
    return Binding.VARIABLE


def classifier_for(interp) -> Classifier:
    return classify_modern if interp.macros_as_values else classify_legacy


@dataclass
class ModuleExports:
    procs: List[Symbol] = field(default_factory=list)
    syntax: List[Symbol] = field(default_factory=list)
    vars: List[Symbol] = field(default_factory=list)

    def add(self, name: Symbol, kind: Binding) -> None:
        getattr(self, kind.value).append(name)

    def to_sexp(self) -> SExpression:
        return [
            ["modules"],
            ["procs", *[[s] for s in self.procs]],
            ["syntax", *[[s] for s in self.syntax]],
            ["vars", *[[s] for s in self.vars]],
        ]


def module_exports(interp, classify: Classifier, name: SchemeValue) -> ModuleExports:
    """Sort the export list of module `name` into procedures, syntax and variables.

    An unknown module has no exports.
    """
    exports = ModuleExports()
    try:
        module = interp.find_module(name)
    except ModuleError:
        module = None
    if module is None:
        return exports
    for sym in module.exports:
        exports.add(sym, classify(module, sym))
    return exports


def completions(interp, prefix: str) -> List[str]:
    """Symbols visible in the current module whose names start with `prefix`."""
    names = {sym.id for sym in interp.current_module.visible_symbols()}
    return sorted(n for n in names if n.startswith(prefix))


def module_completions(interp, prefix: str) -> List[str]:
    return sorted(n for n in interp.modules.names() if n.startswith(prefix))


def lookup(interp, name: Symbol, module: SchemeValue = None):
    """The value bound to `name` and the module defining it, or None."""
    env = target_module(interp, module).find(name)
    if env is None:
        return None
    return env.vars[name], env.module
