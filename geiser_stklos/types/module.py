"""Modules and the per-interpreter module registry."""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional

from geiser_stklos import SchemeValue
from geiser_stklos.types.environment import Environment
from geiser_stklos.types.procedure import Syntax
from geiser_stklos.types.symbol import Symbol


class Module(Environment):
    """A top-level environment with an ordered export list and imports.

    `macros` holds syntactic keywords for runtimes that keep them out of
    the ordinary bindings (see Interpreter.macros_as_values).
    """

    __slots__ = ("name", "exports", "imports", "macros", "interp")

    def __init__(self, name: str, interp=None):
        super().__init__(None)
        self.name = name
        self.interp = interp
        self.exports: List[Symbol] = []
        self.imports: List[Module] = []
        self.macros: Dict[Symbol, Syntax] = {}

    def export(self, *symbols: Symbol) -> None:
        for s in symbols:
            if s not in self.exports:
                self.exports.append(s)

    def import_module(self, other: Module) -> None:
        if other is not self and other not in self.imports:
            self.imports.append(other)

    def find_imported(self, name: Symbol) -> Optional[Environment]:
        for mod in self.imports:
            if name in mod.exports:
                env = mod.find(name)
                if env is not None:
                    return env
        return None

    def find_macro(self, name: Symbol) -> Optional[Syntax]:
        """Resolve a keyword from the macro table, own table first."""
        if name in self.macros:
            return self.macros[name]
        for mod in self.imports:
            if name in mod.exports:
                found = mod.find_macro(name)
                if found is not None:
                    return found
        return None

    def visible_symbols(self) -> Iterator[Symbol]:
        """Every symbol usable unqualified inside this module."""
        seen: set[Symbol] = set()
        for sym in list(self.vars) + list(self.macros):
            if sym not in seen:
                seen.add(sym)
                yield sym
        for mod in self.imports:
            for sym in mod.exports:
                if sym not in seen:
                    seen.add(sym)
                    yield sym

    def __repr__(self) -> str:
        return f"#[module {self.name}]"


class ModuleRegistry:
    """Name -> Module table, in creation order."""

    def __init__(self, interp=None):
        self.interp = interp
        self._modules: Dict[str, Module] = {}

    def find(self, name: str) -> Optional[Module]:
        return self._modules.get(name)

    def ensure(self, name: str) -> Module:
        mod = self._modules.get(name)
        if mod is None:
            mod = Module(name, self.interp)
            self._modules[name] = mod
        return mod

    def names(self) -> List[str]:
        return list(self._modules)

    def __iter__(self) -> Iterator[Module]:
        return iter(list(self._modules.values()))

    def __contains__(self, name: SchemeValue) -> bool:
        return name in self._modules
