"""Runtime environments for the interpreter.

An Environment stores bindings of Symbols to evaluated values and supports
nested lexical scopes via an `outer` link. The root of every chain is a
Module, which additionally resolves names through the exported bindings of
the modules it imports.
"""

from __future__ import annotations

from typing import Optional

from geiser_stklos import SchemeValue
from geiser_stklos.errors import SchemeTypeError, UnboundVariable
from geiser_stklos.types.symbol import Symbol


class Environment:
    """Hierarchical mapping from Symbols to values."""

    __slots__ = ("vars", "outer")

    def __init__(self, outer: Optional[Environment] = None):
        self.vars: dict[Symbol, SchemeValue] = {}
        self.outer: Environment | None = outer

    @property
    def module(self) -> "Module":
        env = self
        while env.outer is not None:
            env = env.outer
        return env  # type: ignore[return-value]

    def define(self, name: Symbol, value: SchemeValue) -> None:
        """Bind `name` to `value` in this frame.

        Raises SchemeTypeError if `name` is not a Symbol.
        """
        if not isinstance(name, Symbol):
            raise SchemeTypeError(f"cannot define {name!r}: not a symbol")
        self.vars[name] = value

    def find(self, name: Symbol) -> Optional[Environment]:
        """Find the nearest environment in the chain that binds `name`."""
        env: Optional[Environment] = self
        while env is not None:
            if name in env.vars:
                return env
            if env.outer is None:
                return env.find_imported(name)
            env = env.outer
        return None

    def find_imported(self, name: Symbol) -> Optional[Environment]:
        return None

    def set(self, name: Symbol, value: SchemeValue) -> None:
        """Update an existing binding for `name` in the environment chain.

        Raises UnboundVariable if the symbol is not found.
        """
        env = self.find(name)
        if env is None:
            raise UnboundVariable(f"symbol `{name}' unbound")
        env.vars[name] = value

    def lookup(self, name: Symbol) -> SchemeValue:
        """Look up the value bound to `name`; raises UnboundVariable."""
        env = self.find(name)
        if env is None:
            raise UnboundVariable(f"symbol `{name}' unbound in module `{self.module.name}'")
        return env.vars[name]

    def lookup_or(self, name: Symbol, default: SchemeValue) -> SchemeValue:
        """Look up `name`, answering `default` instead of raising when unbound."""
        env = self.find(name)
        if env is None:
            return default
        return env.vars[name]

    def is_local(self, name: Symbol) -> bool:
        """True when `name` is bound by a lexical frame below the module."""
        env: Optional[Environment] = self
        while env is not None and env.outer is not None:
            if name in env.vars:
                return True
            env = env.outer
        return False

    def __repr__(self) -> str:
        names = " ".join(sym.id for sym in self.vars)
        return f"#[environment ({names})]"
