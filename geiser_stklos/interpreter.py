from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

from geiser_stklos import SExpression, SchemeValue
from geiser_stklos.builtins import BUILTINS
from geiser_stklos.config import get_runtime_version, parse_version
from geiser_stklos.errors import LoadError, ModuleError, SchemeTypeError
from geiser_stklos.evaluation.evaluator import evaluate
from geiser_stklos.evaluation.special_forms import SPECIAL_FORMS
from geiser_stklos.reader.parser import read_all
from geiser_stklos.types.bind import bind_arguments
from geiser_stklos.types.environment import Environment
from geiser_stklos.types.module import Module, ModuleRegistry
from geiser_stklos.types.procedure import Closure, Macro, Primitive, SpecialForm, Syntax
from geiser_stklos.types.symbol import Symbol
from geiser_stklos.types.tail_call import TailCall
from geiser_stklos.types.values import OutputPort, Void

logger = logging.getLogger(__name__)

# Runtimes from this version on bind macros as first-class values.
MACRO_OBJECTS_SINCE = (1, 70)

SCHEME_MODULE = "SCHEME"
DEFAULT_MODULE = "stklos"

QUOTE = Symbol("quote")
QUASIQUOTE = Symbol("quasiquote")


class Interpreter:
    """
    A small STklos-flavoured Scheme runtime.

    Owns the module registry, the current module and the standard ports.
    Primitives and special forms live in the SCHEME module, which every
    other module imports; user code starts in `stklos`.

    Where syntactic keywords are kept depends on the version: older
    runtimes hold them in a per-module macro table, newer ones bind them as
    ordinary values (see `macros_as_values`).
    """

    def __init__(self, version: str | None = None, *, stdout=None, stderr=None):
        self.version: str = version or get_runtime_version()
        self.macros_as_values: bool = parse_version(self.version) >= MACRO_OBJECTS_SINCE

        self.output_port = OutputPort("stdout", stdout if stdout is not None else sys.stdout)
        self.error_port = OutputPort("stderr", stderr if stderr is not None else sys.stderr)

        self.modules = ModuleRegistry(self)
        self.scheme_module: Module = self.modules.ensure(SCHEME_MODULE)
        self._install_scheme()
        self.default_module: Module = self.make_module(DEFAULT_MODULE)
        self.current_module: Module = self.default_module

    def _install_scheme(self) -> None:
        scheme = self.scheme_module
        for name, handler in SPECIAL_FORMS.items():
            self.define_syntax(scheme, Symbol(name), SpecialForm(name, handler))
        for name, fn in BUILTINS.items():
            scheme.define(Symbol(name), Primitive(name, fn))
        scheme.export(*scheme.vars)
        scheme.export(*scheme.macros)

    # -------------------------------
    # Syntax
    # -------------------------------
    def define_syntax(self, module: Module, name: Symbol, syntax: Syntax) -> None:
        if self.macros_as_values:
            module.define(name, syntax)
        else:
            module.macros[name] = syntax

    def resolve_syntax(self, name: Symbol, env: Environment) -> Optional[Syntax]:
        """The keyword `name` denotes at module level in `env`, if any."""
        module = env.module
        if self.macros_as_values:
            value = module.lookup_or(name, None)
            return value if isinstance(value, Syntax) else None
        return module.find_macro(name)

    def macroexpand(self, form: SExpression, env: Environment, expand_all: bool = False) -> SExpression:
        """Expand the head macro of `form` once, or everything when `expand_all`.

        Full expansion repeats at the head until no macro is left, then
        descends into subforms, leaving quote and quasiquote templates alone.
        """
        if not expand_all:
            return self._expand_1(form, env)[0]
        expanded, changed = self._expand_1(form, env)
        while changed:
            expanded, changed = self._expand_1(expanded, env)
        if isinstance(expanded, tuple):
            items, tail = expanded
            return [self.macroexpand(x, env, True) for x in items], tail
        if isinstance(expanded, list) and expanded:
            if expanded[0] in (QUOTE, QUASIQUOTE):
                return expanded
            return [self.macroexpand(x, env, True) for x in expanded]
        return expanded

    def _expand_1(self, form: SExpression, env: Environment) -> tuple[SExpression, bool]:
        if not isinstance(form, list) or not form or not isinstance(form[0], Symbol):
            return form, False
        if env.is_local(form[0]):
            return form, False
        syntax = self.resolve_syntax(form[0], env)
        if isinstance(syntax, Macro):
            return self.apply(syntax.transformer, form[1:]), True
        return form, False

    # -------------------------------
    # Modules
    # -------------------------------
    def make_module(self, name: str) -> Module:
        """Find or create module `name`; new modules import SCHEME."""
        exists = name in self.modules
        module = self.modules.ensure(name)
        if not exists:
            logger.debug("created module %s", name)
            module.import_module(self.scheme_module)
        return module

    @staticmethod
    def module_name_of(expr: SchemeValue) -> str:
        """Canonical registry name for `stklos`, "stklos", `(srfi 1)` or a Module."""
        if isinstance(expr, Module):
            return expr.name
        if isinstance(expr, Symbol):
            return expr.id
        if isinstance(expr, str):
            return expr
        if isinstance(expr, list) and expr:
            return "/".join(str(part) for part in expr)
        raise ModuleError(f"bad module name {expr!r}")

    def find_module(self, name: SchemeValue) -> Optional[Module]:
        if isinstance(name, Module):
            return name
        return self.modules.find(self.module_name_of(name))

    def resolve_module(self, name: SchemeValue) -> Module:
        module = self.find_module(name)
        if module is None:
            raise ModuleError(f"module `{self.module_name_of(name)}' does not exist")
        return module

    # -------------------------------
    # Evaluation
    # -------------------------------
    def eval_form(self, form: SExpression, module: Module | None = None) -> SchemeValue:
        """Evaluate one datum in `module`, or in the current module."""
        return evaluate(form, module if module is not None else self.current_module, self)

    def eval(self, code: str, module: Module | None = None) -> SchemeValue:
        """Read and evaluate every form in `code`; answer the last value."""
        result: SchemeValue = Void
        for form in read_all(code):
            result = self.eval_form(form, module)
        return result

    def apply(self, proc: SchemeValue, args: list[SchemeValue]) -> SchemeValue:
        if isinstance(proc, Closure):
            env = bind_arguments(proc.name, proc.formals, args, proc.env)
            return evaluate(proc.body, env, self)
        if isinstance(proc, Primitive):
            result = proc(self.current_module, args)
            if isinstance(result, TailCall):
                return evaluate(result.expr, result.env, self)
            return result
        raise SchemeTypeError(f"bad procedure: {proc!r}")

    def load(self, path: str, module: Module | None = None) -> None:
        """Evaluate every form of file `path`.

        Forms run in the current module (or `module`); a `select-module`
        inside the file holds until the end of the file only.
        """
        try:
            with open(path, encoding="utf-8") as fh:
                source = fh.read()
        except OSError as e:
            raise LoadError(f"cannot load `{path}': {e.strerror}") from e
        logger.debug("loading %s", path)
        previous = self.current_module
        if module is not None:
            self.current_module = module
        try:
            for form in read_all(source):
                evaluate(form, self.current_module, self)
        finally:
            self.current_module = previous

    @contextmanager
    def capture_output(self, buffer) -> Iterator[None]:
        """Send standard and error output to `buffer` for the duration."""
        saved = self.output_port.stream, self.error_port.stream
        self.output_port.stream = buffer
        self.error_port.stream = buffer
        try:
            yield
        finally:
            self.output_port.stream, self.error_port.stream = saved
