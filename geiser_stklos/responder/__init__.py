"""The `geiser:*` procedures the editor calls into.

`install` binds them in the SCHEME module so every module sees them. All of
them answer plain Scheme data; the REPL prints that as the reply.
"""

from __future__ import annotations

import logging

from geiser_stklos import SchemeValue
from geiser_stklos.builtins import check_arity
from geiser_stklos.errors import SchemeError, SchemeTypeError
from geiser_stklos.responder import introspection, loadpath, signature
from geiser_stklos.responder.context import ResponderContext
from geiser_stklos.responder.envelope import Envelope, ErrorReply, capture, eval_in
from geiser_stklos.types.environment import Environment
from geiser_stklos.types.procedure import Primitive
from geiser_stklos.types.symbol import Symbol
from geiser_stklos.types.values import Char, Void

logger = logging.getLogger(__name__)


def _string(name: str, value: SchemeValue) -> str:
    if not isinstance(value, str) or isinstance(value, Char):
        raise SchemeTypeError(f"{name}: bad string {value!r}")
    return value


class Responder:
    """Answers editor requests against one interpreter and one context."""

    def __init__(self, interp, context: ResponderContext):
        self.interp = interp
        self.context = context
        self.classify = introspection.classifier_for(interp)
        logger.debug(
            "responder for version %s, %s classification",
            interp.version,
            "modern" if interp.macros_as_values else "legacy",
        )

    def eval(self, env: Environment, args: list[SchemeValue]) -> SchemeValue:
        """(geiser:eval module form) - evaluate form in module, capturing output."""
        check_arity("geiser:eval", args, 2, 2)
        return eval_in(self.interp, args[0], args[1]).to_sexp()

    def load_file(self, env: Environment, args: list[SchemeValue]) -> SchemeValue:
        """(geiser:load-file filename) - load filename, searching the load path."""
        check_arity("geiser:load-file", args, 1, 1)
        filename = _string("geiser:load-file", args[0])
        path = loadpath.resolve(self.context, filename)
        if path is None:
            return ErrorReply(f"cannot find `{filename}' in the load path").to_sexp()

        def run():
            self.interp.load(path)
            return Void

        return capture(self.interp, run).to_sexp()

    def add_to_load_path(self, env: Environment, args: list[SchemeValue]) -> SchemeValue:
        """(geiser:add-to-load-path dir) - put dir first on the load path."""
        check_arity("geiser:add-to-load-path", args, 1, 1)
        path = _string("geiser:add-to-load-path", args[0])
        return capture(self.interp, lambda: loadpath.add_path(self.context, path)).to_sexp()

    def no_values(self, env: Environment, args: list[SchemeValue]) -> SchemeValue:
        """(geiser:no-values) - an empty reply for unsupported requests."""
        return Envelope([""], "").to_sexp()

    def completions(self, env: Environment, args: list[SchemeValue]) -> SchemeValue:
        """(geiser:completions prefix) - symbols of the current module starting with prefix."""
        check_arity("geiser:completions", args, 1, 1)
        return introspection.completions(self.interp, _string("geiser:completions", args[0]))

    def module_completions(self, env: Environment, args: list[SchemeValue]) -> SchemeValue:
        """(geiser:module-completions prefix) - module names starting with prefix."""
        check_arity("geiser:module-completions", args, 1, 1)
        return introspection.module_completions(self.interp, _string("geiser:module-completions", args[0]))

    def module_exports(self, env: Environment, args: list[SchemeValue]) -> SchemeValue:
        """(geiser:module-exports module) - exports sorted into procs, syntax and vars."""
        check_arity("geiser:module-exports", args, 1, 1)
        return introspection.module_exports(self.interp, self.classify, args[0]).to_sexp()

    def autodoc(self, env: Environment, args: list[SchemeValue]) -> SchemeValue:
        """(geiser:autodoc ids [module]) - signatures and values of ids."""
        check_arity("geiser:autodoc", args, 1, 2)
        return signature.autodoc(self.interp, args[0], args[1] if len(args) > 1 else None)

    def symbol_documentation(self, env: Environment, args: list[SchemeValue]) -> SchemeValue:
        """(geiser:symbol-documentation name [module]) - signature and docstring of name."""
        check_arity("geiser:symbol-documentation", args, 1, 2)
        return signature.symbol_documentation(self.interp, args[0], args[1] if len(args) > 1 else None)

    def macroexpand(self, env: Environment, args: list[SchemeValue]) -> SchemeValue:
        """(geiser:macroexpand form [all]) - printed expansion of form."""
        check_arity("geiser:macroexpand", args, 1, 2)
        expand_all = len(args) > 1 and args[1] is not False
        try:
            return signature.macroexpand(self.interp, args[0], expand_all)
        except SchemeError as e:
            logger.debug("macroexpand failed: %s", e)
            return ErrorReply(str(e)).to_sexp()

    def start_logging(self, env: Environment, args: list[SchemeValue]) -> SchemeValue:
        """(geiser:start-logging filename) - duplicate every exchange to filename."""
        check_arity("geiser:start-logging", args, 1, 1)
        self.context.start_logging(_string("geiser:start-logging", args[0]))
        return True

    def procedures(self) -> dict:
        return {
            "geiser:eval": self.eval,
            "geiser:load-file": self.load_file,
            "geiser:add-to-load-path": self.add_to_load_path,
            "geiser:no-values": self.no_values,
            "geiser:completions": self.completions,
            "geiser:module-completions": self.module_completions,
            "geiser:module-exports": self.module_exports,
            "geiser:autodoc": self.autodoc,
            "geiser:symbol-documentation": self.symbol_documentation,
            "geiser:macroexpand": self.macroexpand,
            "geiser:start-logging": self.start_logging,
        }


def install(interp, context: ResponderContext) -> Responder:
    """Bind the `geiser:*` procedures in SCHEME and export them."""
    responder = Responder(interp, context)
    scheme = interp.scheme_module
    for name, fn in responder.procedures().items():
        sym = Symbol(name)
        scheme.define(sym, Primitive(name, fn))
        scheme.export(sym)
    return responder
