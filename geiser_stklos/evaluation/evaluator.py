"""Core evaluator for the interpreter.

Implements macro expansion, special-form dispatch and procedure application.
Tail positions are handled by looping instead of recursing: special forms
return a TailCall and closure bodies replace the current expression.
"""

from __future__ import annotations

from geiser_stklos import SExpression, SchemeValue
from geiser_stklos.errors import SchemeSyntaxError, SchemeTypeError
from geiser_stklos.reader.printer import write_string
from geiser_stklos.types.bind import bind_arguments
from geiser_stklos.types.environment import Environment
from geiser_stklos.types.procedure import Closure, Macro, Primitive, SpecialForm
from geiser_stklos.types.symbol import Symbol
from geiser_stklos.types.tail_call import TailCall
from geiser_stklos.types.values import Vector, Void


def evaluate(expr: SExpression, env: Environment, interp) -> SchemeValue:
    """Evaluate `expr` in `env`; `interp` supplies syntax resolution."""
    while True:
        if isinstance(expr, Symbol):
            return env.lookup(expr)

        if not isinstance(expr, list) or isinstance(expr, Vector):
            if isinstance(expr, tuple):
                raise SchemeSyntaxError(f"bad syntax: {write_string(expr)}")
            return expr  # atoms are self-evaluating

        if not expr:
            return []

        head, *args = expr

        # Keywords, unless shadowed by a lexical binding.
        if isinstance(head, Symbol) and not env.is_local(head):
            syntax = interp.resolve_syntax(head, env)
            if isinstance(syntax, SpecialForm):
                result = syntax.handler(args, env, interp)
                if isinstance(result, TailCall):
                    expr, env = result.expr, result.env
                    continue
                return result
            if isinstance(syntax, Macro):
                expr = interp.apply(syntax.transformer, args)
                continue

        proc = evaluate(head, env, interp)
        values = [evaluate(arg, env, interp) for arg in args]

        if isinstance(proc, Closure):
            env = bind_arguments(proc.name, proc.formals, values, proc.env)
            expr = proc.body
            continue
        if isinstance(proc, Primitive):
            result = proc(env, values)
            if isinstance(result, TailCall):
                expr, env = result.expr, result.env
                continue
            return result
        raise SchemeTypeError(f"bad procedure: {write_string(proc)}")


def evaluate_body(forms: list[SExpression], env: Environment, interp) -> SchemeValue | TailCall:
    """Evaluate all but the last form; hand the last back as a TailCall."""
    if not forms:
        return Void
    for form in forms[:-1]:
        evaluate(form, env, interp)
    return TailCall(forms[-1], env)


def is_true(value: SchemeValue) -> bool:
    """Only #f is false."""
    return value is not False
