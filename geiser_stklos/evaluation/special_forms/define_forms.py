"""define, set! and define-macro."""

from geiser_stklos import SExpression, SchemeValue
from geiser_stklos.errors import ArityError, SchemeSyntaxError
from geiser_stklos.evaluation.evaluator import evaluate
from geiser_stklos.evaluation.special_forms.lambda_form import make_closure
from geiser_stklos.types.environment import Environment
from geiser_stklos.types.procedure import Closure, Macro
from geiser_stklos.types.symbol import Symbol
from geiser_stklos.types.values import Void


def _target(spec: SExpression) -> tuple[Symbol, SExpression]:
    """Split a define head `(name . formals)` into name and formals."""
    if isinstance(spec, tuple):
        items, rest = spec
        return items[0], (items[1:], rest) if items[1:] else rest
    return spec[0], spec[1:]


def define_form(tail: list[SExpression], env: Environment, interp) -> SchemeValue:
    """
    (define name value)
    (define (name . formals) body...)
    (define ((name a) b) body...)   ; curried
    """
    if not tail:
        raise ArityError("define requires a name")
    spec, *body = tail
    if isinstance(spec, Symbol):
        if len(body) > 1:
            raise ArityError("define requires at most one value")
        value = evaluate(body[0], env, interp) if body else Void
        if isinstance(value, Closure) and value.name is None:
            value.name = spec.id
        env.define(spec, value)
        return Void
    if not isinstance(spec, (list, tuple)) or not spec:
        raise SchemeSyntaxError("bad define form")
    if not body:
        raise ArityError("define requires a body")
    head, formals = _target(spec)
    if isinstance(head, (list, tuple)):
        # curried define: (define ((f a) b) ...) == (define (f a) (lambda (b) ...))
        return define_form([head, [Symbol("lambda"), formals, *body]], env, interp)
    if not isinstance(head, Symbol):
        raise SchemeSyntaxError("bad define form")
    env.define(head, make_closure(formals, body, env, name=head.id))
    return Void


def set_form(tail: list[SExpression], env: Environment, interp) -> SchemeValue:
    if len(tail) != 2 or not isinstance(tail[0], Symbol):
        raise ArityError("set! requires a symbol and a value")
    env.set(tail[0], evaluate(tail[1], env, interp))
    return Void


def define_macro_form(tail: list[SExpression], env: Environment, interp) -> SchemeValue:
    """
    (define-macro (name . formals) body...)
    (define-macro name (lambda formals body...))
    """
    if len(tail) < 2:
        raise ArityError("define-macro requires a name and a body")
    spec, *body = tail
    if isinstance(spec, Symbol):
        transformer = evaluate(body[0], env, interp)
        if not isinstance(transformer, Closure):
            raise SchemeSyntaxError("define-macro expects a lambda expression")
        name = spec
    else:
        name, formals = _target(spec)
        transformer = make_closure(formals, body, env, name=name.id)
    interp.define_syntax(env.module, name, Macro(name.id, transformer))
    return Void
