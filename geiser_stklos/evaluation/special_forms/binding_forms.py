"""let, named let, let* and letrec."""

from geiser_stklos import SExpression, SchemeValue
from geiser_stklos.errors import ArityError, SchemeSyntaxError
from geiser_stklos.evaluation.evaluator import evaluate, evaluate_body
from geiser_stklos.evaluation.special_forms.lambda_form import make_closure
from geiser_stklos.types.environment import Environment
from geiser_stklos.types.procedure import Closure
from geiser_stklos.types.symbol import Symbol
from geiser_stklos.types.tail_call import TailCall
from geiser_stklos.types.values import Void


def _bindings(spec: SExpression) -> list[tuple[Symbol, SExpression]]:
    if not isinstance(spec, list):
        raise SchemeSyntaxError("bad binding list")
    out = []
    for binding in spec:
        if isinstance(binding, Symbol):
            out.append((binding, None))
        elif isinstance(binding, list) and binding and isinstance(binding[0], Symbol) and len(binding) <= 2:
            out.append((binding[0], binding[1] if len(binding) == 2 else None))
        else:
            raise SchemeSyntaxError("bad binding in let form")
    return out


def _init(expr: SExpression, env: Environment, interp) -> SchemeValue:
    return Void if expr is None else evaluate(expr, env, interp)


def let_form(tail: list[SExpression], env: Environment, interp) -> SchemeValue:
    """(let ((name init) ...) body...) and (let loop ((name init) ...) body...)"""
    if len(tail) < 2:
        raise ArityError("let requires bindings and a body")
    if isinstance(tail[0], Symbol):
        # named let: bind the loop procedure in its own frame
        name, spec, *body = tail
        pairs = _bindings(spec)
        loop_env = Environment(outer=env)
        proc = make_closure([n for n, _ in pairs], body, loop_env, name=name.id)
        loop_env.define(name, proc)
        args = [_init(e, env, interp) for _, e in pairs]
        return TailCall([proc, *[[Symbol("quote"), a] for a in args]], loop_env)
    spec, *body = tail
    pairs = _bindings(spec)
    new_env = Environment(outer=env)
    for name, expr in pairs:
        new_env.define(name, _init(expr, env, interp))
    return evaluate_body(body, new_env, interp)


def let_star_form(tail: list[SExpression], env: Environment, interp) -> SchemeValue:
    if len(tail) < 2:
        raise ArityError("let* requires bindings and a body")
    spec, *body = tail
    new_env = env
    for name, expr in _bindings(spec):
        value = _init(expr, new_env, interp)
        new_env = Environment(outer=new_env)
        new_env.define(name, value)
    return evaluate_body(body, Environment(outer=new_env), interp)


def letrec_form(tail: list[SExpression], env: Environment, interp) -> SchemeValue:
    if len(tail) < 2:
        raise ArityError("letrec requires bindings and a body")
    spec, *body = tail
    pairs = _bindings(spec)
    new_env = Environment(outer=env)
    for name, _ in pairs:
        new_env.define(name, Void)
    for name, expr in pairs:
        value = _init(expr, new_env, interp)
        if isinstance(value, Closure) and value.name is None:
            value.name = name.id
        new_env.define(name, value)
    return evaluate_body(body, new_env, interp)
