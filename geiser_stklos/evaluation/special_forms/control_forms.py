"""Conditionals and sequencing: if, begin, cond, case, and, or, when, unless.

Each form hands its last subform back as a TailCall so loops written with
these forms run in constant Python stack.
"""

from geiser_stklos import SExpression, SchemeValue
from geiser_stklos.builtins import is_eqv
from geiser_stklos.errors import ArityError, SchemeSyntaxError
from geiser_stklos.evaluation.evaluator import evaluate, evaluate_body, is_true
from geiser_stklos.types.environment import Environment
from geiser_stklos.types.symbol import Symbol
from geiser_stklos.types.tail_call import TailCall
from geiser_stklos.types.values import Void

ELSE = Symbol("else")
ARROW = Symbol("=>")
QUOTE = Symbol("quote")


def if_form(tail: list[SExpression], env: Environment, interp) -> SchemeValue:
    if len(tail) not in (2, 3):
        raise ArityError("if requires 2 or 3 arguments")
    if is_true(evaluate(tail[0], env, interp)):
        return TailCall(tail[1], env)
    if len(tail) == 3:
        return TailCall(tail[2], env)
    return Void


def begin_form(tail: list[SExpression], env: Environment, interp) -> SchemeValue:
    return evaluate_body(tail, env, interp)


def cond_form(tail: list[SExpression], env: Environment, interp) -> SchemeValue:
    """(cond (test expr...) ... (else expr...)), with (test => proc) clauses."""
    for clause in tail:
        if not isinstance(clause, list) or not clause:
            raise SchemeSyntaxError("bad cond clause")
        test, *body = clause
        if test == ELSE:
            return evaluate_body(body, env, interp)
        value = evaluate(test, env, interp)
        if not is_true(value):
            continue
        if not body:
            return value
        if body[0] == ARROW:
            if len(body) != 2:
                raise SchemeSyntaxError("bad => clause in cond")
            proc = evaluate(body[1], env, interp)
            return interp.apply(proc, [value])
        return evaluate_body(body, env, interp)
    return Void


def case_form(tail: list[SExpression], env: Environment, interp) -> SchemeValue:
    """(case key ((datum...) expr...) ... (else expr...))"""
    if not tail:
        raise ArityError("case requires a key")
    key = evaluate(tail[0], env, interp)
    for clause in tail[1:]:
        if not isinstance(clause, list) or not clause:
            raise SchemeSyntaxError("bad case clause")
        data, *body = clause
        if data == ELSE or any(is_eqv(key, d) for d in data):
            return evaluate_body(body, env, interp)
    return Void


def and_form(tail: list[SExpression], env: Environment, interp) -> SchemeValue:
    if not tail:
        return True
    for expr in tail[:-1]:
        if not is_true(evaluate(expr, env, interp)):
            return False
    return TailCall(tail[-1], env)


def or_form(tail: list[SExpression], env: Environment, interp) -> SchemeValue:
    if not tail:
        return False
    for expr in tail[:-1]:
        value = evaluate(expr, env, interp)
        if is_true(value):
            return value
    return TailCall(tail[-1], env)


def when_form(tail: list[SExpression], env: Environment, interp) -> SchemeValue:
    if not tail:
        raise ArityError("when requires a test")
    if is_true(evaluate(tail[0], env, interp)):
        return evaluate_body(tail[1:], env, interp)
    return Void


def unless_form(tail: list[SExpression], env: Environment, interp) -> SchemeValue:
    if not tail:
        raise ArityError("unless requires a test")
    if not is_true(evaluate(tail[0], env, interp)):
        return evaluate_body(tail[1:], env, interp)
    return Void
