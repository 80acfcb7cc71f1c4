"""quote and quasiquote (with unquote / unquote-splicing, nested levels)."""

from geiser_stklos import SExpression, SchemeValue
from geiser_stklos.errors import ArityError, SchemeTypeError
from geiser_stklos.evaluation.evaluator import evaluate
from geiser_stklos.types.environment import Environment
from geiser_stklos.types.symbol import Symbol
from geiser_stklos.types.values import Vector

QUOTE = Symbol("quote")
QUASIQUOTE = Symbol("quasiquote")
UNQUOTE = Symbol("unquote")
UNQUOTE_SPLICING = Symbol("unquote-splicing")


def quote_form(tail: list[SExpression], env: Environment, interp) -> SchemeValue:
    if len(tail) != 1:
        raise ArityError("quote requires exactly 1 argument")
    return tail[0]


def _tagged(form: SExpression, tag: Symbol) -> bool:
    return (
        isinstance(form, list)
        and not isinstance(form, Vector)
        and len(form) == 2
        and form[0] == tag
    )


def _qq(form: SExpression, env: Environment, interp, depth: int) -> SExpression:
    if _tagged(form, UNQUOTE):
        if depth == 1:
            return evaluate(form[1], env, interp)
        return [UNQUOTE, _qq(form[1], env, interp, depth - 1)]
    if _tagged(form, QUASIQUOTE):
        return [QUASIQUOTE, _qq(form[1], env, interp, depth + 1)]
    if isinstance(form, tuple):
        items, tail = form
        expanded = _qq_items(items, env, interp, depth)
        rest = _qq(tail, env, interp, depth)
        if isinstance(rest, list):
            return expanded + rest
        return expanded, rest
    if isinstance(form, Vector):
        return Vector(_qq_items(form, env, interp, depth))
    if isinstance(form, list):
        return _qq_items(form, env, interp, depth)
    return form


def _qq_items(items: list[SExpression], env: Environment, interp, depth: int) -> list[SExpression]:
    out: list[SExpression] = []
    for item in items:
        if _tagged(item, UNQUOTE_SPLICING) and depth == 1:
            spliced = evaluate(item[1], env, interp)
            if not isinstance(spliced, list):
                raise SchemeTypeError("unquote-splicing expects a list")
            out.extend(spliced)
        else:
            out.append(_qq(item, env, interp, depth))
    return out


def quasiquote_form(tail: list[SExpression], env: Environment, interp) -> SchemeValue:
    if len(tail) != 1:
        raise ArityError("quasiquote requires exactly 1 argument")
    return _qq(tail[0], env, interp, 1)
