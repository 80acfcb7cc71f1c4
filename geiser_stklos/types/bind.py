from __future__ import annotations

from typing import List

from geiser_stklos import SchemeValue, SExpression
from geiser_stklos.errors import ArityError, SchemeSyntaxError
from geiser_stklos.types.environment import Environment
from geiser_stklos.types.symbol import Symbol


def split_formals(formals: SExpression) -> tuple[list[Symbol], Symbol | None]:
    """Split a lambda list into required names and the rest name (or None).

    - (a b)      -> [a, b], None
    - (a b . c)  -> [a, b], c
    - args       -> [], args
    """
    if isinstance(formals, Symbol):
        return [], formals
    if isinstance(formals, tuple):
        items, tail = formals
        if not isinstance(tail, Symbol):
            raise SchemeSyntaxError(f"bad rest parameter: {tail!r}")
        return list(items), tail
    if isinstance(formals, list):
        return list(formals), None
    raise SchemeSyntaxError(f"bad lambda list: {formals!r}")


def bind_arguments(
    name: str | None,
    formals: SExpression,
    supplied_args: List[SchemeValue],
    closure_env: Environment,
) -> Environment:
    """
    Bind supplied argument values to a lambda list.

    Returns a new Environment whose outer is the closure_env, populated with
    the bindings for evaluating the callee body.
    """
    required, rest = split_formals(formals)
    local_env = Environment(outer=closure_env)
    n_req = len(required)
    n_sup = len(supplied_args)
    if n_sup < n_req or (rest is None and n_sup > n_req):
        expected = f"{n_req}" if rest is None else f"at least {n_req}"
        raise ArityError(
            f"procedure `{name or 'lambda'}' expects {expected} argument(s), got {n_sup}"
        )
    for formal, value in zip(required, supplied_args):
        local_env.define(formal, value)
    if rest is not None:
        local_env.define(rest, list(supplied_args[n_req:]))
    return local_env
