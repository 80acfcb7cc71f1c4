from geiser_stklos import SExpression, SchemeValue
from geiser_stklos.errors import ArityError
from geiser_stklos.types.bind import split_formals
from geiser_stklos.types.environment import Environment
from geiser_stklos.types.procedure import Closure
from geiser_stklos.types.symbol import Symbol

BEGIN = Symbol("begin")


def make_closure(
    formals: SExpression,
    body_forms: list[SExpression],
    env: Environment,
    name: str | None = None,
) -> Closure:
    """Build a closure; a leading string in a multi-form body is its docstring."""
    split_formals(formals)  # validate the lambda list eagerly
    doc = ""
    if len(body_forms) > 1 and isinstance(body_forms[0], str):
        doc, body_forms = body_forms[0], body_forms[1:]
    if len(body_forms) == 1:
        body = body_forms[0]
    else:
        body = [BEGIN, *body_forms]
    return Closure(formals, body, env, name=name, doc=doc)


def lambda_form(tail: list[SExpression], env: Environment, interp) -> SchemeValue:
    # (lambda formals body...) needs at least one body form.
    if len(tail) < 2:
        raise ArityError("lambda requires a parameter list and a body")
    return make_closure(tail[0], tail[1:], env)
