from __future__ import annotations

from dataclasses import dataclass

from geiser_stklos import SExpression
from geiser_stklos.types.environment import Environment


@dataclass(slots=True)
class TailCall:
    """Returned by special forms whose last subform is in tail position.

    The evaluator loop continues with `expr` in `env` instead of recursing.
    """

    expr: SExpression
    env: Environment
