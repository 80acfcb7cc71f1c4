"""The reply shapes of the responder and the wrapper that produces them.

A successful request answers `((result "v1" ...) (output . "..."))`; one
that raised answers `((error (key . "message")))` instead.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Union

from geiser_stklos import SExpression, SchemeValue
from geiser_stklos.errors import ModuleError
from geiser_stklos.reader.printer import write_string
from geiser_stklos.types.module import Module
from geiser_stklos.types.symbol import Symbol
from geiser_stklos.types.values import value_list

logger = logging.getLogger(__name__)

RESULT = Symbol("result")
OUTPUT = Symbol("output")
ERROR = Symbol("error")
KEY = Symbol("key")


@dataclass
class Envelope:
    result: List[str] = field(default_factory=list)
    output: str = ""

    def to_sexp(self) -> SExpression:
        return [[RESULT, *self.result], ([OUTPUT], self.output)]


@dataclass
class ErrorReply:
    message: str

    def to_sexp(self) -> SExpression:
        return [[ERROR, ([KEY], self.message)]]


Reply = Union[Envelope, ErrorReply]


def make_envelope(values: List[SchemeValue], output: str) -> Envelope:
    """Print each value; with no values the output stands in as the result."""
    if not values:
        return Envelope([output], output)
    return Envelope([write_string(v) for v in values], output)


def target_module(interp, name: SchemeValue) -> Module:
    """The module called `name`, or the default module when there is none."""
    if name is None or name is False:
        return interp.default_module
    try:
        module = interp.find_module(name)
    except ModuleError:
        module = None
    return module if module is not None else interp.default_module


def capture(interp, thunk: Callable[[], SchemeValue]) -> Reply:
    """Run `thunk` with output captured and wrap what happens in a reply."""
    buffer = io.StringIO()
    try:
        with interp.capture_output(buffer):
            value = thunk()
    except Exception as e:
        logger.debug("request failed: %s", e, exc_info=True)
        return ErrorReply(str(e))
    return make_envelope(value_list(value), buffer.getvalue())


def eval_in(interp, module: SchemeValue, form: SExpression) -> Reply:
    """Evaluate `form` in the module named `module`."""
    target = target_module(interp, module)
    return capture(interp, lambda: interp.eval_form(form, target))
