"""Procedure and syntax representations."""

from __future__ import annotations

from typing import Callable

from geiser_stklos import SExpression, SchemeValue


class Procedure:
    """Common base so `procedure?` is a single isinstance check."""

    __slots__ = ("name",)

    def __init__(self, name: str | None = None):
        self.name = name


class Closure(Procedure):
    """A user-defined procedure: formals, body, captured environment and doc.

    `formals` uses the reader's representation: a list for a proper
    parameter list, an `(items, tail)` tuple for a dotted one and a bare
    Symbol when every argument is collected into one rest parameter.
    """

    __slots__ = ("formals", "body", "env", "doc")

    def __init__(
        self,
        formals: SExpression,
        body: SExpression,
        env,
        name: str | None = None,
        doc: str = "",
    ):
        super().__init__(name)
        self.formals = formals
        self.body = body
        self.env = env
        self.doc = doc

    @property
    def module(self):
        return self.env.module

    def __repr__(self) -> str:
        return f"#[closure {self.name or '#f'}]"


class Primitive(Procedure):
    """A procedure implemented in Python; called as `fn(env, args)`."""

    __slots__ = ("fn",)

    def __init__(self, name: str, fn: Callable[..., SchemeValue]):
        super().__init__(name)
        self.fn = fn

    @property
    def doc(self) -> str:
        return (self.fn.__doc__ or "").strip()

    def __call__(self, env, args: list[SchemeValue]) -> SchemeValue:
        return self.fn(env, args)

    def __repr__(self) -> str:
        return f"#[primitive {self.name}]"


class Syntax:
    """A syntactic keyword: a special form or a macro."""

    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return f"#[syntax {self.name}]"


class SpecialForm(Syntax):
    """Keyword evaluated by a Python handler with non-standard rules."""

    __slots__ = ("handler",)

    def __init__(self, name: str, handler: Callable[..., SchemeValue]):
        super().__init__(name)
        self.handler = handler


class Macro(Syntax):
    """A `define-macro` keyword: a closure run over the unevaluated arguments."""

    __slots__ = ("transformer",)

    def __init__(self, name: str, transformer: Closure):
        super().__init__(name)
        self.transformer = transformer
