from hypothesis import given, strategies as st

from geiser_stklos.reader import read_one, write_string
from geiser_stklos.responder.signature import (
    REST_MARKER,
    Signature,
    autodoc,
    macroexpand,
    normalize_formals,
    symbol_documentation,
)
from geiser_stklos.types.symbol import Symbol

a, b, c = Symbol("a"), Symbol("b"), Symbol("c")


def test_normalize_formals():
    assert normalize_formals([a, b]) == ([a, b], False)
    assert normalize_formals(([a, b], c)) == ([a, b], True)
    assert normalize_formals(a) == ([], True)
    assert normalize_formals([]) == ([], False)


def test_normalize_formals_leaves_its_input_alone():
    formals = read_one("(a b . c)")
    normalize_formals(formals)
    assert formals == ([a, b], c)


@given(st.lists(st.sampled_from(["x", "y", "z", "w"]), max_size=5), st.booleans())
def test_required_names_survive_normalization(names, dotted):
    required = [Symbol(n) for n in names]
    if dotted and required:
        formals = (required, Symbol("rest"))
    elif dotted:
        formals = Symbol("rest")
    else:
        formals = required
    assert normalize_formals(formals) == (required, dotted)


def test_signature_shape():
    sig = Signature(Symbol("f"), (a, b), True, "stklos")
    assert write_string(sig.to_sexp()) == \
        '(f ("args" (("required" a b) ("optional" "...") ("key"))) ("module" stklos))'
    assert write_string(Signature(Symbol("g"), (), False, "m").args_sexp()) == \
        '("args" (("required") ("optional") ("key")))'
    assert REST_MARKER == "..."


def test_documentation_of_a_closure(any_interp):
    any_interp.eval('(define (f a b . c) "Adds things." (+ a b))')
    doc = symbol_documentation(any_interp, Symbol("f"))
    assert write_string(doc) == (
        '(("signature" f ("args" (("required" a b) ("optional" "...") ("key"))) ("module" stklos))'
        ' ("docstring" . "A procedure in module stklos.\\nAdds things."))'
    )


def test_documentation_of_a_primitive(any_interp):
    doc = symbol_documentation(any_interp, Symbol("car"))
    assert doc[0] == (["signature"], "")
    assert doc[1] == (["docstring"], "A procedure in module SCHEME.\n(car pair) - first element of a pair.")


def test_documentation_of_a_value(any_interp):
    any_interp.eval("(define answer '(4 2))")
    assert write_string(symbol_documentation(any_interp, "answer")) == (
        '(("signature" answer ("args" (("required") ("optional") ("key"))))'
        ' ("docstring" . "An object in module stklos.\\n\\nValue:\\n(4 2)"))'
    )


def test_documentation_reports_the_defining_module(any_interp):
    any_interp.eval("(define-module lib (export helper) (define (helper) 1))")
    any_interp.eval("(import lib)")
    doc = symbol_documentation(any_interp, Symbol("helper"))
    assert doc[0][-1] == ["module", Symbol("lib")]


def test_documentation_of_unbound_names(any_interp):
    assert symbol_documentation(any_interp, Symbol("no-such-thing")) == ""
    assert symbol_documentation(any_interp, 12) == ""


def test_documentation_request_in_a_module(geiser):
    geiser.eval("(define-module m (define local 1))")
    assert geiser.eval("(geiser:symbol-documentation 'local)") == ""
    assert write_string(geiser.eval("(geiser:symbol-documentation 'local 'm)")).startswith('(("signature" local')


def test_autodoc_keeps_order_and_drops_unbound(any_interp):
    any_interp.eval("(define (two x y) x) (define n 42)")
    entries = autodoc(any_interp, [Symbol("n"), Symbol("missing"), Symbol("two"), Symbol("car")])
    assert [write_string(e) for e in entries] == [
        '(n ("value" . "42") ("module" stklos))',
        '(two ("args" (("required" x y) ("optional") ("key"))) ("module" stklos))',
        '(car ("module" SCHEME))',
    ]


def test_autodoc_request(geiser):
    geiser.eval("(define (area w h) (* w h))")
    assert write_string(geiser.eval("(geiser:autodoc '(area) (current-module))")) == \
        '((area ("args" (("required" w h) ("optional") ("key"))) ("module" stklos)))'
    assert geiser.eval("(geiser:autodoc 'area)") == geiser.eval("(geiser:autodoc '(area))")
    assert geiser.eval("(geiser:autodoc '(nothing-here))") == []


def test_macroexpand(any_interp):
    any_interp.eval("(define-macro (unless2 c . body) `(if ,c #f (begin ,@body)))")
    assert macroexpand(any_interp, read_one("(unless2 x (unless2 y 1))")) == \
        "(if x #f (begin (unless2 y 1)))"
    assert macroexpand(any_interp, read_one("(unless2 x (unless2 y 1))"), True) == \
        "(if x #f (begin (if y #f (begin 1))))"


def test_macroexpand_request(geiser):
    geiser.eval("(define-macro (twice x) `(begin ,x ,x))")
    assert geiser.eval("(geiser:macroexpand '(twice (f)))") == "(begin (f) (f))"
    assert geiser.eval("(geiser:macroexpand '(twice (twice 1)) #t)") == "(begin (begin 1 1) (begin 1 1))"
    geiser.eval("(define-macro (broken) (car '()))")
    assert write_string(geiser.eval("(geiser:macroexpand '(broken))")).startswith("((error (key . ")
