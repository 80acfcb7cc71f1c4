import pytest

from geiser_stklos.errors import (
    ArityError,
    LoadError,
    ModuleError,
    SchemeExit,
    SchemeTypeError,
    UnboundVariable,
    UserError,
)
from geiser_stklos.reader import write_string
from geiser_stklos.types.procedure import Closure, Macro, Primitive, SpecialForm
from geiser_stklos.types.symbol import Symbol
from geiser_stklos.types.values import MultipleValues, Void


def run(interp, code):
    return write_string(interp.eval(code))


def test_arithmetic_and_comparison(any_interp):
    assert any_interp.eval("(+ 1 2 3)") == 6
    assert any_interp.eval("(- 10 4 1)") == 5
    assert any_interp.eval("(- 3)") == -3
    assert any_interp.eval("(/ 12 4)") == 3
    assert any_interp.eval("(/ 1 2)") == 0.5
    assert any_interp.eval("(< 1 2 3)") is True
    assert any_interp.eval("(= 1 2)") is False
    assert any_interp.eval("(quotient -7 2)") == -3
    assert any_interp.eval("(remainder -7 2)") == -1
    assert any_interp.eval("(modulo -7 2)") == 1


def test_define_lambda_and_closures(any_interp):
    any_interp.eval("(define (make-adder n) (lambda (x) (+ x n)))")
    any_interp.eval("(define add5 (make-adder 5))")
    assert any_interp.eval("(add5 10)") == 15
    proc = any_interp.eval("make-adder")
    assert isinstance(proc, Closure) and proc.name == "make-adder"


def test_define_keeps_docstring(interp):
    interp.eval('(define (twice x) "Double x." (* 2 x))')
    proc = interp.eval("twice")
    assert proc.doc == "Double x."
    assert interp.eval("(twice 21)") == 42
    # a lone string body is the result, not a docstring
    interp.eval('(define (name) "stklos")')
    assert interp.eval("(name)") == "stklos"


def test_curried_define(any_interp):
    any_interp.eval("(define ((adder a) b) (+ a b))")
    assert any_interp.eval("((adder 1) 2)") == 3


def test_variadic_procedures(any_interp):
    any_interp.eval("(define (f a . rest) rest)")
    assert run(any_interp, "(f 1 2 3)") == "(2 3)"
    any_interp.eval("(define g (lambda args args))")
    assert run(any_interp, "(g)") == "()"
    with pytest.raises(ArityError):
        any_interp.eval("(f)")


def test_let_forms(any_interp):
    assert any_interp.eval("(let ((x 1) (y 2)) (+ x y))") == 3
    assert any_interp.eval("(let* ((x 1) (y (+ x 1))) (* x y))") == 2
    assert any_interp.eval(
        "(letrec ((even? (lambda (n) (if (= n 0) #t (odd? (- n 1)))))"
        "         (odd? (lambda (n) (if (= n 0) #f (even? (- n 1))))))"
        "  (even? 100))"
    ) is True


def test_named_let_runs_in_constant_stack(any_interp):
    assert any_interp.eval("(let loop ((i 0) (acc 0)) (if (= i 20000) acc (loop (+ i 1) (+ acc i))))") == sum(range(20000))


def test_tail_calls_through_cond_and_when(any_interp):
    any_interp.eval(
        "(define (count n) (cond ((= n 0) 'done) (else (when #t (count (- n 1))))))"
    )
    assert any_interp.eval("(count 20000)") == Symbol("done")


def test_cond_case_and_or(any_interp):
    assert any_interp.eval("(cond ((assq (quote b) (quote ((a 1) (b 2)))) => cadr) (else (quote no)))") == 2
    assert any_interp.eval("(cond ((member 2 '(1 2 3)) => length) (else 0))") == 2
    assert any_interp.eval("(case (* 2 3) ((2 3 5 7) 'prime) ((1 4 6 8 9) 'composite))") == Symbol("composite")
    assert any_interp.eval("(case 'x ((a) 1) (else 2))") == 2
    assert any_interp.eval("(and 1 2 3)") == 3
    assert any_interp.eval("(and)") is True
    assert any_interp.eval("(or #f 7)") == 7
    assert any_interp.eval("(unless #f 'ran)") == Symbol("ran")


def test_quasiquote(any_interp):
    any_interp.eval("(define xs '(2 3))")
    assert run(any_interp, "`(1 ,@xs ,(+ 2 2))") == "(1 2 3 4)"
    assert run(any_interp, "`#(1 ,(car xs))") == "#(1 2)"


def test_lists_and_pairs(any_interp):
    assert run(any_interp, "(cons 1 2)") == "(1 . 2)"
    assert run(any_interp, "(cons 1 '(2))") == "(1 2)"
    assert run(any_interp, "(cdr '(1 2 . 3))") == "(2 . 3)"
    assert run(any_interp, "(cdr '(1 . 3))") == "3"
    assert run(any_interp, "(append '(1) '(2) 3)") == "(1 2 . 3)"
    assert run(any_interp, "(map + '(1 2) '(10 20))") == "(11 22)"
    assert run(any_interp, "(filter odd? '(1 2 3 4 5))") == "(1 3 5)"
    assert run(any_interp, "(assq 'b '((a 1) (b 2)))") == "(b 2)"
    assert run(any_interp, "(apply + 1 '(2 3))") == "6"
    assert any_interp.eval("(equal? '(1 (2 #(3))) (list 1 (list 2 (vector 3))))") is True
    assert any_interp.eval("(eq? '() '())") is True


def test_strings_and_symbols(any_interp):
    assert any_interp.eval('(string-append "ab" "cd")') == "abcd"
    assert any_interp.eval("(symbol->string 'foo)") == "foo"
    assert any_interp.eval('(string->symbol "bar")') == Symbol("bar")
    assert any_interp.eval('(string->number "12")') == 12
    assert any_interp.eval('(string->number "nope")') is False
    assert any_interp.eval("(number->string 2.5)") == "2.5"


def test_output_goes_to_the_current_output_port(interp):
    interp.eval('(display "hi") (write "hi") (newline) (display #\\a)')
    assert interp.output_port.stream.getvalue() == 'hi"hi"\na'


def test_capture_output_collects_both_ports(interp):
    import io

    buffer = io.StringIO()
    with interp.capture_output(buffer):
        interp.eval('(display "out") (display "err" (current-error-port))')
    assert buffer.getvalue() == "outerr"
    interp.eval('(display "after")')
    assert interp.output_port.stream.getvalue() == "after"


def test_multiple_values(any_interp):
    values = any_interp.eval("(values 1 2 3)")
    assert isinstance(values, MultipleValues) and values.values == [1, 2, 3]
    assert any_interp.eval("(values 7)") == 7
    assert any_interp.eval("(values)") == MultipleValues([])
    assert any_interp.eval("(call-with-values (lambda () (values 1 2)) +)") == 3


def test_define_and_set_return_void(any_interp):
    assert any_interp.eval("(define x 1)") is Void
    assert any_interp.eval("(set! x 2)") is Void
    assert any_interp.eval("x") == 2


def test_errors(any_interp):
    with pytest.raises(UnboundVariable, match="symbol `nope' unbound in module `stklos'"):
        any_interp.eval("nope")
    with pytest.raises(SchemeTypeError):
        any_interp.eval("(car '())")
    with pytest.raises(SchemeTypeError):
        any_interp.eval("(5 1)")
    with pytest.raises(UserError, match="^f: bad thing 42$"):
        any_interp.eval("(error 'f \"bad thing\" 42)")
    with pytest.raises(UserError, match='^oops "x"$'):
        any_interp.eval('(error "oops" "x")')
    with pytest.raises(SchemeExit) as exc:
        any_interp.eval("(exit 3)")
    assert exc.value.code == 3


def test_define_macro_and_expansion(any_interp):
    any_interp.eval("(define-macro (swap! a b) `(let ((tmp ,a)) (set! ,a ,b) (set! ,b tmp)))")
    any_interp.eval("(define p 1) (define q 2) (swap! p q)")
    assert any_interp.eval("(list p q)") == [2, 1]
    assert run(any_interp, "(macro-expand-1 '(swap! p q))") == "(let ((tmp p)) (set! p q) (set! q tmp))"


def test_full_expansion_leaves_quoted_templates_alone(any_interp):
    any_interp.eval("(define-macro (inc x) `(+ ,x 1))")
    any_interp.eval("(define-macro (twice-inc x) `(inc (inc ,x)))")
    assert run(any_interp, "(macro-expand '(twice-inc 5))") == "(+ (+ 5 1) 1)"
    assert run(any_interp, "(macro-expand '(list '(inc 1) (inc 2)))") == "(list (quote (inc 1)) (+ 2 1))"
    assert run(any_interp, "(macro-expand-1 '(car x))") == "(car x)"


def test_local_binding_shadows_a_keyword(any_interp):
    assert any_interp.eval("(let ((if (lambda (a b c) c))) (if 1 2 3))") == 3


def test_macro_layout_follows_version(interp, legacy_interp):
    interp.eval("(define-macro (m x) x)")
    legacy_interp.eval("(define-macro (m x) x)")
    m = Symbol("m")
    assert isinstance(interp.default_module.vars[m], Macro)
    assert m not in legacy_interp.default_module.vars
    assert isinstance(legacy_interp.default_module.macros[m], Macro)
    assert isinstance(interp.scheme_module.vars[Symbol("if")], SpecialForm)
    assert isinstance(legacy_interp.scheme_module.macros[Symbol("if")], SpecialForm)
    assert isinstance(legacy_interp.scheme_module.vars[Symbol("car")], Primitive)


def test_define_module_export_and_import(any_interp):
    any_interp.eval(
        """
        (define-module shapes
          (export area)
          (define (area r) (* 3 r r))
          (define hidden 1))
        """
    )
    with pytest.raises(UnboundVariable):
        any_interp.eval("area")
    any_interp.eval("(import shapes)")
    assert any_interp.eval("(area 2)") == 12
    with pytest.raises(UnboundVariable):
        any_interp.eval("hidden")
    shapes = any_interp.modules.find("shapes")
    assert shapes.exports == [Symbol("area")]
    assert any_interp.scheme_module in shapes.imports


def test_select_module_changes_where_definitions_go(any_interp):
    any_interp.eval("(define-module tools)")
    any_interp.eval("(select-module tools)")
    any_interp.eval("(define secret 99)")
    assert any_interp.current_module.name == "tools"
    assert run(any_interp, "(module-name (current-module))") == "tools"
    any_interp.eval("(select-module stklos)")
    assert Symbol("secret") in any_interp.modules.find("tools").vars
    with pytest.raises(ModuleError):
        any_interp.eval("(select-module missing)")


def test_define_library(any_interp):
    any_interp.eval(
        """
        (define-library (geometry points)
          (export make-point)
          (import (scheme base))
          (begin (define (make-point x y) (cons x y))))
        """
    )
    any_interp.eval("(import (geometry points))")
    assert run(any_interp, "(make-point 1 2)") == "(1 . 2)"
    assert any_interp.find_module(Symbol("geometry/points")) is not None
    assert any_interp.eval("(module? (find-module '(geometry points)))") is True
    assert any_interp.eval("(find-module 'nowhere)") is False


def test_eval_in_another_module(any_interp):
    any_interp.eval("(define-module other (define where 'other))")
    assert any_interp.eval("(eval 'where (find-module 'other))") == Symbol("other")


def test_load_restores_the_current_module(any_interp, tmp_path):
    source = tmp_path / "lib.stk"
    source.write_text("(define-module loaded)\n(select-module loaded)\n(define from-file 1)\n")
    any_interp.eval(f'(load "{source}")')
    assert any_interp.current_module is any_interp.default_module
    assert Symbol("from-file") in any_interp.modules.find("loaded").vars
    with pytest.raises(LoadError):
        any_interp.load(str(tmp_path / "missing.stk"))


def test_version_is_reported(interp, legacy_interp):
    assert interp.eval("(version)") == "2.10"
    assert legacy_interp.eval("(version)") == "1.60"
    assert interp.macros_as_values and not legacy_interp.macros_as_values
