import pytest

from geiser_stklos.reader import write_string
from geiser_stklos.responder.introspection import (
    Binding,
    ModuleExports,
    classifier_for,
    classify_legacy,
    classify_modern,
    completions,
    module_completions,
    module_exports,
)
from geiser_stklos.types.symbol import Symbol

MODULE_M = """
(define-module m
  (export f v mac)
  (define (f x) x)
  (define v 42)
  (define-macro (mac x) x)
  (define hidden 0))
"""


def names(symbols):
    return [s.id for s in symbols]


def test_exports_are_sorted_into_buckets(any_interp):
    any_interp.eval(MODULE_M)
    exports = module_exports(any_interp, classifier_for(any_interp), Symbol("m"))
    assert names(exports.procs) == ["f"]
    assert names(exports.syntax) == ["mac"]
    assert names(exports.vars) == ["v"]


def test_buckets_partition_the_export_list(any_interp):
    any_interp.eval(MODULE_M)
    exports = module_exports(any_interp, classifier_for(any_interp), Symbol("m"))
    buckets = [set(exports.procs), set(exports.syntax), set(exports.vars)]
    assert set().union(*buckets) == set(any_interp.modules.find("m").exports)
    assert sum(len(b) for b in buckets) == len(any_interp.modules.find("m").exports)


def test_export_listing_shape(geiser):
    geiser.eval(MODULE_M)
    assert write_string(geiser.eval("(geiser:module-exports 'm)")) == \
        '(("modules") ("procs" (f)) ("syntax" (mac)) ("vars" (v)))'


def test_unknown_module_has_empty_buckets(geiser):
    assert write_string(geiser.eval("(geiser:module-exports 'nowhere)")) == \
        '(("modules") ("procs") ("syntax") ("vars"))'
    assert module_exports(geiser, classifier_for(geiser), 17) == ModuleExports()


def test_classifier_is_picked_by_version(interp, legacy_interp):
    assert classifier_for(interp) is classify_modern
    assert classifier_for(legacy_interp) is classify_legacy


def test_special_forms_land_in_the_syntax_bucket(any_interp):
    exports = module_exports(any_interp, classifier_for(any_interp), Symbol("SCHEME"))
    assert Symbol("if") in exports.syntax
    assert Symbol("define-module") in exports.syntax
    assert Symbol("car") in exports.procs
    assert Symbol("if") not in exports.procs + exports.vars


@pytest.mark.parametrize("classify", [classify_legacy, classify_modern])
def test_both_classifiers_agree_on_values(classify, any_interp):
    any_interp.eval("(define (p) 1) (define n 2)")
    module = any_interp.default_module
    assert classify(module, Symbol("p")) is Binding.PROCEDURE
    assert classify(module, Symbol("n")) is Binding.VARIABLE
    assert classify(module, Symbol("car")) is Binding.PROCEDURE


def test_legacy_classifier_treats_unbound_as_syntax(legacy_interp):
    legacy_interp.eval("(define-macro (mac x) x)")
    assert classify_legacy(legacy_interp.default_module, Symbol("mac")) is Binding.SYNTAX


def test_modern_classifier_reads_syntax_values(interp):
    interp.eval("(define-macro (mac x) x)")
    assert classify_modern(interp.default_module, Symbol("mac")) is Binding.SYNTAX
    assert classify_modern(interp.default_module, Symbol("unbound-name")) is Binding.VARIABLE


def test_symbol_completions(any_interp):
    assert completions(any_interp, "defi") == ["define", "define-library", "define-macro", "define-module"]
    any_interp.eval("(define definitely 1)")
    assert "definitely" in completions(any_interp, "defi")
    assert completions(any_interp, "zzz") == []


def test_completions_follow_the_current_module(any_interp):
    any_interp.eval("(define-module inner (define inner-only 1))")
    assert completions(any_interp, "inner-") == []
    any_interp.eval("(select-module inner)")
    assert completions(any_interp, "inner-") == ["inner-only"]


def test_completion_request_answers_strings(geiser):
    assert write_string(geiser.eval('(geiser:completions "string-a")')) == '("string-append")'


def test_module_completions_are_case_sensitive(any_interp):
    any_interp.eval("(define-module stuff) (define-module Stuff)")
    assert module_completions(any_interp, "s") == ["stklos", "stuff"]
    assert module_completions(any_interp, "S") == ["SCHEME", "Stuff"]
    assert module_completions(any_interp, "x") == []
