"""Registry of special forms for the evaluator.

Maps keyword names to handler functions `handler(tail, env, interp)` that
implement non-standard evaluation rules. The interpreter installs each one
into the SCHEME module as a SpecialForm keyword.
"""

from geiser_stklos.evaluation.special_forms.quote_forms import quote_form, quasiquote_form
from geiser_stklos.evaluation.special_forms.lambda_form import lambda_form
from geiser_stklos.evaluation.special_forms.define_forms import define_form, set_form, define_macro_form
from geiser_stklos.evaluation.special_forms.control_forms import (
    if_form,
    begin_form,
    cond_form,
    case_form,
    and_form,
    or_form,
    when_form,
    unless_form,
)
from geiser_stklos.evaluation.special_forms.binding_forms import let_form, let_star_form, letrec_form
from geiser_stklos.evaluation.special_forms.module_forms import (
    define_module_form,
    select_module_form,
    export_form,
    import_form,
    define_library_form,
)

SPECIAL_FORMS = {
    "quote": quote_form,
    "quasiquote": quasiquote_form,
    "lambda": lambda_form,
    "define": define_form,
    "set!": set_form,
    "define-macro": define_macro_form,
    "if": if_form,
    "begin": begin_form,
    "cond": cond_form,
    "case": case_form,
    "and": and_form,
    "or": or_form,
    "when": when_form,
    "unless": unless_form,
    "let": let_form,
    "let*": let_star_form,
    "letrec": letrec_form,
    "letrec*": letrec_form,
    "define-module": define_module_form,
    "select-module": select_module_form,
    "export": export_form,
    "import": import_form,
    "define-library": define_library_form,
}
