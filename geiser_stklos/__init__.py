# Core type aliases for the geiser_stklos data model.
# Plain Python types represent both code (forms) and runtime values:
# proper lists are `list`, improper lists are an `(items, tail)` tuple,
# symbols are interned `Symbol` objects, strings are `str`.
#
# Naming guidance:
# - SExpression: use in reader/parser/macro code to denote syntactic forms.
# - SchemeValue: use in evaluator/runtime code to denote evaluated values.

from typing import Any

SchemeValue = Any
SExpression = SchemeValue

# Version string reported by `(version)`; the editor gates on it.
RUNTIME_VERSION = "2.10"
