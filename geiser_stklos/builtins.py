"""Built-in procedures for the SCHEME module.

This module defines arithmetic, comparison, list and string processing,
predicates, output, multiple values, evaluation and module access.
Every primitive is called as `fn(env, args)`; the docstring becomes the
documentation shown by the editor.
"""
from __future__ import annotations

import functools
import operator
from typing import Callable

from geiser_stklos import SchemeValue
from geiser_stklos.errors import ArityError, SchemeTypeError, UserError, SchemeExit
from geiser_stklos.reader.printer import write_string, display_string
from geiser_stklos.types.environment import Environment
from geiser_stklos.types.module import Module
from geiser_stklos.types.procedure import Procedure
from geiser_stklos.types.symbol import Symbol
from geiser_stklos.types.values import Char, MultipleValues, OutputPort, Vector, Void


def _interp(env: Environment):
    return env.module.interp


def check_arity(name: str, args: list, low: int, high: int | None = None) -> None:
    n = len(args)
    if n < low or (high is not None and n > high):
        if high == low:
            expected = f"{low}"
        elif high is None:
            expected = f"at least {low}"
        else:
            expected = f"{low} to {high}"
        raise ArityError(f"{name}: expects {expected} argument(s), got {n}")


def _numbers(name: str, args: list) -> list:
    for a in args:
        if isinstance(a, bool) or not isinstance(a, (int, float)):
            raise SchemeTypeError(f"{name}: bad number {write_string(a)}")
    return args


def _list_arg(name: str, value: SchemeValue) -> list:
    if not isinstance(value, list) or isinstance(value, Vector):
        raise SchemeTypeError(f"{name}: bad list {write_string(value)}")
    return value


# -------------------------------
# Equality
# -------------------------------
def is_eqv(a: SchemeValue, b: SchemeValue) -> bool:
    """eqv? semantics over the Python value representation."""
    if a is b:
        return True
    if isinstance(a, bool) or isinstance(b, bool):
        return False
    if isinstance(a, Symbol) and isinstance(b, Symbol):
        return a == b
    if isinstance(a, Char) and isinstance(b, Char):
        return str(a) == str(b)
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return type(a) is type(b) and a == b
    if isinstance(a, list) and isinstance(b, list) and not isinstance(a, Vector):
        return not a and not b and not isinstance(b, Vector)
    return False


def is_equal(a: SchemeValue, b: SchemeValue) -> bool:
    """Structural equality for lists, pairs, vectors and strings."""
    if is_eqv(a, b):
        return True
    if isinstance(a, Vector) != isinstance(b, Vector):
        return False
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(is_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, tuple) and isinstance(b, tuple):
        return is_equal(a[0], b[0]) and is_equal(a[1], b[1])
    if type(a) is str and type(b) is str:
        return a == b
    return False


def eq_p(env: Environment, args: list[SchemeValue]) -> bool:
    """(eq? a b) - identity comparison."""
    check_arity("eq?", args, 2, 2)
    return is_eqv(*args)


def eqv_p(env: Environment, args: list[SchemeValue]) -> bool:
    """(eqv? a b) - identity comparison, numbers and characters by value."""
    check_arity("eqv?", args, 2, 2)
    return is_eqv(*args)


def equal_p(env: Environment, args: list[SchemeValue]) -> bool:
    """(equal? a b) - structural comparison."""
    check_arity("equal?", args, 2, 2)
    return is_equal(*args)


# -------------------------------
# Arithmetic
# -------------------------------
def add(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(+ n ...) - sum of all arguments."""
    return sum(_numbers("+", args))


def sub(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(- n m ...) - subtract the rest from n; negate a single argument."""
    check_arity("-", args, 1)
    nums = _numbers("-", args)
    if len(nums) == 1:
        return -nums[0]
    return functools.reduce(operator.sub, nums)


def mul(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(* n ...) - product of all arguments."""
    return functools.reduce(operator.mul, _numbers("*", args), 1)


def div(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(/ n m ...) - divide left to right; reciprocal of a single argument."""
    check_arity("/", args, 1)
    nums = _numbers("/", args)
    if len(nums) == 1:
        nums = [1] + nums
    result = nums[0]
    for x in nums[1:]:
        if x == 0:
            raise UserError("/: division by zero")
        if isinstance(result, int) and isinstance(x, int) and result % x == 0:
            result = result // x
        else:
            result = result / x
    return result


def _integer_op(name: str, fn: Callable[[int, int], int]):
    def prim(env: Environment, args: list[SchemeValue]) -> int:
        check_arity(name, args, 2, 2)
        n, d = _numbers(name, args)
        if d == 0:
            raise UserError(f"{name}: division by zero")
        return fn(n, d)
    prim.__doc__ = f"({name} n d) - integer {name} of n by d."
    return prim


def _compare(name: str, op: Callable[[SchemeValue, SchemeValue], bool]):
    def prim(env: Environment, args: list[SchemeValue]) -> bool:
        check_arity(name, args, 1)
        nums = _numbers(name, args)
        return all(op(a, b) for a, b in zip(nums, nums[1:]))
    prim.__doc__ = f"({name} n m ...) - true when every adjacent pair satisfies {name}."
    return prim


def abs_(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(abs n) - absolute value."""
    check_arity("abs", args, 1, 1)
    return abs(_numbers("abs", args)[0])


def min_(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(min n ...) - smallest argument."""
    check_arity("min", args, 1)
    return min(_numbers("min", args))


def max_(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(max n ...) - largest argument."""
    check_arity("max", args, 1)
    return max(_numbers("max", args))


# -------------------------------
# Pairs and lists
# -------------------------------
def cons(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(cons a d) - a new pair; a list when d is a list."""
    check_arity("cons", args, 2, 2)
    head, tail = args
    if isinstance(tail, list) and not isinstance(tail, Vector):
        return [head] + tail
    if isinstance(tail, tuple):
        return [head] + tail[0], tail[1]
    return [head], tail


def car(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(car pair) - first element of a pair."""
    check_arity("car", args, 1, 1)
    xs = args[0]
    if isinstance(xs, tuple):
        return xs[0][0]
    if isinstance(xs, list) and not isinstance(xs, Vector) and xs:
        return xs[0]
    raise SchemeTypeError(f"car: bad pair {write_string(xs)}")


def cdr(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(cdr pair) - everything after the first element of a pair."""
    check_arity("cdr", args, 1, 1)
    xs = args[0]
    if isinstance(xs, tuple):
        items, tail = xs
        return (items[1:], tail) if len(items) > 1 else tail
    if isinstance(xs, list) and not isinstance(xs, Vector) and xs:
        return xs[1:]
    raise SchemeTypeError(f"cdr: bad pair {write_string(xs)}")


def cadr(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(cadr pair) - second element."""
    return car(env, [cdr(env, args)])


def cddr(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(cddr pair) - everything after the second element."""
    return cdr(env, [cdr(env, args)])


def caar(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(caar pair) - first element of the first element."""
    return car(env, [car(env, args)])


def list_(env: Environment, args: list[SchemeValue]) -> list[SchemeValue]:
    """(list obj ...) - a new list of the arguments."""
    return list(args)


def length(env: Environment, args: list[SchemeValue]) -> int:
    """(length list) - number of elements."""
    check_arity("length", args, 1, 1)
    return len(_list_arg("length", args[0]))


def append(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(append list ...) - concatenation; the last argument may be any object."""
    if not args:
        return []
    result: list = []
    for xs in args[:-1]:
        result.extend(_list_arg("append", xs))
    return _append_tail(result, args[-1])


def _append_tail(items: list, tail: SchemeValue) -> SchemeValue:
    if isinstance(tail, list) and not isinstance(tail, Vector):
        return items + tail
    if isinstance(tail, tuple):
        return items + tail[0], tail[1]
    return (items, tail) if items else tail


def reverse(env: Environment, args: list[SchemeValue]) -> list:
    """(reverse list) - a new list in reverse order."""
    check_arity("reverse", args, 1, 1)
    return list(reversed(_list_arg("reverse", args[0])))


def list_ref(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(list-ref list k) - element at index k."""
    check_arity("list-ref", args, 2, 2)
    xs, k = _list_arg("list-ref", args[0]), args[1]
    if not isinstance(k, int) or not 0 <= k < len(xs):
        raise SchemeTypeError(f"list-ref: bad index {write_string(k)}")
    return xs[k]


def list_tail(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(list-tail list k) - the list without its first k elements."""
    check_arity("list-tail", args, 2, 2)
    xs, k = _list_arg("list-tail", args[0]), args[1]
    if not isinstance(k, int) or not 0 <= k <= len(xs):
        raise SchemeTypeError(f"list-tail: bad index {write_string(k)}")
    return xs[k:]


def _member(name: str, same: Callable[[SchemeValue, SchemeValue], bool]):
    def prim(env: Environment, args: list[SchemeValue]) -> SchemeValue:
        check_arity(name, args, 2, 2)
        obj, xs = args[0], _list_arg(name, args[1])
        for i, item in enumerate(xs):
            if same(obj, item):
                return xs[i:]
        return False
    prim.__doc__ = f"({name} obj list) - the first sublist whose car is obj, or #f."
    return prim


def _assoc(name: str, same: Callable[[SchemeValue, SchemeValue], bool]):
    def prim(env: Environment, args: list[SchemeValue]) -> SchemeValue:
        check_arity(name, args, 2, 2)
        obj, alist = args[0], _list_arg(name, args[1])
        for entry in alist:
            if same(obj, car(env, [entry])):
                return entry
        return False
    prim.__doc__ = f"({name} obj alist) - the first entry whose key is obj, or #f."
    return prim


def map_(env: Environment, args: list[SchemeValue]) -> list:
    """(map proc list ...) - results of applying proc element-wise."""
    check_arity("map", args, 2)
    proc, lists = args[0], [_list_arg("map", xs) for xs in args[1:]]
    interp = _interp(env)
    return [interp.apply(proc, list(items)) for items in zip(*lists)]


def for_each(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(for-each proc list ...) - apply proc element-wise for effect."""
    check_arity("for-each", args, 2)
    proc, lists = args[0], [_list_arg("for-each", xs) for xs in args[1:]]
    interp = _interp(env)
    for items in zip(*lists):
        interp.apply(proc, list(items))
    return Void


def filter_(env: Environment, args: list[SchemeValue]) -> list:
    """(filter pred list) - the elements satisfying pred."""
    check_arity("filter", args, 2, 2)
    pred, xs = args[0], _list_arg("filter", args[1])
    interp = _interp(env)
    return [x for x in xs if interp.apply(pred, [x]) is not False]


# -------------------------------
# Predicates
# -------------------------------
def _predicate(name: str, test: Callable[[SchemeValue], bool]):
    def prim(env: Environment, args: list[SchemeValue]) -> bool:
        check_arity(name, args, 1, 1)
        return test(args[0])
    prim.__doc__ = f"({name} obj) - type predicate."
    return prim


def _is_number(x: SchemeValue) -> bool:
    return isinstance(x, (int, float)) and not isinstance(x, bool)


def _is_string(x: SchemeValue) -> bool:
    return isinstance(x, str) and not isinstance(x, Char)


def _is_list(x: SchemeValue) -> bool:
    return isinstance(x, list) and not isinstance(x, Vector)


def _is_pair(x: SchemeValue) -> bool:
    return isinstance(x, tuple) or (_is_list(x) and bool(x))


def not_(env: Environment, args: list[SchemeValue]) -> bool:
    """(not obj) - #t when obj is #f."""
    check_arity("not", args, 1, 1)
    return args[0] is False


# -------------------------------
# Strings, symbols, characters
# -------------------------------
def _strings(name: str, args: list) -> list[str]:
    for a in args:
        if not _is_string(a):
            raise SchemeTypeError(f"{name}: bad string {write_string(a)}")
    return args


def string_append(env: Environment, args: list[SchemeValue]) -> str:
    """(string-append str ...) - concatenation of the strings."""
    return "".join(_strings("string-append", args))


def string_length(env: Environment, args: list[SchemeValue]) -> int:
    """(string-length str) - number of characters."""
    check_arity("string-length", args, 1, 1)
    return len(_strings("string-length", args)[0])


def substring(env: Environment, args: list[SchemeValue]) -> str:
    """(substring str start [end]) - characters from start up to end."""
    check_arity("substring", args, 2, 3)
    text = _strings("substring", args[:1])[0]
    end = args[2] if len(args) == 3 else len(text)
    return text[args[1]:end]


def string_eq(env: Environment, args: list[SchemeValue]) -> bool:
    """(string=? str ...) - true when all strings are equal."""
    strs = _strings("string=?", args)
    return all(a == b for a, b in zip(strs, strs[1:]))


def string_prefix_p(env: Environment, args: list[SchemeValue]) -> bool:
    """(string-prefix? prefix str) - true when str starts with prefix."""
    check_arity("string-prefix?", args, 2, 2)
    prefix, text = _strings("string-prefix?", args)
    return text.startswith(prefix)


def string_upcase(env: Environment, args: list[SchemeValue]) -> str:
    """(string-upcase str)"""
    check_arity("string-upcase", args, 1, 1)
    return _strings("string-upcase", args)[0].upper()


def string_downcase(env: Environment, args: list[SchemeValue]) -> str:
    """(string-downcase str)"""
    check_arity("string-downcase", args, 1, 1)
    return _strings("string-downcase", args)[0].lower()


def symbol_to_string(env: Environment, args: list[SchemeValue]) -> str:
    """(symbol->string sym) - the name of sym."""
    check_arity("symbol->string", args, 1, 1)
    if not isinstance(args[0], Symbol):
        raise SchemeTypeError(f"symbol->string: bad symbol {write_string(args[0])}")
    return args[0].id


def string_to_symbol(env: Environment, args: list[SchemeValue]) -> Symbol:
    """(string->symbol str) - the symbol named str."""
    check_arity("string->symbol", args, 1, 1)
    return Symbol(_strings("string->symbol", args)[0])


def number_to_string(env: Environment, args: list[SchemeValue]) -> str:
    """(number->string n) - printed representation of n."""
    check_arity("number->string", args, 1, 1)
    return write_string(_numbers("number->string", args)[0])


def string_to_number(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(string->number str) - the number written in str, or #f."""
    check_arity("string->number", args, 1, 1)
    text = _strings("string->number", args)[0]
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return False


# -------------------------------
# Vectors
# -------------------------------
def vector(env: Environment, args: list[SchemeValue]) -> Vector:
    """(vector obj ...) - a new vector of the arguments."""
    return Vector(args)


def vector_ref(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(vector-ref vec k) - element k of vec."""
    check_arity("vector-ref", args, 2, 2)
    vec, k = args
    if not isinstance(vec, Vector) or not isinstance(k, int) or not 0 <= k < len(vec):
        raise SchemeTypeError(f"vector-ref: bad arguments {write_string(args)}")
    return vec[k]


def vector_length(env: Environment, args: list[SchemeValue]) -> int:
    """(vector-length vec)"""
    check_arity("vector-length", args, 1, 1)
    if not isinstance(args[0], Vector):
        raise SchemeTypeError(f"vector-length: bad vector {write_string(args[0])}")
    return len(args[0])


def list_to_vector(env: Environment, args: list[SchemeValue]) -> Vector:
    """(list->vector list)"""
    check_arity("list->vector", args, 1, 1)
    return Vector(_list_arg("list->vector", args[0]))


def vector_to_list(env: Environment, args: list[SchemeValue]) -> list:
    """(vector->list vec)"""
    check_arity("vector->list", args, 1, 1)
    return list(args[0])


# -------------------------------
# Output
# -------------------------------
def _port(env: Environment, args: list, index: int) -> OutputPort:
    if len(args) > index:
        port = args[index]
        if not isinstance(port, OutputPort):
            raise SchemeTypeError(f"bad output port {write_string(port)}")
        return port
    return _interp(env).output_port


def display(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(display obj [port]) - write obj in human-readable form."""
    check_arity("display", args, 1, 2)
    _port(env, args, 1).write(display_string(args[0]))
    return Void


def write(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(write obj [port]) - write obj in read-back-compatible form."""
    check_arity("write", args, 1, 2)
    _port(env, args, 1).write(write_string(args[0]))
    return Void


def newline(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(newline [port]) - write an end of line."""
    check_arity("newline", args, 0, 1)
    _port(env, args, 0).write("\n")
    return Void


def current_output_port(env: Environment, args: list[SchemeValue]) -> OutputPort:
    """(current-output-port)"""
    check_arity("current-output-port", args, 0, 0)
    return _interp(env).output_port


def current_error_port(env: Environment, args: list[SchemeValue]) -> OutputPort:
    """(current-error-port)"""
    check_arity("current-error-port", args, 0, 0)
    return _interp(env).error_port


# -------------------------------
# Control, evaluation, errors
# -------------------------------
def procedure_p(env: Environment, args: list[SchemeValue]) -> bool:
    """(procedure? obj) - true for closures and primitives."""
    check_arity("procedure?", args, 1, 1)
    return isinstance(args[0], Procedure)


def apply_(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(apply proc arg ... list) - call proc with the spread arguments."""
    check_arity("apply", args, 2)
    proc, *fixed, last = args
    return _interp(env).apply(proc, fixed + _list_arg("apply", last))


def values(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(values obj ...) - return zero or more values."""
    if len(args) == 1:
        return args[0]
    return MultipleValues(args)


def call_with_values(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(call-with-values producer consumer) - pass producer's values to consumer."""
    check_arity("call-with-values", args, 2, 2)
    interp = _interp(env)
    produced = interp.apply(args[0], [])
    if isinstance(produced, MultipleValues):
        return interp.apply(args[1], list(produced.values))
    return interp.apply(args[1], [produced])


def error(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(error [who] message irritant ...) - signal an error."""
    check_arity("error", args, 1)
    who = None
    if isinstance(args[0], Symbol) and len(args) > 1:
        who, args = args[0], args[1:]
    message = display_string(args[0])
    if len(args) > 1:
        message += " " + " ".join(write_string(a) for a in args[1:])
    if who is not None:
        message = f"{who}: {message}"
    raise UserError(message)


def eval_(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(eval expr [module]) - evaluate expr, in module when given."""
    check_arity("eval", args, 1, 2)
    interp = _interp(env)
    module = interp.resolve_module(args[1]) if len(args) == 2 else env.module
    return interp.eval_form(args[0], module)


def load(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(load filename) - read and evaluate every form of a file."""
    check_arity("load", args, 1, 1)
    _interp(env).load(_strings("load", args)[0])
    return Void


def version(env: Environment, args: list[SchemeValue]) -> str:
    """(version) - the runtime version string."""
    check_arity("version", args, 0, 0)
    return _interp(env).version


def current_module(env: Environment, args: list[SchemeValue]) -> Module:
    """(current-module) - the module of the calling code."""
    check_arity("current-module", args, 0, 0)
    return env.module


def find_module(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(find-module name) - the module called name, or #f."""
    check_arity("find-module", args, 1, 1)
    found = _interp(env).modules.find(_interp(env).module_name_of(args[0]))
    return found if found is not None else False


def module_name(env: Environment, args: list[SchemeValue]) -> Symbol:
    """(module-name module)"""
    check_arity("module-name", args, 1, 1)
    if not isinstance(args[0], Module):
        raise SchemeTypeError(f"module-name: bad module {write_string(args[0])}")
    return Symbol(args[0].name)


def module_p(env: Environment, args: list[SchemeValue]) -> bool:
    """(module? obj)"""
    check_arity("module?", args, 1, 1)
    return isinstance(args[0], Module)


def macro_expand(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(macro-expand form) - expand the macros of form, recursively."""
    check_arity("macro-expand", args, 1, 1)
    return _interp(env).macroexpand(args[0], env, expand_all=True)


def macro_expand_1(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(macro-expand-1 form) - expand the head macro of form once."""
    check_arity("macro-expand-1", args, 1, 1)
    return _interp(env).macroexpand(args[0], env, expand_all=False)


def exit_(env: Environment, args: list[SchemeValue]) -> SchemeValue:
    """(exit [code]) - leave the runtime."""
    check_arity("exit", args, 0, 1)
    code = args[0] if args and isinstance(args[0], int) else 0
    raise SchemeExit(code)


BUILTINS: dict[str, Callable[[Environment, list[SchemeValue]], SchemeValue]] = {
    "+": add,
    "-": sub,
    "*": mul,
    "/": div,
    "quotient": _integer_op("quotient", lambda n, d: abs(n) // abs(d) * (1 if (n >= 0) == (d >= 0) else -1)),
    "remainder": _integer_op("remainder", lambda n, d: n - d * (abs(n) // abs(d) * (1 if (n >= 0) == (d >= 0) else -1))),
    "modulo": _integer_op("modulo", lambda n, d: n % d),
    "=": _compare("=", operator.eq),
    "<": _compare("<", operator.lt),
    ">": _compare(">", operator.gt),
    "<=": _compare("<=", operator.le),
    ">=": _compare(">=", operator.ge),
    "abs": abs_,
    "min": min_,
    "max": max_,
    "eq?": eq_p,
    "eqv?": eqv_p,
    "equal?": equal_p,
    "not": not_,
    "cons": cons,
    "car": car,
    "cdr": cdr,
    "cadr": cadr,
    "cddr": cddr,
    "caar": caar,
    "list": list_,
    "length": length,
    "append": append,
    "reverse": reverse,
    "list-ref": list_ref,
    "list-tail": list_tail,
    "memq": _member("memq", is_eqv),
    "member": _member("member", is_equal),
    "assq": _assoc("assq", is_eqv),
    "assoc": _assoc("assoc", is_equal),
    "map": map_,
    "for-each": for_each,
    "filter": filter_,
    "null?": _predicate("null?", lambda x: _is_list(x) and not x),
    "pair?": _predicate("pair?", _is_pair),
    "list?": _predicate("list?", _is_list),
    "number?": _predicate("number?", _is_number),
    "integer?": _predicate("integer?", lambda x: _is_number(x) and float(x).is_integer()),
    "zero?": _predicate("zero?", lambda x: _is_number(x) and x == 0),
    "even?": _predicate("even?", lambda x: isinstance(x, int) and x % 2 == 0),
    "odd?": _predicate("odd?", lambda x: isinstance(x, int) and x % 2 == 1),
    "boolean?": _predicate("boolean?", lambda x: isinstance(x, bool)),
    "symbol?": _predicate("symbol?", lambda x: isinstance(x, Symbol)),
    "string?": _predicate("string?", _is_string),
    "char?": _predicate("char?", lambda x: isinstance(x, Char)),
    "vector?": _predicate("vector?", lambda x: isinstance(x, Vector)),
    "procedure?": procedure_p,
    "string-append": string_append,
    "string-length": string_length,
    "substring": substring,
    "string=?": string_eq,
    "string-prefix?": string_prefix_p,
    "string-upcase": string_upcase,
    "string-downcase": string_downcase,
    "symbol->string": symbol_to_string,
    "string->symbol": string_to_symbol,
    "number->string": number_to_string,
    "string->number": string_to_number,
    "vector": vector,
    "vector-ref": vector_ref,
    "vector-length": vector_length,
    "list->vector": list_to_vector,
    "vector->list": vector_to_list,
    "display": display,
    "write": write,
    "newline": newline,
    "current-output-port": current_output_port,
    "current-error-port": current_error_port,
    "apply": apply_,
    "values": values,
    "call-with-values": call_with_values,
    "error": error,
    "eval": eval_,
    "load": load,
    "version": version,
    "current-module": current_module,
    "find-module": find_module,
    "module-name": module_name,
    "module?": module_p,
    "macro-expand": macro_expand,
    "macro-expand-1": macro_expand_1,
    "exit": exit_,
}
