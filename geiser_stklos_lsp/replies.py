"""Parsing of runtime replies into editor-side data.

Replies are read with the runtime's own reader, then picked apart as
association lists. Anything that does not have the expected shape raises
ProtocolError.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

from geiser_stklos import SExpression
from geiser_stklos.errors import SchemeSyntaxError
from geiser_stklos.reader import read_one
from geiser_stklos_lsp.errors import ProtocolError


@dataclass
class EvalResult:
    values: List[str]
    output: str = ""

    @property
    def value(self) -> str:
        return self.values[0] if self.values else ""


@dataclass
class EvalError:
    message: str


@dataclass
class ModuleExports:
    modules: List[str] = field(default_factory=list)
    procs: List[str] = field(default_factory=list)
    syntax: List[str] = field(default_factory=list)
    vars: List[str] = field(default_factory=list)


@dataclass
class AutodocEntry:
    name: str
    required: List[str] = field(default_factory=list)
    optional: List[str] = field(default_factory=list)
    key: List[str] = field(default_factory=list)
    module: Optional[str] = None
    value: Optional[str] = None

    @property
    def has_args(self) -> bool:
        return bool(self.required or self.optional or self.key)

    def label(self) -> str:
        """`(name a b ...)`, as shown in signature help."""
        return "(" + " ".join([self.name, *self.required, *self.optional, *self.key]) + ")"


@dataclass
class SymbolDoc:
    signature: Optional[AutodocEntry]
    docstring: str


EvalReply = Union[EvalResult, EvalError]


def parse(text: str) -> SExpression:
    try:
        return read_one(text)
    except SchemeSyntaxError as e:
        raise ProtocolError(f"unreadable reply {text!r}: {e}") from e


def _key(entry: SExpression) -> Optional[str]:
    if isinstance(entry, tuple):
        return str(entry[0][0])
    if isinstance(entry, list) and entry and not isinstance(entry[0], (list, tuple)):
        return str(entry[0])
    return None


def _cdr(entry: SExpression) -> SExpression:
    if isinstance(entry, tuple):
        items, tail = entry
        return (items[1:], tail) if len(items) > 1 else tail
    return entry[1:]


def _assoc(alist: SExpression, key: str) -> Optional[SExpression]:
    if not isinstance(alist, list):
        return None
    for entry in alist:
        if _key(entry) == key:
            return entry
    return None


def _names(items: SExpression) -> List[str]:
    return [str(x[0]) if isinstance(x, list) and x else str(x) for x in items]


def error_of(datum: SExpression) -> Optional[EvalError]:
    """The EvalError carried by `((error (key . "message")))`, if any."""
    entry = _assoc(datum, "error")
    if entry is None:
        return None
    key = _assoc(_cdr(entry), "key")
    message = _cdr(key) if key is not None else ""
    return EvalError(message if isinstance(message, str) else str(message))


def parse_eval(text: str) -> EvalReply:
    datum = parse(text)
    error = error_of(datum)
    if error is not None:
        return error
    result = _assoc(datum, "result")
    output = _assoc(datum, "output")
    if result is None or output is None:
        raise ProtocolError(f"not a result envelope: {text!r}")
    out = _cdr(output)
    return EvalResult([str(v) for v in _cdr(result)], out if isinstance(out, str) else "")


def parse_strings(text: str) -> List[str]:
    datum = parse(text)
    if not isinstance(datum, list) or not all(isinstance(s, str) for s in datum):
        raise ProtocolError(f"not a list of strings: {text!r}")
    return list(datum)


def parse_string(text: str) -> str:
    datum = parse(text)
    if not isinstance(datum, str):
        raise ProtocolError(f"not a string: {text!r}")
    return datum


def parse_module_exports(text: str) -> ModuleExports:
    datum = parse(text)
    exports = ModuleExports()
    for bucket in ("modules", "procs", "syntax", "vars"):
        entry = _assoc(datum, bucket)
        if entry is None:
            raise ProtocolError(f"no {bucket} in export listing: {text!r}")
        setattr(exports, bucket, _names(_cdr(entry)))
    return exports


def _autodoc_entry(entry: SExpression) -> AutodocEntry:
    if not isinstance(entry, list) or not entry:
        raise ProtocolError(f"bad autodoc entry {entry!r}")
    result = AutodocEntry(name=str(entry[0]))
    props = entry[1:]
    args = _assoc(props, "args")
    if args is not None and len(args) > 1:
        for section in args[1]:
            setattr(result, _key(section), _names(_cdr(section)))
    module = _assoc(props, "module")
    if module is not None and len(module) > 1:
        result.module = str(module[1])
    value = _assoc(props, "value")
    if value is not None:
        result.value = _cdr(value)
    return result


def parse_autodoc(text: str) -> List[AutodocEntry]:
    datum = parse(text)
    if not isinstance(datum, list):
        raise ProtocolError(f"not an autodoc list: {text!r}")
    return [_autodoc_entry(entry) for entry in datum]


def parse_symbol_documentation(text: str) -> Optional[SymbolDoc]:
    """None when the runtime answered "" for an unbound name."""
    datum = parse(text)
    if datum == "":
        return None
    signature = _assoc(datum, "signature")
    docstring = _assoc(datum, "docstring")
    if signature is None or docstring is None:
        raise ProtocolError(f"not a documentation reply: {text!r}")
    sig = _cdr(signature)
    return SymbolDoc(
        signature=_autodoc_entry(sig) if isinstance(sig, list) and sig else None,
        docstring=_cdr(docstring),
    )
