"""Translation of editor commands into the Scheme text sent to the runtime.

Every command becomes exactly one expression. Arguments are Scheme text
already, except for file names and module names, which are quoted here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional, Tuple

from geiser_stklos.errors import SchemeSyntaxError
from geiser_stklos.reader import read_one, write_string
from geiser_stklos.types.symbol import Symbol
from geiser_stklos_lsp import indexer

PROMPT_RE = re.compile(r"^[^\s>]*> ")

NO_VALUES = "(geiser:no-values)"

# Requests the runtime cannot answer.
UNSUPPORTED = frozenset(
    {
        "no-values",
        "symbol-location",
        "module-location",
        "completions",
        "callers",
        "callees",
        "generic-methods",
    }
)


@dataclass(frozen=True)
class Command:
    verb: str
    args: Tuple[Optional[str], ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "args", tuple(self.args))


def scheme_string(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def scheme_module(module: Optional[str]) -> str:
    """Quoted module name re-printed from its datum, so it is always one
    complete form. Text that is not a name is sent as a string.
    """
    if not module:
        return "#f"
    try:
        datum = read_one(module)
    except SchemeSyntaxError:
        return scheme_string(module)
    if isinstance(datum, (Symbol, list)):
        return f"'{write_string(datum)}"
    return scheme_string(module)


def _eval(args: Tuple[Optional[str], ...]) -> str:
    if not args:
        raise ValueError("eval needs a form")
    module, form = (None, args[0]) if len(args) == 1 else (args[0], args[1])
    return f"(geiser:eval {scheme_module(module)} '{form})"


def _autodoc(args: Tuple[Optional[str], ...], text: Optional[str], offset: Optional[int]) -> str:
    module = indexer.find_module(text, offset if offset is not None else len(text)) if text else None
    ids = " ".join(a for a in args if a)
    target = scheme_module(module) if module else "(current-module)"
    return f"(geiser:autodoc '({ids}) {target})"


def translate(command: Command, *, text: Optional[str] = None, offset: Optional[int] = None) -> str:
    """The Scheme expression for `command`.

    `text` and `offset` locate the cursor in the edited buffer; autodoc uses
    them to find the module the cursor is in.
    """
    verb, args = command.verb, command.args
    if verb in ("eval", "compile"):
        return _eval(args)
    if verb in ("load-file", "compile-file"):
        if not args or args[0] is None:
            raise ValueError(f"{verb} needs a file name")
        return f"(geiser:load-file {scheme_string(args[0])})"
    if verb == "autodoc":
        return _autodoc(args, text, offset)
    if verb in UNSUPPORTED:
        return NO_VALUES
    rest = "".join(f" {a}" for a in args if a is not None)
    return f"(geiser:{verb}{rest})"


def handshake(log_file: Optional[str] = None) -> str:
    """Sent once on connection: turn on protocol logging, or do nothing."""
    if log_file:
        return f"(geiser:start-logging {scheme_string(log_file)})"
    return "(newline)"


def enter_module(module: str) -> str:
    return f"(select-module {module})"


def import_module(module: str) -> str:
    return f"(import {module})"


def exit_command() -> str:
    return "(exit 0)"


def version_command() -> str:
    return "(version)"

