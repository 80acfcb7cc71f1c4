from __future__ import annotations

"""
Lightweight structural scanner for STklos buffers; nothing is evaluated.

We tokenize the text and track open forms to answer:
- which module a position belongs to: the nearest enclosing
  (define-module NAME ...) or (define-library NAME ...)
- where the form opened at a position closes
- what the buffer defines: (define name ...), (define (name ...) ...),
  (define-macro ...), (define-module ...), (define-library ...)

The scanner is tolerant of partial buffers: unterminated strings and
unbalanced parentheses never raise.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

TOKEN_REGEX = re.compile(
    r"""\s+
      | ;[^\n]*
      | \#\|.*?\|\#
      | \#;
      | \#\\(?:[a-zA-Z][a-zA-Z0-9]*|.)
      | \#\(
      | [()\[\]]
      | ,@ | ['`,]
      | "(?:\\.|[^"\\])*"?
      | [^\s()\[\]'`,";]+
    """,
    re.VERBOSE | re.DOTALL,
)
CLOSED_STRING = re.compile(r'"(?:\\.|[^"\\])*"', re.DOTALL)

OPENERS = {"(": ")", "#(": ")", "[": "]"}
CLOSERS = (")", "]")

MODULE_HEADS = ("define-module", "define-library")
DEFINE_HEADS = ("define", "define-macro") + MODULE_HEADS


@dataclass
class SymbolDef:
    name: str
    kind: str  # "var" | "function" | "macro" | "module"
    line: int
    col: int


@dataclass
class DocumentIndex:
    symbols: Dict[str, SymbolDef] = field(default_factory=dict)
    modules: List[SymbolDef] = field(default_factory=list)
    paren_balance: int = 0
    has_unmatched_quote: bool = False


def _iter_tokens(text: str) -> Iterator[Tuple[str, int, int]]:
    for m in TOKEN_REGEX.finditer(text):
        tok = m.group(0)
        if tok.isspace() or tok.startswith(";") or tok.startswith("#|"):
            continue
        yield tok, m.start(), m.end()


def _position_from_offset(text: str, offset: int) -> Tuple[int, int]:
    # Return (line, col), 0-based
    line = text.count("\n", 0, offset)
    last_nl = text.rfind("\n", 0, offset)
    col = offset if last_nl == -1 else offset - last_nl - 1
    return line, col


def offset_from_position(text: str, line: int, col: int) -> int:
    offset = 0
    for _ in range(line):
        nl = text.find("\n", offset)
        if nl == -1:
            return len(text)
        offset = nl + 1
    return min(offset + col, len(text))


def find_matching_close(text: str, open_pos: int) -> int:
    """Offset of the delimiter closing the form opened at `open_pos`.

    `(` and `[` share one depth count: a `]` may close a `(`. When the form
    never closes the end of the text is returned.
    """
    stack: List[str] = []
    for tok, start, _ in _iter_tokens(text[open_pos:]):
        if tok in OPENERS:
            stack.append(OPENERS[tok])
        elif tok in CLOSERS:
            if not stack:
                return open_pos + start
            expected = stack.pop()
            if tok != expected:
                logger.debug("'%s' closes a form opened for '%s' at %d", tok, expected, open_pos + start)
            if not stack:
                return open_pos + start
    return len(text)


@dataclass
class _Frame:
    start: int
    head: Optional[str] = None
    name: Optional[str] = None


def _open_frames(text: str, offset: int) -> List[_Frame]:
    """The forms still open at `offset`, outermost first."""
    stack: List[_Frame] = []
    for tok, start, end in _iter_tokens(text):
        if start >= offset:
            break
        parent = stack[-1] if stack else None
        if tok in OPENERS:
            if parent is not None and parent.head in MODULE_HEADS and parent.name is None:
                close = find_matching_close(text, start)
                parent.name = text[start:close + 1]
            stack.append(_Frame(start))
        elif tok in CLOSERS:
            if stack:
                stack.pop()
        elif parent is not None and tok not in ("'", "`", ",", ",@", "#;"):
            if parent.head is None:
                parent.head = tok
            elif parent.head in MODULE_HEADS and parent.name is None:
                parent.name = tok
    return stack


def find_module(text: str, offset: int) -> Optional[str]:
    """Name of the module the code at `offset` lives in, as written, or None."""
    for frame in reversed(_open_frames(text, offset)):
        if frame.head in MODULE_HEADS and frame.name is not None:
            return frame.name
    return None


def build_index(text: str) -> DocumentIndex:
    idx = DocumentIndex()
    tokens = list(_iter_tokens(text))

    i = 0
    while i < len(tokens):
        tok, start, end = tokens[i]
        if tok in OPENERS:
            idx.paren_balance += 1
            head = tokens[i + 1][0] if i + 1 < len(tokens) else None
            if head in DEFINE_HEADS and i + 2 < len(tokens):
                name_tok, ns, ne = tokens[i + 2]
                kind = "var"
                if name_tok in OPENERS:
                    if head in MODULE_HEADS:
                        close = find_matching_close(text, ns)
                        name_tok = text[ns:close + 1]
                    elif i + 3 < len(tokens):
                        # (define (name . formals) ...)
                        name_tok, ns, ne = tokens[i + 3]
                        kind = "function"
                    else:
                        name_tok = None
                if head == "define-macro":
                    kind = "macro"
                if name_tok and name_tok not in OPENERS and name_tok not in CLOSERS and not name_tok.startswith('"'):
                    line, col = _position_from_offset(text, ns)
                    if head in MODULE_HEADS:
                        idx.modules.append(SymbolDef(name=name_tok, kind="module", line=line, col=col))
                    else:
                        idx.symbols[name_tok] = SymbolDef(name=name_tok, kind=kind, line=line, col=col)
        elif tok in CLOSERS:
            idx.paren_balance -= 1
        elif tok.startswith('"') and not CLOSED_STRING.fullmatch(tok):
            idx.has_unmatched_quote = True
        i += 1

    return idx
