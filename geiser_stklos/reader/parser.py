"""
  Scheme Reader: Lexer and Parser

- Streaming, lazy parsing
- Emits Python primitives instead of Cons cells:

    - empty list -> []
    - lists -> Python list
    - dotted lists -> (list_part, tail)
    - symbols -> Symbol
    - strings -> str
    - characters -> Char
    - booleans -> True / False
    - numbers -> int/float
    - vectors -> Vector
    - quote forms -> [Symbol("quote"), expr], etc.

The same reader parses editor requests on the runtime side and replies on
the editor side.
"""

from __future__ import annotations

import re
from typing import Iterator, Optional

from geiser_stklos import SExpression
from geiser_stklos.errors import SchemeSyntaxError
from geiser_stklos.types.symbol import Symbol
from geiser_stklos.types.values import Char, Vector


class IncompleteInput(SchemeSyntaxError):
    """Raised when the source ends inside a form or a string."""


TOKEN_RE = re.compile(
    r"\s*(?:"
    r"(?P<comment>;[^\n]*)"  # single-line comment
    r"|(?P<ml_start>#\|)"  # multi-line comment start
    r"|(?P<datum_comment>#;)"  # skip next datum
    r"|(?P<quote>[\'`])"  # ' and `
    r"|(?P<unquote>,@|,)"  # , and ,@
    r"|(?P<vector>#\()"  # vector literal
    r"|(?P<lparen>[(\[])"  # ( or [
    r"|(?P<rparen>[)\]])"  # ) or ]
    r'|(?P<string>"(?:\\.|[^\\"])*")'  # double-quoted strings
    r'|(?P<brokenstring>"(?:\\.|[^\\"])*$)'  # string running to end of input
    r"|(?P<char>#\\(?:[a-zA-Z][a-zA-Z0-9]*|.))"  # character literals, named or single-char
    r"|(?P<boolean>#t(?:rue)?(?![^\s()\[\]\";])|#f(?:alse)?(?![^\s()\[\]\";]))"
    r'|(?P<symbol>[^\s()\[\]\'`",;]+)'  # fallback: symbols and numbers
    r")",
    re.DOTALL,
)

NAMED_CHARS: dict[str, str] = {
    "space": " ",
    "newline": "\n",
    "tab": "\t",
    "return": "\r",
    "nul": "\0",
    "null": "\0",
    "alarm": "\a",
    "backspace": "\b",
    "delete": "\x7f",
    "escape": "\x1b",
}

STRING_ESCAPES: dict[str, str] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "a": "\a",
    "b": "\b",
    "0": "\0",
    "\\": "\\",
    '"': '"',
}

QUOTE_FORMS: dict[str, Symbol] = {
    "'": Symbol("quote"),
    "`": Symbol("quasiquote"),
    ",": Symbol("unquote"),
    ",@": Symbol("unquote-splicing"),
}

DOT = "."

RADIXES: dict[str, int] = {"#x": 16, "#b": 2, "#o": 8, "#d": 10}


def lex(source: str) -> Iterator[tuple[str, str]]:
    """Token generator: yields (token_type, token_value) tuples."""
    pos = 0
    n = len(source)
    while pos < n:
        m = TOKEN_RE.match(source, pos)
        if m is None or m.end() == pos:
            if source[pos:].strip() == "":
                return
            raise SchemeSyntaxError(f"unexpected character at {pos}: {source[pos]!r}")
        kind = m.lastgroup
        pos = m.end()
        if kind == "comment":
            continue
        if kind == "ml_start":
            depth = 1
            while depth > 0:
                if pos >= n:
                    raise IncompleteInput("unterminated block comment")
                if source.startswith("#|", pos):
                    depth += 1
                    pos += 2
                elif source.startswith("|#", pos):
                    depth -= 1
                    pos += 2
                else:
                    pos += 1
            continue
        if kind == "brokenstring":
            raise IncompleteInput("unterminated string")
        yield kind, m.group(kind)


def _unescape(body: str) -> str:
    out = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            nxt = body[i + 1]
            if nxt == "x":
                end = body.find(";", i + 2)
                if end != -1:
                    out.append(chr(int(body[i + 2 : end], 16)))
                    i = end + 1
                    continue
            if nxt == "\n":
                # line continuation: skip the newline and leading blanks
                i += 2
                while i < len(body) and body[i] in " \t":
                    i += 1
                continue
            out.append(STRING_ESCAPES.get(nxt, nxt))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def _atom(text: str) -> SExpression:
    if text.isdecimal() or (text[0] in "+-" and text[1:].isdecimal()):
        return int(text)
    radix = RADIXES.get(text[:2])
    if radix is not None:
        try:
            return int(text[2:], radix)
        except ValueError:
            raise SchemeSyntaxError(f"bad number {text}") from None
    if text[0].isdigit() or (len(text) > 1 and text[0] in "+-." and (text[1].isdigit() or text[1] == ".")):
        try:
            return float(text)
        except ValueError:
            pass
    return Symbol(text)


class TokenStream:
    def __init__(self, token_iter: Iterator[tuple[str, str]]):
        self.tokens = iter(token_iter)
        self.buffer: list[tuple[str, str]] = []

    def peek(self) -> tuple[Optional[str], Optional[str]]:
        if not self.buffer:
            try:
                self.buffer.append(next(self.tokens))
            except StopIteration:
                return None, None
        return self.buffer[0]

    def advance(self) -> tuple[Optional[str], Optional[str]]:
        if self.buffer:
            return self.buffer.pop(0)
        return next(self.tokens, (None, None))

    def at_end(self) -> bool:
        return self.peek()[0] is None

    def parse_expr(self) -> SExpression:
        tok_type, tok_val = self.advance()
        if tok_type is None:
            raise IncompleteInput("unexpected end of input")

        if tok_type == "datum_comment":
            self.parse_expr()
            return self.parse_expr()

        if tok_type == "symbol":
            if tok_val == DOT:
                raise SchemeSyntaxError("unexpected dot")
            return _atom(tok_val)

        if tok_type in ("quote", "unquote"):
            return [QUOTE_FORMS[tok_val], self.parse_expr()]

        if tok_type == "lparen":
            return self._parse_list()

        if tok_type == "rparen":
            raise SchemeSyntaxError(f"unexpected '{tok_val}'")

        if tok_type == "string":
            return _unescape(tok_val[1:-1])

        if tok_type == "boolean":
            return tok_val.startswith("#t")

        if tok_type == "char":
            val = tok_val[2:]
            if len(val) == 1:
                return Char(val)
            if val.lower() in NAMED_CHARS:
                return Char(NAMED_CHARS[val.lower()])
            if val[0] == "x" and len(val) > 1:
                return Char(chr(int(val[1:], 16)))
            raise SchemeSyntaxError(f"bad character name #\\{val}")

        if tok_type == "vector":
            vec = Vector()
            while True:
                kind, _ = self.peek()
                if kind is None:
                    raise IncompleteInput("unexpected end of input while reading vector")
                if kind == "rparen":
                    self.advance()
                    return vec
                vec.append(self.parse_expr())

        raise SchemeSyntaxError(f"unknown token: {tok_type} {tok_val}")

    def _parse_list(self) -> SExpression:
        items: list[SExpression] = []
        while True:
            kind, val = self.peek()
            if kind is None:
                raise IncompleteInput("unexpected end of input while reading list")
            if kind == "rparen":
                self.advance()
                return items
            if kind == "symbol" and val == DOT:
                self.advance()
                if not items:
                    raise SchemeSyntaxError("bad dotted list")
                tail = self.parse_expr()
                if self.at_end():
                    raise IncompleteInput("unexpected end of input after dot")
                if self.peek()[0] != "rparen":
                    raise SchemeSyntaxError("expected ')' after dotted tail")
                self.advance()
                return make_improper(items, tail)
            items.append(self.parse_expr())

    def parse_all(self) -> Iterator[SExpression]:
        while not self.at_end():
            yield self.parse_expr()


def make_improper(items: list[SExpression], tail: SExpression) -> SExpression:
    """Build `(items . tail)`, flattening proper and improper tails."""
    if isinstance(tail, list) and not isinstance(tail, Vector):
        return items + tail
    if isinstance(tail, tuple):
        return items + tail[0], tail[1]
    return list(items), tail


def read_all(source: str) -> list[SExpression]:
    """Read every datum in `source`."""
    return list(TokenStream(lex(source)).parse_all())


def read_one(source: str) -> SExpression:
    """Read exactly the first datum in `source`."""
    stream = TokenStream(lex(source))
    if stream.at_end():
        raise IncompleteInput("no datum to read")
    return stream.parse_expr()
