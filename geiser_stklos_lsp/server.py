from __future__ import annotations

"""
A pygls-based Language Server answering from a live STklos runtime.

Features:
- Text synchronization with diagnostics for unmatched parens and quotes
- Hover: symbol documentation, looked up in the module the cursor is in
- Completion: symbols, or module names after (import  and (select-module
- Signature Help: autodoc for the procedure being called
- Document Symbols: from the structural index
- didSave: the file is loaded into the runtime

The runtime runs in-process behind a Session, exactly as an editor would
drive it over a pipe.
"""

import argparse
import logging
import re
import sys
from dataclasses import dataclass
from typing import Dict, List, Optional

from pygls.server import LanguageServer
from pygls.uris import to_fs_path
from lsprotocol.types import (
    TEXT_DOCUMENT_COMPLETION,
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_CLOSE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_DID_SAVE,
    TEXT_DOCUMENT_DOCUMENT_SYMBOL,
    TEXT_DOCUMENT_HOVER,
    TEXT_DOCUMENT_SIGNATURE_HELP,
    CompletionItem,
    CompletionItemKind,
    CompletionList,
    CompletionOptions,
    CompletionParams,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    DidSaveTextDocumentParams,
    DocumentSymbol,
    DocumentSymbolParams,
    Hover,
    HoverParams,
    MarkupContent,
    MarkupKind,
    MessageType,
    ParameterInformation,
    Position,
    Range,
    SignatureHelp,
    SignatureHelpOptions,
    SignatureHelpParams,
    SignatureInformation,
    SymbolKind,
)

from geiser_stklos.config import get_load_path, get_log_file, is_source_file
from geiser_stklos_lsp.errors import GeiserError
from geiser_stklos_lsp.indexer import DocumentIndex, build_index, find_module, offset_from_position
from geiser_stklos_lsp.replies import EvalError
from geiser_stklos_lsp.session import LoopbackTransport, Session
from geiser_stklos_lsp.repl_server import ReplServer

logger = logging.getLogger(__name__)

MODULE_COMPLETION_RE = re.compile(r"\((?:import|select-module)\s+\(?([^\s()]*)$")


@dataclass
class DocumentState:
    text: str
    index: DocumentIndex


class GeiserLanguageServer(LanguageServer):
    CMD_NAME = "geiser-stklos-ls"

    def __init__(self):
        super().__init__(self.CMD_NAME, "v0.1")
        self.documents: Dict[str, DocumentState] = {}
        self._session: Optional[Session] = None

    @property
    def session(self) -> Session:
        if self._session is None:
            repl = ReplServer(load_path=get_load_path(), log_file=None)
            self._session = Session(LoopbackTransport(repl))
            self._session.start(get_log_file())
            self._session.check_version()
        return self._session


ls = GeiserLanguageServer()


# --- Text sync ---
def _update(uri: str) -> DocumentState:
    text = ls.workspace.get_text_document(uri).source
    state = DocumentState(text=text, index=build_index(text))
    ls.documents[uri] = state
    _publish_diagnostics(uri, state)
    return state


@ls.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(params: DidOpenTextDocumentParams):
    _update(params.text_document.uri)


@ls.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: DidChangeTextDocumentParams):
    _update(params.text_document.uri)


@ls.feature(TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: DidCloseTextDocumentParams):
    uri = params.text_document.uri
    ls.documents.pop(uri, None)
    ls.publish_diagnostics(uri, [])


@ls.feature(TEXT_DOCUMENT_DID_SAVE)
def did_save(params: DidSaveTextDocumentParams):
    path = to_fs_path(params.text_document.uri)
    if not path or not is_source_file(path):
        return
    try:
        reply = ls.session.load_file(path)
    except GeiserError as e:
        ls.show_message_log(f"load failed: {e}", MessageType.Error)
        return
    if isinstance(reply, EvalError):
        ls.show_message(f"{path}: {reply.message}", MessageType.Error)


# --- Diagnostics ---
def _mk_range(line: int, col: int) -> Range:
    return Range(start=Position(line=line, character=col), end=Position(line=line, character=col + 1))


def _publish_diagnostics(uri: str, state: DocumentState):
    idx = state.index
    diags: List[Diagnostic] = []

    if idx.paren_balance != 0:
        diags.append(
            Diagnostic(
                range=_mk_range(0, 0),
                message="Unmatched parentheses detected",
                severity=DiagnosticSeverity.Warning,
                source=ls.CMD_NAME,
            )
        )

    if idx.has_unmatched_quote:
        diags.append(
            Diagnostic(
                range=_mk_range(0, 0),
                message="Unmatched quote detected",
                severity=DiagnosticSeverity.Warning,
                source=ls.CMD_NAME,
            )
        )

    ls.publish_diagnostics(uri, diags)


# --- Hover ---
@ls.feature(TEXT_DOCUMENT_HOVER)
def on_hover(params: HoverParams) -> Optional[Hover]:
    state = ls.documents.get(params.text_document.uri)
    if not state:
        return None

    word, _ = _extract_word_at(state.text, params.position)
    if not word:
        return None

    module = find_module(state.text, _offset(state.text, params.position))
    try:
        doc = ls.session.symbol_documentation(word, module)
    except GeiserError as e:
        logger.debug("hover for %s failed: %s", word, e)
        return None
    if doc is None:
        return None

    contents = doc.docstring
    if doc.signature is not None and doc.signature.has_args:
        contents = f"{doc.signature.label()}\n\n{contents}"
    return Hover(contents=MarkupContent(kind=MarkupKind.PlainText, value=contents))


# --- Completion ---
@ls.feature(TEXT_DOCUMENT_COMPLETION, CompletionOptions(trigger_characters=["(", " "]))
def on_completion(params: CompletionParams) -> CompletionList:
    state = ls.documents.get(params.text_document.uri)
    items: List[CompletionItem] = []
    if not state:
        return CompletionList(is_incomplete=False, items=items)

    prefix_text = _get_line_prefix(state.text, params.position)
    try:
        m = MODULE_COMPLETION_RE.search(prefix_text)
        if m:
            for name in ls.session.module_completions(m.group(1)):
                items.append(CompletionItem(label=name, kind=CompletionItemKind.Module))
            return CompletionList(is_incomplete=False, items=items)

        word = _current_word(prefix_text)
        for name in ls.session.completions(word):
            items.append(CompletionItem(label=name, kind=CompletionItemKind.Function))
    except GeiserError as e:
        logger.debug("completion failed: %s", e)

    seen = {item.label for item in items}
    for name, sdef in state.index.symbols.items():
        if name not in seen:
            kind = CompletionItemKind.Function if sdef.kind == "function" else CompletionItemKind.Variable
            items.append(CompletionItem(label=name, kind=kind))

    return CompletionList(is_incomplete=False, items=items)


# --- Signature Help ---
@ls.feature(TEXT_DOCUMENT_SIGNATURE_HELP, SignatureHelpOptions(trigger_characters=["(", " "]))
def on_signature_help(params: SignatureHelpParams) -> Optional[SignatureHelp]:
    state = ls.documents.get(params.text_document.uri)
    if not state:
        return None

    line_text = _get_line_prefix(state.text, params.position)
    callee = _extract_callee_name(line_text)
    if not callee:
        return None

    offset = _offset(state.text, params.position)
    try:
        entries = ls.session.autodoc([callee], text=state.text, offset=offset)
    except GeiserError as e:
        logger.debug("autodoc for %s failed: %s", callee, e)
        return None
    if not entries or entries[0].value is not None:
        return None

    entry = entries[0]
    parameters = [ParameterInformation(label=p) for p in entry.required + entry.optional + entry.key]
    label = entry.label() if entry.has_args else f"({entry.name} ...)"
    return SignatureHelp(
        signatures=[SignatureInformation(label=label, parameters=parameters)],
        active_signature=0,
        active_parameter=0,
    )


# --- Document Symbols ---
_SYMBOL_KINDS = {
    "function": SymbolKind.Function,
    "macro": SymbolKind.Function,
    "var": SymbolKind.Variable,
    "module": SymbolKind.Module,
}


@ls.feature(TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def on_document_symbols(params: DocumentSymbolParams) -> Optional[List[DocumentSymbol]]:
    state = ls.documents.get(params.text_document.uri)
    if not state:
        return None
    symbols: List[DocumentSymbol] = []

    for sdef in state.index.modules + list(state.index.symbols.values()):
        rng = Range(
            start=Position(line=sdef.line, character=sdef.col),
            end=Position(line=sdef.line, character=sdef.col + len(sdef.name)),
        )
        symbols.append(
            DocumentSymbol(
                name=sdef.name,
                kind=_SYMBOL_KINDS[sdef.kind],
                range=rng,
                selection_range=rng,
            )
        )
    return symbols


# --- Helpers ---

def _offset(text: str, pos: Position) -> int:
    return offset_from_position(text, pos.line, pos.character)


def _get_line_prefix(text: str, pos: Position) -> str:
    # Return the text from start of line up to pos
    lines = text.splitlines(True)
    if pos.line >= len(lines):
        return ""
    return lines[pos.line][: pos.character]


def _current_word(prefix: str) -> str:
    m = re.search(r"[^\s()\[\]'`,\"]*$", prefix)
    return m.group(0) if m else ""


def _extract_word_at(text: str, pos: Position) -> tuple[Optional[str], Position]:
    lines = text.splitlines(True)
    if pos.line >= len(lines):
        return None, pos
    line = lines[pos.line]
    i = pos.character
    start = i
    while start > 0 and line[start - 1] not in " \t()[]'`,\"\n\r":
        start -= 1
    end = i
    while end < len(line) and line[end] not in " \t()[]'`,\"\n\r":
        end += 1
    word = line[start:end]
    return (word if word else None), Position(line=pos.line, character=start)


def _extract_callee_name(prefix: str) -> Optional[str]:
    # find last '(' and take following token
    lp = max(prefix.rfind("("), prefix.rfind("["))
    if lp == -1:
        return None
    tail = prefix[lp + 1 :].strip()
    if not tail:
        return None
    return re.split(r"[\s()\[\]]", tail, maxsplit=1)[0] or None


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="geiser-stklos-ls", description="Language server for STklos buffers.")
    parser.add_argument("--tcp", action="store_true", help="serve over TCP instead of stdio")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=2087)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if args.tcp:
        ls.start_tcp(args.host, args.port)
    else:
        ls.start_io()
    return 0


if __name__ == "__main__":
    sys.exit(main())
