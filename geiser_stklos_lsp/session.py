"""A synchronous editor session: one request, then one reply.

The session never pipelines. Each helper builds a Command, translates it,
writes the text and blocks until the reply's blank-line terminator.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import List, Optional

from geiser_stklos.config import get_min_version, parse_version
from geiser_stklos.errors import SchemeExit, SchemeSyntaxError
from geiser_stklos.reader import IncompleteInput, read_all
from geiser_stklos_lsp import replies
from geiser_stklos_lsp.errors import ProtocolError, TransportClosed, UnsupportedRuntime
from geiser_stklos_lsp.translator import (
    PROMPT_RE,
    Command,
    exit_command,
    handshake,
    scheme_module,
    scheme_string,
    translate,
    version_command,
)

logger = logging.getLogger(__name__)


class LineTransport:
    """Reads replies line by line; subclasses supply the lines."""

    def send(self, text: str) -> None:
        raise NotImplementedError

    def _readline(self) -> str:
        raise NotImplementedError

    def read_reply(self) -> str:
        """Lines up to the blank line ending a reply, prompt stripped.

        Blank lines before the reply are left over from requests that
        printed nothing and are skipped.
        """
        lines: List[str] = []
        while True:
            line = self._readline()
            if not line:
                raise TransportClosed("runtime closed the connection")
            line = PROMPT_RE.sub("", line, count=1)
            if line.strip():
                lines.append(line)
            elif lines:
                return "".join(lines).rstrip("\n")

    def close(self) -> None:
        pass


class StreamTransport(LineTransport):
    """Talks to a runtime over a reader/writer pair of text files."""

    def __init__(self, reader, writer):
        self.reader = reader
        self.writer = writer

    def send(self, text: str) -> None:
        try:
            self.writer.write(text + "\n")
            self.writer.flush()
        except (BrokenPipeError, ValueError) as e:
            raise TransportClosed(str(e)) from e

    def _readline(self) -> str:
        return self.reader.readline()

    def close(self) -> None:
        for stream in (self.writer, self.reader):
            try:
                stream.close()
            except OSError as e:
                logger.debug("closing stream: %s", e)


class LoopbackTransport(LineTransport):
    """Runs requests through an in-process ReplServer."""

    def __init__(self, server=None):
        if server is None:
            from geiser_stklos_lsp.repl_server import ReplServer
            server = ReplServer()
        self.server = server
        self._lines: deque[str] = deque()

    def send(self, text: str) -> None:
        try:
            out = self.server.handle(text + "\n")
        except SchemeExit as e:
            self.server.close()
            raise TransportClosed(f"runtime exited with code {e.code}") from e
        if self.server.waiting:
            self.server.discard_pending()
            raise ProtocolError(f"incomplete request: {text!r}")
        self._lines.extend(out.splitlines(keepends=True))

    def _readline(self) -> str:
        return self._lines.popleft() if self._lines else ""

    def close(self) -> None:
        self.server.close()


class Session:
    def __init__(self, transport: LineTransport):
        self.transport = transport

    def request(self, text: str) -> str:
        """Send one request and read its reply.

        A request the reader cannot finish is refused before it is sent; the
        runtime would otherwise wait for the rest of it.
        """
        try:
            read_all(text)
        except IncompleteInput as e:
            raise ProtocolError(f"incomplete request: {e}") from e
        except SchemeSyntaxError as e:
            logger.debug("malformed request, the runtime answers it: %s", e)
        logger.debug("-> %s", text)
        self.transport.send(text)
        reply = self.transport.read_reply()
        logger.debug("<- %s", reply)
        return reply

    def send(self, command: Command, **where) -> str:
        return self.request(translate(command, **where))

    def start(self, log_file: Optional[str] = None) -> None:
        """Startup handshake. `(newline)` prints nothing but blank lines, so
        there is no reply to wait for unless logging was requested.
        """
        text = handshake(log_file)
        if log_file:
            self.request(text)
        else:
            self.transport.send(text)

    def version(self) -> str:
        return replies.parse_string(self.request(version_command()))

    def check_version(self, minimum: Optional[str] = None) -> str:
        minimum = minimum or get_min_version()
        version = self.version()
        if parse_version(version) < parse_version(minimum):
            raise UnsupportedRuntime(f"runtime version {version} is older than {minimum}")
        return version

    def eval(self, form: str, module: Optional[str] = None) -> replies.EvalReply:
        try:
            return replies.parse_eval(self.send(Command("eval", (module, form))))
        except ProtocolError as e:
            return replies.EvalError(str(e))

    def load_file(self, filename: str) -> replies.EvalReply:
        return replies.parse_eval(self.send(Command("load-file", (filename,))))

    def add_to_load_path(self, directory: str) -> replies.EvalReply:
        return replies.parse_eval(self.send(Command("add-to-load-path", (scheme_string(directory),))))

    def completions(self, prefix: str) -> List[str]:
        reply = self.eval(f"(geiser:completions {scheme_string(prefix)})")
        if isinstance(reply, replies.EvalError):
            logger.debug("completions failed: %s", reply.message)
            return []
        return replies.parse_strings(reply.value)

    def module_completions(self, prefix: str) -> List[str]:
        return replies.parse_strings(self.send(Command("module-completions", (scheme_string(prefix),))))

    def module_exports(self, module: str) -> replies.ModuleExports:
        return replies.parse_module_exports(self.send(Command("module-exports", (scheme_module(module),))))

    def autodoc(self, ids: List[str], *, text: Optional[str] = None, offset: Optional[int] = None) -> List[replies.AutodocEntry]:
        args = tuple(scheme_string(i) for i in ids)
        return replies.parse_autodoc(self.send(Command("autodoc", args), text=text, offset=offset))

    def symbol_documentation(self, name: str, module: Optional[str] = None) -> Optional[replies.SymbolDoc]:
        args = (scheme_string(name),) if module is None else (scheme_string(name), scheme_module(module))
        return replies.parse_symbol_documentation(self.send(Command("symbol-documentation", args)))

    def macroexpand(self, form: str, expand_all: bool = False) -> str:
        try:
            reply = self.send(Command("macroexpand", (f"'{form}", "#t" if expand_all else "#f")))
        except ProtocolError as e:
            return str(e)
        error = replies.error_of(replies.parse(reply))
        if error is not None:
            return error.message
        return replies.parse_string(reply)

    def close(self) -> None:
        try:
            self.transport.send(exit_command())
        except TransportClosed as e:
            logger.debug("runtime gone: %s", e)
        self.transport.close()
