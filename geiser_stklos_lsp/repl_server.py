from __future__ import annotations

"""
Line-oriented REPL server hosting the STklos runtime for Geiser.

Protocol: Scheme text in, printed Scheme data out.
- Request: one or more complete forms; a form may span several lines and
  input is buffered until it is complete.
- Response: each value printed with `write` on its own line, then a blank
  line. A form with no value prints only the blank line. A form that fails
  prints `((error (key . "message")))` instead.

Serves stdio by default, or a single TCP client at a time with --port. One
interpreter lives for the whole process so definitions persist; the
responder context (load path, protocol log) lives for one connection.
"""

import argparse
import io
import logging
import os
import socket
import sys
from typing import List, Optional

from geiser_stklos.config import PROMPT, get_log_file
from geiser_stklos.errors import SchemeExit, SchemeSyntaxError
from geiser_stklos.interpreter import Interpreter
from geiser_stklos.reader import IncompleteInput, read_all, write_string
from geiser_stklos.responder import install
from geiser_stklos.responder.context import ResponderContext
from geiser_stklos.responder.envelope import ErrorReply
from geiser_stklos.types.values import value_list

logger = logging.getLogger(__name__)

HOST = "127.0.0.1"


class ReplServer:
    def __init__(
        self,
        interp: Interpreter | None = None,
        *,
        load_path: Optional[List[str]] = None,
        log_file: Optional[str] = None,
        prompt: str = PROMPT,
    ):
        # Keep a single interpreter to maintain session state
        self.interp = interp if interp is not None else Interpreter()
        self.load_path = load_path
        self.log_file = log_file
        self.prompt = prompt
        self.context: Optional[ResponderContext] = None
        self._pending = ""
        self.open()

    def open(self) -> None:
        """Set up the responder context for a new connection."""
        if self.context is None:
            self.context = ResponderContext(self.load_path, self.log_file)
            install(self.interp, self.context)

    def close(self) -> None:
        if self.context is not None:
            self.context.close()
            self.context = None
        self._pending = ""

    @property
    def waiting(self) -> bool:
        """True while a form is incomplete and more input is needed."""
        return bool(self._pending.strip())

    def discard_pending(self) -> str:
        """Drop buffered input that will not be completed; answer what was dropped."""
        dropped, self._pending = self._pending, ""
        if dropped.strip():
            logger.info("discarding incomplete input: %r", dropped)
        return dropped

    def handle(self, text: str) -> str:
        """Feed input; answer the output and replies of every form it completes."""
        self.open()
        self._pending += text
        try:
            forms = read_all(self._pending)
        except IncompleteInput:
            return ""
        except SchemeSyntaxError as e:
            request, self._pending = self._pending, ""
            return self._reply(request, [ErrorReply(str(e)).to_sexp()])
        request, self._pending = self._pending, ""
        return "".join(self._eval(request, form) for form in forms)

    def _eval(self, request: str, form) -> str:
        buffer = io.StringIO()
        try:
            with self.interp.capture_output(buffer):
                value = self.interp.eval_form(form)
        except Exception as e:
            logger.debug("evaluation failed: %s", e, exc_info=True)
            values = [ErrorReply(str(e)).to_sexp()]
        else:
            values = value_list(value)
        return buffer.getvalue() + self._reply(request, values)

    def _reply(self, request: str, values: list) -> str:
        reply = "".join(write_string(v) + "\n" for v in values) + "\n"
        self.context.log_exchange(request, reply)
        return reply

    def serve_stream(self, reader, writer, interactive: bool = True) -> None:
        """Serve one connection until end of input or `(exit)`."""
        self.open()
        try:
            while True:
                if interactive and not self.waiting:
                    writer.write(self.prompt)
                    writer.flush()
                line = reader.readline()
                if not line:
                    break
                writer.write(self.handle(line))
                writer.flush()
        finally:
            self.close()

    def serve_tcp(self, host: str, port: int) -> None:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            s.bind((host, port))
            s.listen(1)
            logger.info("listening on %s:%d", host, port)
            while True:
                conn, addr = s.accept()
                logger.info("connection from %s:%d", *addr)
                with conn, conn.makefile("r", encoding="utf-8") as reader, conn.makefile("w", encoding="utf-8") as writer:
                    try:
                        self.serve_stream(reader, writer)
                    except (BrokenPipeError, ConnectionResetError) as e:
                        logger.info("connection lost: %s", e)


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="geiser-stklos-repl", description="Geiser REPL server for the STklos runtime.")
    parser.add_argument("--port", type=int, help="serve one TCP client at a time instead of stdio")
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--log-file", default=get_log_file(), help="duplicate requests and replies to this file")
    parser.add_argument(
        "--load-path",
        action="append",
        default=None,
        help=f"directories searched by load-file, separated by '{os.pathsep}'; may repeat",
    )
    parser.add_argument("--runtime-version", default=None, help="version the runtime reports")
    parser.add_argument("--no-prompt", action="store_true", help="do not print the prompt")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    load_path = None
    if args.load_path:
        load_path = [p for entry in args.load_path for p in entry.split(os.pathsep) if p]
    server = ReplServer(
        Interpreter(args.runtime_version),
        load_path=load_path,
        log_file=args.log_file,
    )
    try:
        if args.port is not None:
            server.serve_tcp(args.host, args.port)
        else:
            server.serve_stream(sys.stdin, sys.stdout, interactive=not args.no_prompt)
    except SchemeExit as e:
        return e.code if isinstance(e.code, int) else 0
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
