import io

import pytest

from geiser_stklos.interpreter import Interpreter
from geiser_stklos_lsp.errors import ProtocolError, TransportClosed, UnsupportedRuntime
from geiser_stklos_lsp.replies import EvalError, EvalResult
from geiser_stklos_lsp.repl_server import ReplServer
from geiser_stklos_lsp.session import LoopbackTransport, Session, StreamTransport


def make_server(version="2.10", **kwargs):
    kwargs.setdefault("load_path", [])
    return ReplServer(Interpreter(version, stdout=io.StringIO(), stderr=io.StringIO()), **kwargs)


@pytest.fixture
def session():
    s = Session(LoopbackTransport(make_server()))
    s.start()
    yield s
    s.close()


def test_handshake_then_version(session):
    assert session.version() == "2.10"
    assert session.check_version("1.50") == "2.10"


def test_old_runtimes_are_refused():
    s = Session(LoopbackTransport(make_server("1.40")))
    s.start()
    with pytest.raises(UnsupportedRuntime):
        s.check_version("1.50")


def test_eval(session):
    assert session.eval('(begin (display "x") (* 6 7))') == EvalResult(["42"], "x")
    assert session.eval("(car '())") == EvalError("car: bad pair ()")
    session.eval("(define-module m (define y 7))")
    assert session.eval("y", "m").value == "7"


def test_completions(session):
    assert session.completions("defi") == ["define", "define-library", "define-macro", "define-module"]
    assert session.completions("no-such-prefix") == []
    assert session.module_completions("st") == ["stklos"]


def test_module_exports(session):
    session.eval("(define-module m (export f v) (define (f) 1) (define v 2))")
    exports = session.module_exports("m")
    assert exports.procs == ["f"] and exports.vars == ["v"] and exports.syntax == []


def test_autodoc_and_documentation(session):
    session.eval('(define (area w h) "Area of a rectangle." (* w h))')
    [entry] = session.autodoc(["area", "missing"], text="(area ")
    assert entry.label() == "(area w h)"
    assert entry.module == "stklos"

    doc = session.symbol_documentation("area")
    assert doc.docstring == "A procedure in module stklos.\nArea of a rectangle."
    assert doc.signature.required == ["w", "h"]
    assert session.symbol_documentation("missing") is None
    assert session.symbol_documentation("car").signature is None


def test_macroexpand(session):
    session.eval("(define-macro (twice x) `(begin ,x ,x))")
    assert session.macroexpand("(twice (f))") == "(begin (f) (f))"
    assert session.macroexpand("(twice (twice 1))", expand_all=True) == "(begin (begin 1 1) (begin 1 1))"
    session.eval("(define-macro (broken) (car '()))")
    assert session.macroexpand("(broken)") == "car: bad pair ()"


def test_load_file_and_load_path(session, tmp_path):
    (tmp_path / "lib.stk").write_text("(define from-lib 5)\n")
    assert isinstance(session.load_file("lib.stk"), EvalError)
    assert session.add_to_load_path(str(tmp_path)).value == "#t"
    assert session.load_file("lib.stk") == EvalResult([""], "")
    assert session.eval("from-lib").value == "5"


def test_start_with_a_log_file(tmp_path):
    log = tmp_path / "geiser.log"
    server = make_server()
    s = Session(LoopbackTransport(server))
    s.start(str(log))
    s.version()
    s.close()
    content = log.read_text()
    assert content.startswith(f'(geiser:start-logging "{log}")\n#t\n\n')
    assert '(version)\n"2.10"\n\n' in content
    assert server.context is None


def test_close_ends_the_runtime():
    server = make_server()
    s = Session(LoopbackTransport(server))
    s.start()
    s.close()
    assert server.context is None


def test_stream_transport_strips_prompts():
    reader = io.StringIO('stklos> "2.10"\n\nstklos> \n\nstklos> (1\n2)\n\n')
    writer = io.StringIO()
    transport = StreamTransport(reader, writer)
    s = Session(transport)
    assert s.version() == "2.10"
    assert s.request("(list 1 2)") == "(1\n2)"
    assert writer.getvalue() == "(version)\n(list 1 2)\n"
    with pytest.raises(TransportClosed):
        transport.read_reply()


def test_stream_transport_reports_a_closed_writer():
    writer = io.StringIO()
    transport = StreamTransport(io.StringIO(), writer)
    writer.close()
    with pytest.raises(TransportClosed):
        transport.send("(version)")


def test_names_that_are_not_symbols_stay_answerable(session):
    assert session.symbol_documentation(";;") is None
    assert session.symbol_documentation('a"b') is None
    assert session.autodoc([";;", "car"])[0].name == "car"
    assert session.module_exports("#|").procs == []
    assert session.symbol_documentation("car").docstring.startswith("A procedure in module SCHEME.")


def test_library_names_reach_the_runtime_as_data(session):
    session.eval("(define-library (lib util) (export z) (begin (define z 8)))")
    assert session.module_exports("(lib util)").vars == ["z"]
    assert session.symbol_documentation("z", "(lib util)").docstring == "An object in module lib/util.\n\nValue:\n8"


def test_incomplete_requests_are_refused(session):
    reply = session.eval("(+ 1")
    assert isinstance(reply, EvalError) and reply.message.startswith("incomplete request")
    assert session.macroexpand("(twice").startswith("incomplete request")
    assert session.eval("(+ 1 2)") == EvalResult(["3"], "")


def test_loopback_drops_input_that_never_completes():
    server = make_server()
    transport = LoopbackTransport(server)
    with pytest.raises(ProtocolError):
        transport.send("(display ")
    assert not server.waiting
    transport.send("(+ 2 2)")
    assert transport.read_reply() == "4"
