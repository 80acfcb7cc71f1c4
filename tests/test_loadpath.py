import os

from geiser_stklos.reader import write_string
from geiser_stklos.responder import loadpath
from geiser_stklos.responder.context import ResponderContext
from geiser_stklos.types.symbol import Symbol


def reply(interp, code):
    return write_string(interp.eval(code))


def test_resolve_searches_the_load_path_in_order(tmp_path):
    first, second = tmp_path / "first", tmp_path / "second"
    first.mkdir()
    second.mkdir()
    (second / "lib.stk").write_text("")
    context = ResponderContext(load_path=[str(first), str(second)])
    assert loadpath.resolve(context, "lib.stk") == os.path.join(str(second), "lib.stk")
    (first / "lib.stk").write_text("")
    assert loadpath.resolve(context, "lib.stk") == os.path.join(str(first), "lib.stk")
    assert loadpath.resolve(context, "other.stk") is None


def test_absolute_names_skip_the_load_path(tmp_path):
    source = tmp_path / "abs.stk"
    source.write_text("")
    context = ResponderContext(load_path=[])
    assert loadpath.resolve(context, str(source)) == str(source)
    assert loadpath.resolve(context, str(tmp_path / "gone.stk")) is None


def test_add_path_moves_existing_entries_to_the_front(tmp_path):
    one, two = str(tmp_path / "one"), str(tmp_path / "two")
    os.mkdir(one)
    os.mkdir(two)
    context = ResponderContext(load_path=[one, two])
    assert loadpath.add_path(context, two) is True
    assert context.load_path == [two, one]
    assert loadpath.add_path(context, str(tmp_path / "missing")) is False
    assert context.load_path == [two, one]


def test_load_path_defaults_to_the_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("GEISER_STKLOS_LOAD_PATH", os.pathsep.join([str(tmp_path), "/opt/scheme"]))
    assert ResponderContext().load_path == [str(tmp_path), "/opt/scheme"]


def test_load_file_after_adding_its_directory(geiser, tmp_path):
    (tmp_path / "greet.stk").write_text('(define greeting "hello")\n(display "loaded")\n')
    missing = reply(geiser, '(geiser:load-file "greet.stk")')
    assert missing == "((error (key . \"cannot find `greet.stk' in the load path\")))"

    assert reply(geiser, f'(geiser:add-to-load-path "{tmp_path}")') == '((result "#t") (output . ""))'
    assert reply(geiser, '(geiser:load-file "greet.stk")') == '((result "loaded") (output . "loaded"))'
    assert geiser.eval("greeting") == "hello"


def test_add_to_load_path_rejects_non_directories(geiser, tmp_path):
    assert reply(geiser, f'(geiser:add-to-load-path "{tmp_path / "nope"}")') == '((result "#f") (output . ""))'


def test_load_file_reports_errors_from_the_file(geiser, tmp_path):
    source = tmp_path / "bad.stk"
    source.write_text("(define ok 1)\n(car '())\n")
    assert reply(geiser, f'(geiser:load-file "{source}")').startswith("((error (key . \"car: bad pair")
    assert geiser.eval("ok") == 1


def test_load_file_keeps_the_current_module(geiser, tmp_path):
    source = tmp_path / "mod.stk"
    source.write_text("(define-module from-file)\n(select-module from-file)\n(define inside 1)\n")
    geiser.eval(f'(geiser:load-file "{source}")')
    assert geiser.current_module is geiser.default_module
    assert Symbol("inside") in geiser.modules.find("from-file").vars
