import os

import pytest

from geiser_stklos import RUNTIME_VERSION
from geiser_stklos.config import (
    get_min_version,
    get_runtime_version,
    is_source_file,
    parse_version,
    paths_from_env,
)


@pytest.mark.parametrize(
    "text,expected",
    [("2.10", (2, 10)), ("1.7.0-rc", (1, 7, 0)), ("1.60", (1, 60)), ("", ())],
)
def test_parse_version(text, expected):
    assert parse_version(text) == expected


def test_versions_compare_numerically():
    assert parse_version("2.10") > parse_version("2.9")
    assert parse_version("1.40") < parse_version("1.50")


def test_environment_overrides(monkeypatch):
    monkeypatch.delenv("GEISER_STKLOS_RUNTIME_VERSION", raising=False)
    monkeypatch.delenv("GEISER_STKLOS_MIN_VERSION", raising=False)
    assert get_runtime_version() == RUNTIME_VERSION
    assert get_min_version() == "1.50"
    monkeypatch.setenv("GEISER_STKLOS_RUNTIME_VERSION", "1.60")
    monkeypatch.setenv("GEISER_STKLOS_MIN_VERSION", "1.70")
    assert get_runtime_version() == "1.60"
    assert get_min_version() == "1.70"


def test_paths_from_env(monkeypatch):
    monkeypatch.delenv("SOME_PATH", raising=False)
    assert paths_from_env("SOME_PATH", ["/a"]) == ["/a"]
    monkeypatch.setenv("SOME_PATH", os.pathsep.join(["/x", " /y ", ""]))
    assert paths_from_env("SOME_PATH", ["/a"]) == ["/x", "/y"]


def test_is_source_file():
    assert is_source_file("lib.stk")
    assert is_source_file("/src/app.stklos")
    assert not is_source_file("notes.scm")
