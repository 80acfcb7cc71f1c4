import io

import pytest

from geiser_stklos.interpreter import Interpreter
from geiser_stklos.responder import install
from geiser_stklos.responder.context import ResponderContext

# Runtimes on either side of the macro-layout change. Tests taking the
# `any_interp` fixture run once against each.
MODERN_VERSION = "2.10"
LEGACY_VERSION = "1.60"


@pytest.fixture
def interp():
    return Interpreter(MODERN_VERSION, stdout=io.StringIO(), stderr=io.StringIO())


@pytest.fixture
def legacy_interp():
    return Interpreter(LEGACY_VERSION, stdout=io.StringIO(), stderr=io.StringIO())


@pytest.fixture(params=[MODERN_VERSION, LEGACY_VERSION], ids=["modern", "legacy"])
def any_interp(request):
    return Interpreter(request.param, stdout=io.StringIO(), stderr=io.StringIO())


@pytest.fixture
def context():
    ctx = ResponderContext(load_path=[])
    yield ctx
    ctx.close()


@pytest.fixture
def geiser(any_interp, context):
    """An interpreter with the geiser:* procedures installed."""
    install(any_interp, context)
    return any_interp
