# ruff: noqa: E402

# Assertions in the helper module get pytest's rewriting too. Must run before
# the helpers are imported.

import pytest

pytest.register_assert_rewrite("tests.helpers")

from functools import reduce
from pathlib import Path
from typing import Iterator

from pyinstrument.profiler import Profiler
from pyinstrument.renderers.speedscope import SpeedscopeRenderer
from pyinstrument.session import Session

from symsolver import Interrupt, Z3Solver

PROFILES = Path.cwd() / ".profiles"


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--profile",
        action="store_true",
        help="write a speedscope profile of each test to .profiles/",
    )


def write_profile(session: Session, name: str) -> None:
    renderer = SpeedscopeRenderer(processor_options={"filter_threshold": 0})
    (PROFILES / f"{name}.json").write_text(renderer.render(session), encoding="utf-8")


@pytest.fixture(scope="session")
def profiles() -> Iterator[list[Session]]:
    sessions: list[Session] = []
    yield sessions
    if sessions:
        write_profile(reduce(Session.combine, sessions), "combined")


# https://pyinstrument.readthedocs.io/en/latest/guide.html#profile-pytest-tests
@pytest.fixture(autouse=True)
def profiled(request: pytest.FixtureRequest) -> Iterator[None]:
    if not request.config.getoption("profile"):
        yield
        return

    sessions: list[Session] = request.getfixturevalue("profiles")
    PROFILES.mkdir(exist_ok=True)
    profiler = Profiler()
    profiler.start()
    yield  # run test
    session = profiler.stop()
    sessions.append(session)
    write_profile(session, request.node.name)


@pytest.fixture
def interrupt() -> Interrupt:
    return Interrupt()


@pytest.fixture
def solver(interrupt: Interrupt) -> Iterator[Z3Solver]:
    solver = Z3Solver(interrupt=interrupt)
    yield solver
    interrupt.clear()
