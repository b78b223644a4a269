"""pytest integration.

Provides the ``is_`` (strict) and ``is_relaxed`` fixtures and the
``--nocolor`` command-line flag. Registered through the ``pytest11`` entry
point, so installing the package is enough::

    def test_add(is_):
        is_.equal(add(2, 4), 6)  # simple addition
"""

from __future__ import annotations

from typing import List

import pytest

from . import config as settings
from .harness import I
from .types import FailNow


class PytestT:
    """Host adapter for one pytest item; also collects the harness output."""

    def __init__(self, nodeid: str):
        self.nodeid = nodeid
        self.failed = False
        self.aborted = False
        self.messages: List[str] = []

    def __repr__(self) -> str:
        return f"PytestT({self.nodeid!r}, failed={self.failed})"

    def write(self, s: str) -> int:
        self.messages.append(s)
        return len(s)

    def report(self) -> str:
        return "".join(self.messages).rstrip("\n")

    def fail(self) -> None:
        self.failed = True

    def fail_now(self) -> None:
        __tracebackhide__ = True
        self.failed = True
        self.aborted = True
        raise FailNow(self.report())


_HOSTS_KEY = pytest.StashKey[List[PytestT]]()


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("pyis")
    group.addoption(
        "--nocolor",
        action="store_true",
        default=False,
        help=f"turn off colors in pyis failure messages (also ${settings.NOCOLOR_ENV})",
    )


def pytest_configure(config: pytest.Config) -> None:
    settings.set_no_color(True if config.getoption("nocolor", default=False) else None)


def pytest_unconfigure(config: pytest.Config) -> None:
    del config
    settings.set_no_color(None)


def _host(request: pytest.FixtureRequest) -> PytestT:
    t = PytestT(request.node.nodeid)
    request.node.stash.setdefault(_HOSTS_KEY, []).append(t)
    return t


@pytest.fixture
def is_(request: pytest.FixtureRequest) -> I:
    """Strict harness: the first failure aborts the test."""
    t = _host(request)
    return I(t, t.fail_now, out=t)


@pytest.fixture
def is_relaxed(request: pytest.FixtureRequest) -> I:
    """Relaxed harness: failures are collected and reported when the test returns."""
    t = _host(request)
    return I(t, t.fail, out=t)


def _pending_report(item: pytest.Item) -> str:
    """Messages of hosts that failed without raising them."""
    hosts = item.stash.get(_HOSTS_KEY, [])
    return "\n".join(t.report() for t in hosts if t.failed and not t.aborted)


@pytest.hookimpl(wrapper=True)
def pytest_runtest_call(item: pytest.Item):
    try:
        result = yield
    except BaseException:
        pending = _pending_report(item)
        if pending:
            item.add_report_section("call", "pyis", pending + "\n")
        raise

    pending = _pending_report(item)
    if pending:
        pytest.fail(pending, pytrace=False)

    return result
