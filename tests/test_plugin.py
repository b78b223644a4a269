from __future__ import annotations

from textwrap import dedent

import pytest

from pyis import config
from pyis.plugin import PytestT
from pyis.types import FailNow, T


# entry point blocked, module loaded directly: same result installed or not
PLUGIN_ARGS = ("-p", "no:pyis", "-p", "pyis.plugin")


def test_pytest_t_satisfies_host_contract() -> None:
    t = PytestT("node")
    assert isinstance(t, T)

    t.write("\tx.py:1: failed\n")
    t.fail()
    assert t.failed
    with pytest.raises(FailNow, match="x.py:1: failed"):
        t.fail_now()
    assert t.aborted


def test_strict_fixture_aborts_with_message(pytester: pytest.Pytester) -> None:
    pytester.makepyfile(
        test_strict=dedent(
            """\
            def test_add(is_):
                is_.equal(1 + 1, 3)  # simple addition
                is_.fail()  # not reached
            """
        )
    )

    result = pytester.runpytest(*PLUGIN_ARGS, "--nocolor", "--tb=short")
    result.assert_outcomes(failed=1)
    result.stdout.fnmatch_lines(["*test_strict.py:2: 1 + 1(2) != 3 // simple addition*"])
    result.stdout.no_fnmatch_line("*failed // not reached*")


def test_relaxed_fixture_reports_every_failure(pytester: pytest.Pytester) -> None:
    pytester.makepyfile(
        test_relaxed=dedent(
            """\
            def test_many(is_relaxed):
                is_relaxed.equal(1, 2)  # first
                is_relaxed.true(2 < 1)  # second
            """
        )
    )

    result = pytester.runpytest(*PLUGIN_ARGS, "--nocolor")
    result.assert_outcomes(failed=1)
    result.stdout.fnmatch_lines(
        [
            "*test_relaxed.py:2: 1 != 2 // first*",
            "*test_relaxed.py:3: not true: 2 < 1 // second*",
        ]
    )


def test_relaxed_failures_survive_an_exception(pytester: pytest.Pytester) -> None:
    pytester.makepyfile(
        test_raising=dedent(
            """\
            def test_raises(is_relaxed):
                is_relaxed.equal(1, 2)  # first diagnostic
                raise RuntimeError("boom")
            """
        )
    )

    result = pytester.runpytest(*PLUGIN_ARGS, "--nocolor")
    result.assert_outcomes(failed=1)
    result.stdout.fnmatch_lines(
        [
            "*RuntimeError: boom*",
            "*Captured pyis call*",
            "*test_raising.py:2: 1 != 2 // first diagnostic*",
        ]
    )


def test_relaxed_failures_survive_a_strict_failure(pytester: pytest.Pytester) -> None:
    pytester.makepyfile(
        test_mixed=dedent(
            """\
            def test_mixed(is_, is_relaxed):
                is_relaxed.equal(1, 2)  # relaxed one
                is_.fail()  # strict one
            """
        )
    )

    result = pytester.runpytest(*PLUGIN_ARGS, "--nocolor", "--tb=short")
    result.assert_outcomes(failed=1)
    result.stdout.fnmatch_lines(
        [
            "*test_mixed.py:3: failed // strict one*",
            "*Captured pyis call*",
            "*test_mixed.py:2: 1 != 2 // relaxed one*",
        ]
    )


def test_passing_fixtures(pytester: pytest.Pytester) -> None:
    pytester.makepyfile(
        test_passing=dedent(
            """\
            def test_ok(is_, is_relaxed):
                is_.equal({"value": [1]}, {"value": [1]})
                is_relaxed.no_err(None)
                is_relaxed.true(True)
            """
        )
    )

    result = pytester.runpytest(*PLUGIN_ARGS)
    result.assert_outcomes(passed=1)


def test_color_is_on_by_default(pytester: pytest.Pytester, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(config.NOCOLOR_ENV, raising=False)
    pytester.makepyfile(
        test_color=dedent(
            """\
            def test_color(is_):
                is_.fail()  # colored
            """
        )
    )

    result = pytester.runpytest_inprocess(*PLUGIN_ARGS)
    result.assert_outcomes(failed=1)
    assert "\u001b[32m // colored" in result.stdout.str()


def test_nocolor_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(config.NOCOLOR_ENV, "1")
    assert config.no_color()

    monkeypatch.setenv(config.NOCOLOR_ENV, "off")
    assert not config.no_color()

    config.set_no_color(True)
    try:
        assert config.no_color()
    finally:
        config.set_no_color(None)
