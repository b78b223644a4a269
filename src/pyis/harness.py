"""The test helper harness.

Comments on assertion lines are used as failure descriptions. The failing
test::

    def test_sum(is_):
        a, b = 1, 2
        is_.equal(a, b)  # expect to be the same

writes::

        test_sum.py:3: a(1) != b(2) // expect to be the same
"""

from __future__ import annotations

import os
import sys
from types import CodeType
from typing import Callable, List, Optional, Set, TextIO

from . import config
from .callers import call_site, caller_code
from .source_index import load_arguments, load_comment, resolve_call
from .types import ArgSource, CallSite, T
from .utils import are_equal, format_value, typed_values

ARGS_PLACEHOLDER = "$ARGS"

COLOR_NORMAL = "\u001b[39m"
COLOR_COMMENT = "\u001b[32m"
COLOR_FILE = "\u001b[90m"
COLOR_TYPE = "\u001b[90m"


class I:
    """Assertion helper bound to one test.

    In strict mode (``new``) a failure calls ``t.fail_now()`` and aborts the
    test; in relaxed mode (``new_relaxed``) it calls ``t.fail()`` so several
    failures can be reported by one test.
    """

    def __init__(self, t: T, fail: Callable[[], None], out: Optional[TextIO] = None, colorful: Optional[bool] = None):
        self.t = t
        self._fail = fail
        self.out = out if out is not None else sys.stdout
        self.colorful = (not config.no_color()) if colorful is None else colorful
        self._helpers: Set[CodeType] = set()

    def __repr__(self) -> str:
        mode = "strict" if self._fail == self.t.fail_now else "relaxed"
        return f"<I {mode} colorful={self.colorful}>"

    # ---------- reporting ----------

    def log(self, *args: object) -> None:
        s = self.decorate("".join(str(a) for a in args))
        self.out.write(s)
        self._fail()

    def _call_site(self, method: str) -> Optional[CallSite]:
        """The recorded call at the call site, if it is a call to *method*."""
        site = call_site(self._helpers)
        if site is None:
            return None
        found = resolve_call(*site)
        if found is None or found.method != method:
            return None
        return found

    def decorate(self, s: str) -> str:
        """Prefix *s* with the call site, expand arguments, append the comment.

        Continuation lines are indented one extra tab.
        """
        site = call_site(self._helpers)
        if site is not None:
            path, line = site
            file = os.path.basename(path)
        else:
            path, line, file = "", 1, "???"

        parts: List[str] = ["\t"]
        if self.colorful:
            parts.append(COLOR_FILE)
        parts.append(f"{file}:{line}: ")
        if self.colorful:
            parts.append(COLOR_NORMAL)

        lines = s.split("\n")
        if len(lines) > 1 and lines[-1] == "":
            lines = lines[:-1]

        for i, text in enumerate(lines):
            if i > 0:
                parts.append("\n\t\t")
            if ARGS_PLACEHOLDER in text:
                args, _ = load_arguments(path, line) if site is not None else ("", False)
                text = text.replace(ARGS_PLACEHOLDER, args)
            parts.append(text)

        comment, ok = load_comment(path, line) if site is not None else ("", False)
        if ok:
            if self.colorful:
                parts.append(COLOR_COMMENT)
            parts.append(" // ")
            parts.append(comment)
            if self.colorful:
                parts.append(COLOR_NORMAL)

        parts.append("\n")
        return "".join(parts)

    def _label(self, arg: Optional[ArgSource], value: str) -> str:
        if arg is None or arg.literal or not arg.text or arg.text == value:
            return value
        if self.colorful:
            return f"{arg.text}{COLOR_TYPE}({value}){COLOR_NORMAL}"
        return f"{arg.text}({value})"

    # ---------- assertions ----------

    def fail(self) -> None:
        """Fail immediately::

            is_.fail()  # TODO: write this test

        In relaxed mode execution continues, but the test still fails.
        """
        self.log("failed")

    def true(self, expression: object) -> None:
        """Assert that the expression is truthy.

        The expression source is reported on failure::

            is_.true(val is not None)  # val should never be None

        writes ``your_test.py:123: not true: val is not None``.
        """
        if not expression:
            self.log(f"not true: {ARGS_PLACEHOLDER}")

    def equal(self, a: object, b: object) -> None:
        """Assert that a and b are equal::

            a = greet("Mat")
            is_.equal(a, "Hi Mat")  # greeting

        writes ``your_test.py:123: a(Hey Mat) != Hi Mat // greeting``.
        """
        if are_equal(a, b):
            return

        site = self._call_site("equal")
        args = site.args if site is not None else []
        a_arg = args[0] if len(args) > 0 else None
        b_arg = args[1] if len(args) > 1 else None

        a_value, b_value = typed_values(a, b)
        self.log(f"{self._label(a_arg, a_value)} != {self._label(b_arg, b_value)}")

    def no_err(self, err: Optional[BaseException]) -> None:
        """Assert that err is None::

            val, err = get_val()
            is_.no_err(err)  # get_val error

        writes ``your_test.py:123: error: not found(val, err = get_val()) // get_val error``.
        """
        if err is None:
            return

        site = self._call_site("no_err")
        if site is None or not site.args:
            self.log(format_value(err))
            return

        source = site.binding or site.args[0].text
        if self.colorful:
            self.log(f"error: {format_value(err)}{COLOR_TYPE}({source}){COLOR_NORMAL}")
        else:
            self.log(f"error: {format_value(err)}({source})")

    # ---------- subtests & helpers ----------

    def helper(self) -> None:
        """Mark the calling function as a helper.

        Failures raised from within it are reported at the helper's call site.
        """
        code = caller_code()
        if code is not None:
            self._helpers.add(code)

    def new(self, t: T) -> "I":
        """Strict harness for a subtest, e.g. inside ``t.run``-style blocks."""
        return new(t)

    def new_relaxed(self, t: T) -> "I":
        return new_relaxed(t)


def new(t: T) -> I:
    """Make a strict harness: failures call ``t.fail_now()``."""
    return I(t, t.fail_now)


def new_relaxed(t: T) -> I:
    """Make a relaxed harness: failures call ``t.fail()``."""
    return I(t, t.fail)
