"""Lightweight assertions with diagnostics recovered from the test source.

Comments on assertion lines are used to describe failures::

    import pyis

    def test_signin(t):
        is_ = pyis.new(t)

        signedin, err = is_signed_in(ctx)
        is_.no_err(err)            # is_signed_in error
        is_.equal(signedin, True)  # must be signed in

        body = read_body(r)
        is_.true("Hi there" in body)

Under pytest the ``is_`` and ``is_relaxed`` fixtures from :mod:`pyis.plugin`
build the harness for you.
"""

from .harness import I, new, new_relaxed
from .types import FailNow, T

__all__ = [
    "FailNow",
    "I",
    "T",
    "new",
    "new_relaxed",
]
