"""Line-sensitive source for the source index tests.

CAUTION: DO NOT EDIT. Tests rely on specific line numbers in this file.
"""

import pyis


def test_something(t):
    # this comment will be extracted
    pass


def test_something_else(t):
    is_ = pyis.new(t)
    a, b = 1, 2

    def get_b():
        return b

    is_.true(a == get_b())  # should be the same


def test_something_else_too(t):
    is_ = pyis.new(t)
    a, b = 1, 2

    def get_b():
        return b

    is_.true(a == get_b())


def test_multiline(t):
    is_ = pyis.new(t)
    is_.true(
        1 + 1
        == 3
    )  # spans lines
    is_.equal(len("ab"), 2)  # not a boolean check
    err = None
    is_.no_err(err)
    ##  double marker
