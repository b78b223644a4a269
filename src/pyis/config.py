"""Process-wide settings for the harness.

Color output is on unless turned off with ``PYIS_NOCOLOR`` or pytest's
``--nocolor`` flag (see :mod:`pyis.plugin`).
"""

from __future__ import annotations

import os as _os
from typing import Optional

NOCOLOR_ENV = "PYIS_NOCOLOR"

_FALSY = ("", "0", "false", "no", "off")

_no_color_override: Optional[bool] = None


def env_flag(name: str) -> bool:
    value = _os.environ.get(name)
    if value is None:
        return False
    return value.strip().lower() not in _FALSY


def set_no_color(value: Optional[bool]) -> None:
    """Override the environment setting; None restores it."""
    global _no_color_override
    _no_color_override = value


def no_color() -> bool:
    if _no_color_override is not None:
        return _no_color_override
    return env_flag(NOCOLOR_ENV)
