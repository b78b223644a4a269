"""Call-site resolution: find the nearest frame outside the harness."""

from __future__ import annotations

import logging
import os
import sys
from types import CodeType, FrameType
from typing import Iterable, Optional, Tuple

log = logging.getLogger(__name__)

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__)) + os.sep


def is_internal(filename: str) -> bool:
    """True when *filename* belongs to the harness package itself."""
    return os.path.abspath(filename).startswith(PACKAGE_DIR)


def _external_frame(skip: Iterable[CodeType] = ()) -> Optional[FrameType]:
    skipped = frozenset(skip)
    frame: Optional[FrameType] = sys._getframe(1)

    while frame is not None:
        code = frame.f_code
        if not is_internal(code.co_filename) and code not in skipped:
            return frame
        frame = frame.f_back

    return None


def call_site(skip: Iterable[CodeType] = ()) -> Optional[Tuple[str, int]]:
    """Return (path, line) of the first caller outside the harness.

    Frames running a code object in *skip* (registered helpers) are passed
    over as well. Returns None if the stack runs out first.
    """
    frame = _external_frame(skip)
    if frame is None:
        log.debug("event=call_site_missing")
        return None

    try:
        line = frame.f_lineno
        if line is None:
            line = frame.f_code.co_firstlineno
        return frame.f_code.co_filename, line
    finally:
        del frame


def caller_code() -> Optional[CodeType]:
    """Code object of the function that called into the harness."""
    frame = _external_frame()
    if frame is None:
        return None

    try:
        return frame.f_code
    finally:
        del frame
