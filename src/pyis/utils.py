from __future__ import annotations

import ctypes
import inspect
import weakref
from collections.abc import Mapping, Sequence, Set
from typing import FrozenSet, Optional, Tuple

_TEXT_TYPES = (str, bytes, bytearray)


def is_nil_like(value: object) -> bool:
    """Check if a value is None or a reference whose target is unset.

    Covers dead weak references and NULL ctypes pointers, function pointers
    and void/char pointers.
    """
    if value is None:
        return True

    match value:
        case weakref.ReferenceType():
            return value() is None
        case ctypes._Pointer() | ctypes._CFuncPtr():
            return not value
        case ctypes.c_void_p() | ctypes.c_char_p() | ctypes.c_wchar_p():
            return value.value is None
        case _:
            return False


def type_name(value: object) -> str:
    return type(value).__name__


def _has_own_eq(value: object) -> bool:
    return type(value).__eq__ is not object.__eq__


def _is_opaque(value: object) -> bool:
    return inspect.isroutine(value) or inspect.ismodule(value) or isinstance(value, type)


def _state(value: object) -> Optional[dict]:
    """Instance attributes of a plain object, or None if it has none."""
    state = dict(getattr(value, "__dict__", None) or {})
    has_slots = False

    for klass in type(value).__mro__:
        for slot in getattr(klass, "__slots__", ()):
            if slot in ("__dict__", "__weakref__"):
                continue
            has_slots = True
            if hasattr(value, slot):
                state[slot] = getattr(value, slot)

    if not state and not has_slots and not hasattr(value, "__dict__"):
        return None
    return state


def deep_equal(a: object, b: object, _seen: Optional[set] = None) -> bool:
    """Structural equality: identical types, contents compared recursively."""
    if type(a) is not type(b):
        return False

    seen = set() if _seen is None else _seen
    key = (id(a), id(b))
    if key in seen:
        return True

    match a:
        case str() | bytes() | bytearray():
            return a == b
        case Mapping():
            seen.add(key)
            if a.keys() != b.keys():
                return False
            return all(deep_equal(a[k], b[k], seen) for k in a)
        case Sequence():
            seen.add(key)
            return len(a) == len(b) and all(
                deep_equal(x, y, seen) for x, y in zip(a, b)
            )
        case Set():
            return a == b
        case _ if _is_opaque(a):
            return False
        case _ if _has_own_eq(a):
            try:
                result = a == b
            except Exception:
                return False
            return result if isinstance(result, bool) else False
        case _:
            state_a, state_b = _state(a), _state(b)
            if state_a is None or state_b is None:
                return False
            seen.add(key)
            if state_a.keys() != state_b.keys():
                return False
            return all(deep_equal(state_a[k], state_b[k], seen) for k in state_a)


def are_equal(a: object, b: object) -> bool:
    """Nil-aware equality used by the harness."""
    if is_nil_like(a) or is_nil_like(b):
        return is_nil_like(a) and is_nil_like(b)

    if deep_equal(a, b):
        return True

    # last resort for kinds deep_equal cannot look inside
    return a is b


def format_value(value: object, _active: FrozenSet[int] = frozenset()) -> str:
    """Render a value for a failure message.

    Mappings flatten to ``key:value`` pairs and sequences to space separated
    items, one level at a time; nil-like values render as ``nil``.
    """
    if is_nil_like(value):
        return "nil"

    if isinstance(value, _TEXT_TYPES):
        return str(value)

    if isinstance(value, (Mapping, Sequence, Set)):
        if id(value) in _active:
            return "..."
        active = _active | {id(value)}

        if isinstance(value, Mapping):
            parts = [f"{k}:{format_value(v, active)}" for k, v in value.items()]
        else:
            parts = [format_value(item, active) for item in value]
        return " ".join(parts).strip()

    return str(value)


def typed_values(a: object, b: object) -> Tuple[str, str]:
    """Render both operands, prefixing type names when their types differ."""
    a_value = format_value(a)
    b_value = format_value(b)

    if not (is_nil_like(a) or is_nil_like(b)) and type(a) is not type(b):
        a_value = f"{type_name(a)}({a_value})"
        b_value = f"{type_name(b)}({b_value})"

    return a_value, b_value
