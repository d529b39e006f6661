"""
Field Paths - Addressing and immutable update of nested state.

A path is a tuple of keys walked from the root of a state:
- str keys index mappings, or name attributes on other objects
- int keys index sequences

Updates never touch the original: every container along the path is
copied, everything off the path is shared.
"""

from __future__ import annotations
from collections.abc import Mapping, Sequence
from copy import copy
from dataclasses import fields, is_dataclass, replace
from numbers import Real
from typing import Any, Union

PathKey = Union[str, int]
FieldPath = tuple[PathKey, ...]
PathLike = Union[FieldPath, list, str]


class PathError(LookupError):
    """A path does not lead to a value in the state."""

    def __init__(self, path: FieldPath, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{format_path(path)}: {reason}")


def parse_path(path: PathLike) -> FieldPath:
    """
    Normalize a path.

    Dotted strings are split and all-digit segments become ints:
    "items.0.x" -> ("items", 0, "x").
    """
    if isinstance(path, str):
        if path == "":
            return ()
        return tuple(int(part) if part.isdigit() else part for part in path.split("."))
    return tuple(path)


def format_path(path: FieldPath) -> str:
    return ".".join(str(key) for key in path) or "<root>"


def _is_sequence(obj: Any) -> bool:
    return isinstance(obj, Sequence) and not isinstance(obj, (str, bytes))


def _step(obj: Any, key: PathKey, path: FieldPath) -> Any:
    if isinstance(obj, Mapping):
        if key not in obj:
            raise PathError(path, f"missing key {key!r}")
        return obj[key]
    if _is_sequence(obj):
        if isinstance(key, str) and key in getattr(obj, "_fields", ()):
            return getattr(obj, key)
        if not isinstance(key, int):
            raise PathError(path, f"sequence index must be an int, got {key!r}")
        try:
            return obj[key]
        except IndexError:
            raise PathError(path, f"index {key} out of range")
    if isinstance(key, str) and hasattr(obj, key):
        return getattr(obj, key)
    raise PathError(path, f"cannot index {type(obj).__name__} with {key!r}")


def get_at_path(state: Any, path: PathLike) -> Any:
    """Read the value at path."""
    path = parse_path(path)
    current = state
    for depth, key in enumerate(path):
        current = _step(current, key, path[: depth + 1])
    return current


def has_path(state: Any, path: PathLike) -> bool:
    try:
        get_at_path(state, path)
    except PathError:
        return False
    return True


def get_number_at_path(state: Any, path: PathLike) -> float:
    """Read a numeric leaf; bools and non-numbers are rejected."""
    path = parse_path(path)
    value = get_at_path(state, path)
    if isinstance(value, bool) or not isinstance(value, Real):
        raise PathError(path, f"expected a number, found {type(value).__name__}")
    return value


def _replace_child(obj: Any, key: PathKey, value: Any, path: FieldPath) -> Any:
    if isinstance(obj, Mapping):
        if key not in obj:
            raise PathError(path, f"missing key {key!r}")
        new_obj = dict(obj)
        new_obj[key] = value
        return new_obj
    if isinstance(obj, tuple):
        if isinstance(key, str):
            return obj._replace(**{key: value})
        items = list(obj)
        items[key] = value
        if hasattr(obj, "_fields"):
            return type(obj)(*items)
        return tuple(items)
    if isinstance(obj, list):
        new_list = obj.copy()
        new_list[key] = value
        return new_list
    if is_dataclass(obj) and not isinstance(obj, type):
        return replace(obj, **{key: value})
    new_obj = copy(obj)
    setattr(new_obj, key, value)
    return new_obj


def set_at_path(state: Any, path: PathLike, value: Any) -> Any:
    """Return a copy of state with the value at path replaced."""
    path = parse_path(path)
    if not path:
        return value
    # Validates the whole path before copying anything.
    parents = [state]
    for depth, key in enumerate(path[:-1]):
        parents.append(_step(parents[-1], key, path[: depth + 1]))
    _step(parents[-1], path[-1], path)

    new_value = value
    for depth in range(len(path) - 1, -1, -1):
        new_value = _replace_child(parents[depth], path[depth], new_value, path[: depth + 1])
    return new_value


def lerp_state(a: Any, b: Any, t: float) -> Any:
    """
    Interpolate between two structurally similar states.

    Numbers are interpolated linearly. Mappings with the same keys,
    sequences of the same length and dataclasses of the same type are
    interpolated member-wise. Anything else snaps to the nearer end.
    """
    if isinstance(a, Real) and isinstance(b, Real) and not isinstance(a, bool) and not isinstance(b, bool):
        return a + (b - a) * t
    if isinstance(a, Mapping) and isinstance(b, Mapping) and a.keys() == b.keys():
        return {key: lerp_state(a[key], b[key], t) for key in a}
    if _is_sequence(a) and _is_sequence(b) and type(a) is type(b) and len(a) == len(b):
        items = [lerp_state(x, y, t) for x, y in zip(a, b)]
        if isinstance(a, tuple):
            return type(a)(*items) if hasattr(a, "_fields") else tuple(items)
        return items
    if is_dataclass(a) and not isinstance(a, type) and type(a) is type(b):
        changes = {
            f.name: lerp_state(getattr(a, f.name), getattr(b, f.name), t)
            for f in fields(a)
            if f.init
        }
        return replace(a, **changes)
    return a if t < 0.5 else b
