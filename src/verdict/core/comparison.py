"""Structural comparison helpers shared by the assertion recorders."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from enum import Enum
from numbers import Number
from typing import Any, Optional


class _Undefined:
    """Marker for a value that does not exist (distinct from JSON null)."""

    _instance: Optional["_Undefined"] = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()

_INDEXED_SEGMENT = re.compile(r"^(\w+)\[(\d+)\]$")


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def deep_equals(a: Any, b: Any) -> bool:
    """Compare two values structurally.

    Sequences compare element by element in order, mappings need the same key
    set and equal values, and scalars compare strictly: booleans never equal
    numbers and ``None`` only equals ``None``.
    """
    if a is b:
        return True
    if a is None or b is None or a is UNDEFINED or b is UNDEFINED:
        return False

    if isinstance(a, Mapping) or isinstance(b, Mapping):
        if not (isinstance(a, Mapping) and isinstance(b, Mapping)):
            return False
        if len(a) != len(b):
            return False
        for key in a:
            if key not in b:
                return False
            if not deep_equals(a[key], b[key]):
                return False
        return True

    if _is_sequence(a) or _is_sequence(b):
        if not (_is_sequence(a) and _is_sequence(b)):
            return False
        if len(a) != len(b):
            return False
        return all(deep_equals(x, y) for x, y in zip(a, b))

    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b

    if isinstance(a, Number) and isinstance(b, Number):
        return a == b

    if type(a) is not type(b) and not (isinstance(a, str) and isinstance(b, str)):
        return False

    return a == b


class Containment(str, Enum):
    """How ``contains`` interprets its container."""
    SUBSTRING = "substring"
    ELEMENT = "element"
    SUBSET = "subset"
    VALUE = "value"


def contains_substring(container: Any, item: Any) -> bool:
    return isinstance(container, str) and isinstance(item, str) and item in container


def contains_element(container: Any, item: Any) -> bool:
    return _is_sequence(container) and any(deep_equals(element, item) for element in container)


def contains_subset(container: Any, item: Any) -> bool:
    """Every key of ``item`` is present in ``container`` with an equal value."""
    if not (isinstance(container, Mapping) and isinstance(item, Mapping)):
        return False
    return all(key in container and deep_equals(container[key], value) for key, value in item.items())


def contains_value(container: Any, item: Any) -> bool:
    return isinstance(container, Mapping) and any(deep_equals(value, item) for value in container.values())


_CONTAINMENT_CHECKS = {
    Containment.SUBSTRING: contains_substring,
    Containment.ELEMENT: contains_element,
    Containment.SUBSET: contains_subset,
    Containment.VALUE: contains_value,
}


def containment_for(container: Any, item: Any) -> Optional[Containment]:
    """Pick the default containment variant for a container/item pair."""
    if isinstance(container, str):
        return Containment.SUBSTRING if isinstance(item, str) else None
    if _is_sequence(container):
        return Containment.ELEMENT
    if isinstance(container, Mapping):
        return Containment.SUBSET if isinstance(item, Mapping) else Containment.VALUE
    return None


def contains(container: Any, item: Any, mode: Optional[Containment | str] = None) -> bool:
    """Check containment using an explicit variant or the default for the pair."""
    if mode is None:
        mode = containment_for(container, item)
        if mode is None:
            return False
    return _CONTAINMENT_CHECKS[Containment(mode)](container, item)


def get_json_path_value(value: Any, path: str) -> Any:
    """Resolve a dotted path such as ``users[0].name`` against a value tree.

    Returns ``UNDEFINED`` as soon as a segment is missing or the current value
    is not a container.
    """
    current = value

    for segment in path.split("."):
        if not isinstance(current, Mapping) and not _is_sequence(current):
            return UNDEFINED

        match = _INDEXED_SEGMENT.match(segment)
        if match:
            name, index = match.group(1), int(match.group(2))
            current = _child(current, name)
            if not _is_sequence(current):
                return UNDEFINED
            current = current[index] if index < len(current) else UNDEFINED
        else:
            current = _child(current, segment)

        if current is UNDEFINED:
            return UNDEFINED

    return current


def _child(container: Any, key: str) -> Any:
    if isinstance(container, Mapping):
        return container.get(key, UNDEFINED)
    if key.isdigit():
        index = int(key)
        return container[index] if index < len(container) else UNDEFINED
    return UNDEFINED


def format_value(value: Any) -> str:
    """Render a value for an assertion message."""
    if value is UNDEFINED:
        return "undefined"
    try:
        return json.dumps(value, default=repr, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(value)
