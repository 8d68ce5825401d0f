"""Tests for structural comparison helpers."""

import pytest

from verdict.core.comparison import (
    UNDEFINED,
    Containment,
    contains,
    containment_for,
    deep_equals,
    format_value,
    get_json_path_value,
)


def test_deep_equals_ignores_key_order():
    """Nested mappings compare by key set, not insertion order."""
    a = {"user": {"id": 1, "tags": ["x", "y"]}, "ok": True}
    b = {"ok": True, "user": {"tags": ["x", "y"], "id": 1}}

    assert deep_equals(a, b)


def test_deep_equals_is_order_sensitive_for_sequences():
    assert deep_equals([1, 2, 3], [1, 2, 3])
    assert not deep_equals([1, 2, 3], [3, 2, 1])
    assert not deep_equals([1, 2], [1, 2, 3])


@pytest.mark.parametrize("a, b", [
    (1, True),
    (0, False),
    (1, "1"),
    (None, 0),
    (None, UNDEFINED),
    ({"a": 1}, {"a": 1, "b": 2}),
    ({"a": 1}, [("a", 1)]),
    ("abc", ["a", "b", "c"]),
])
def test_deep_equals_rejects_different_values(a, b):
    assert not deep_equals(a, b)
    assert not deep_equals(b, a)


def test_deep_equals_numbers_and_scalars():
    assert deep_equals(1, 1.0)
    assert deep_equals(None, None)
    assert deep_equals(UNDEFINED, UNDEFINED)
    assert deep_equals("a", "a")
    assert deep_equals((1, 2), [1, 2])


def test_containment_variants():
    assert contains("hello world", "world", Containment.SUBSTRING)
    assert contains([{"id": 1}, {"id": 2}], {"id": 2}, Containment.ELEMENT)
    assert contains({"status": "ok", "id": 1}, {"status": "ok"}, Containment.SUBSET)
    assert contains({"status": "ok"}, "ok", Containment.VALUE)

    assert not contains({"status": "ok"}, {"status": "bad"}, Containment.SUBSET)
    assert not contains(["a"], "a", Containment.SUBSTRING)
    assert not contains("abc", "b", "element")


def test_default_containment_for_pairs():
    assert containment_for("abc", "b") == Containment.SUBSTRING
    assert containment_for([1], 1) == Containment.ELEMENT
    assert containment_for({"a": 1}, {"a": 1}) == Containment.SUBSET
    assert containment_for({"a": 1}, 1) == Containment.VALUE
    assert containment_for("abc", 1) is None
    assert containment_for(42, 4) is None
    assert not contains(42, 4)


def test_json_path_resolves_indexed_segments():
    data = {"users": [{"name": "Ann"}]}

    assert get_json_path_value(data, "users[0].name") == "Ann"
    assert get_json_path_value(data, "users.0.name") == "Ann"


@pytest.mark.parametrize("path", [
    "users[1].name",
    "users[0].email",
    "missing.value",
    "users[0].name.first",
    "count[0]",
])
def test_json_path_missing_segment_returns_undefined(path):
    data = {"users": [{"name": "Ann"}], "count": 3}

    assert get_json_path_value(data, path) is UNDEFINED


def test_json_path_keeps_null_distinct_from_missing():
    data = {"deleted_at": None}

    assert get_json_path_value(data, "deleted_at") is None
    assert get_json_path_value("not a container", "x") is UNDEFINED


def test_format_value():
    assert format_value(UNDEFINED) == "undefined"
    assert format_value({"a": [1, None]}) == '{"a": [1, null]}'
    assert format_value("x") == '"x"'
