from dataclasses import dataclass, field

import math

import pytest

from argonkit.fields import FieldAccess, parse_value


@dataclass
class Sample(FieldAccess):
    a: int
    b: int
    c: str
    d: bool
    e: str


@dataclass
class WithSkipped(FieldAccess):
    name: str
    ratio: float
    hidden: int = field(default=0, metadata={"skip": True})


def make_sample():
    return Sample(a=1, b=2, c="hello", d=True, e="world")


def test_get_field():
    sample = make_sample()
    assert FieldAccess.get(sample, "c") == "hello"
    assert FieldAccess.get(sample, "missing") is None


def test_iterates_fields_in_order():
    assert list(FieldAccess.__iter__(make_sample())) == [
        ("a", 1),
        ("b", 2),
        ("c", "hello"),
        ("d", True),
        ("e", "world"),
    ]


def test_set_fields_from_text():
    sample = make_sample()
    FieldAccess.set(sample, "c", "goodbye")
    FieldAccess.set(sample, "d", "false")
    assert FieldAccess.get(sample, "c") == "goodbye"
    assert FieldAccess.get(sample, "d") is False
    FieldAccess.set(sample, "a", "7")
    assert FieldAccess.get(sample, "a") == 7


def test_set_unknown_field():
    with pytest.raises(KeyError, match="does not exist"):
        FieldAccess.set(make_sample(), "z", "1")


def test_set_invalid_value_keeps_old_value():
    sample = make_sample()
    with pytest.raises(ValueError):
        FieldAccess.set(sample, "a", "x")
    assert FieldAccess.get(sample, "a") == 1


def test_skipped_fields_are_hidden():
    item = WithSkipped(name="n", ratio=0.5, hidden=3)
    assert list(FieldAccess.__iter__(item)) == [("name", "n"), ("ratio", 0.5)]
    assert FieldAccess.get(item, "hidden") is None
    with pytest.raises(KeyError):
        FieldAccess.set(item, "hidden", "4")


def test_set_float_field():
    item = WithSkipped(name="n", ratio=0.5)
    FieldAccess.set(item, "ratio", "2.25")
    assert FieldAccess.get(item, "ratio") == 2.25


@pytest.mark.parametrize(
    "text, kind, expected",
    [("42", int, 42), ("-3", int, -3), ("true", bool, True), ("false", bool, False),
     ("1.5", float, 1.5), ("1e3", float, 1000.0), ("text", str, "text")],
)
def test_parse_value(text, kind, expected):
    assert parse_value(text, kind) == expected


@pytest.mark.parametrize(
    "text, kind",
    [("True", bool), ("yes", bool), ("1_000", int), (" 1", int), ("1.0", int), ("abc", float)],
)
def test_parse_value_rejects(text, kind):
    with pytest.raises(ValueError):
        parse_value(text, kind)


def test_parse_special_float():
    assert parse_value("inf", float) == math.inf
    assert parse_value("-inf", float) == -math.inf
    assert str(parse_value("NaN", float)) == "nan"


def test_parse_unsupported_kind():
    with pytest.raises(TypeError):
        parse_value("1", list)