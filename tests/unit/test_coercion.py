from __future__ import annotations

import math

import pytest

from data_alchemist.validation.coercion import (
    JSONParseError,
    display_text,
    is_integer_array,
    parse_json,
    to_fixed,
    to_number,
    to_text,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("3", 3.0),
        (" 2.5 ", 2.5),
        ("", 0.0),
        (4, 4.0),
        ("1e2", 100.0),
        ("-7", -7.0),
        ("0x3", 3.0),
        ("0X1f", 31.0),
        ("0b11", 3.0),
        ("0o17", 15.0),
    ],
)
def test_to_number_parses_numeric_cells(value, expected):
    assert to_number(value) == expected


@pytest.mark.parametrize("value", [None, "abc", "3x", "[1]", "-0x3", "0x", "\u0663", object()])
def test_to_number_garbage_is_nan(value):
    assert math.isnan(to_number(value))


def test_to_text_treats_falsy_cells_as_empty():
    assert to_text(None) == ""
    assert to_text(0) == ""
    assert to_text(float("nan")) == ""
    assert to_text("T1,T2") == "T1,T2"
    assert to_text(7) == "7"


def test_display_text_drops_trailing_zero_for_integral_floats():
    assert display_text(5.0) == "5"
    assert display_text(2.5) == "2.5"
    assert display_text(None) == ""


def test_parse_json_is_strict():
    assert parse_json('{"a": 1}') == {"a": 1}
    with pytest.raises(JSONParseError):
        parse_json("{a: 1}")
    with pytest.raises(JSONParseError):
        parse_json("[NaN]")


def test_is_integer_array():
    assert is_integer_array([1, 2, 3])
    assert is_integer_array(["1", None])  # null は 0 扱い
    assert not is_integer_array([1.5])
    assert not is_integer_array(["a"])
    assert not is_integer_array({"a": 1})


@pytest.mark.parametrize(
    "number,expected",
    [(3.25, "3.3"), (3.0, "3.0"), (4.5, "4.5"), (3.24, "3.2"), (-3.25, "-3.3"), (float("nan"), "NaN")],
)
def test_to_fixed_rounds_halves_up(number, expected):
    assert to_fixed(number) == expected
