"""Tests for value coercion and the per-type method table."""

from __future__ import annotations

import pytest

from cqrs_ddd_rest_query.coercion import (
    allowed_methods,
    coerce_value,
    parse_bool,
    parse_float,
    parse_int,
    parse_time,
)
from cqrs_ddd_rest_query.exceptions import BadFormatError, MethodNotAllowedError
from cqrs_ddd_rest_query.methods import NULL, Method
from cqrs_ddd_rest_query.registry import FieldType

# -- scalar parsers ----------------------------------------------------------


def test_parse_int():
    assert parse_int("4") == 4
    assert parse_int("+4") == 4
    assert parse_int("-12") == -12
    for bad in ("4.5", "abc", " 4", "1_000", ""):
        with pytest.raises(ValueError):
            parse_int(bad)


@pytest.mark.parametrize("text", ["5\n", "\u0665", "1\u0662"])
def test_parse_int_rejects_newline_and_non_ascii_digits(text):
    with pytest.raises(ValueError):
        parse_int(text)


def test_parse_float():
    assert parse_float("1.5") == 1.5
    assert parse_float("-2") == -2.0
    for bad in (" 1.5", "1_0", "x"):
        with pytest.raises(ValueError):
            parse_float(bad)


@pytest.mark.parametrize("text", ["1", "t", "T", "TRUE", "true", "True"])
def test_parse_bool_true(text):
    assert parse_bool(text) is True


@pytest.mark.parametrize("text", ["0", "f", "F", "FALSE", "false", "False"])
def test_parse_bool_false(text):
    assert parse_bool(text) is False


def test_parse_bool_rejects_other_spellings():
    with pytest.raises(ValueError):
        parse_bool("yes")


def test_parse_time_naive_is_utc():
    assert parse_time("2024-01-02") == "2024-01-02T00:00:00Z"
    assert parse_time("2024-01-02 10:30:00") == "2024-01-02T10:30:00Z"


def test_parse_time_converts_offsets_to_utc():
    assert parse_time("2024-01-02T10:00:00+02:00") == "2024-01-02T08:00:00Z"


def test_parse_time_rejects_garbage():
    with pytest.raises(ValueError):
        parse_time("garbage")


# -- method table ------------------------------------------------------------


def test_allowed_methods_bool():
    assert allowed_methods(FieldType.BOOL) == {Method.EQ, Method.NE}
    assert allowed_methods(FieldType.BOOL, multi=True) == frozenset()


def test_allowed_methods_multi_numeric():
    assert allowed_methods(FieldType.INT, multi=True) == {
        Method.EQ,
        Method.NE,
        Method.IN,
        Method.NIN,
    }


def test_pattern_methods_only_for_strings():
    assert Method.LIKE in allowed_methods(FieldType.STRING)
    assert Method.LIKE not in allowed_methods(FieldType.INT)
    assert Method.LIKE not in allowed_methods(FieldType.TIME)


def test_opaque_types_allow_nothing():
    for field_type in (FieldType.JSON, FieldType.OBJECT, FieldType.CUSTOM, FieldType.OBJECT_ARRAY):
        assert allowed_methods(field_type) == frozenset()


# -- coerce_value ------------------------------------------------------------


class TestCoerceValue:
    def test_int_single(self):
        assert coerce_value(FieldType.INT, Method.EQ, "4") == 4

    def test_int_multi(self):
        assert coerce_value(FieldType.INT, Method.IN, "1,2,3") == [1, 2, 3]

    def test_int_multi_comparison_not_allowed(self):
        with pytest.raises(MethodNotAllowedError):
            coerce_value(FieldType.INT, Method.GT, "1,2")

    def test_int_bad_format(self):
        with pytest.raises(BadFormatError):
            coerce_value(FieldType.INT, Method.EQ, "abc")

    def test_int_multi_bad_element(self):
        with pytest.raises(BadFormatError):
            coerce_value(FieldType.INT, Method.IN, "1,x")

    def test_float(self):
        assert coerce_value(FieldType.FLOAT, Method.LTE, "1.5") == 1.5

    def test_bool(self):
        assert coerce_value(FieldType.BOOL, Method.NE, "false") is False

    def test_bool_comparison_not_allowed(self):
        with pytest.raises(MethodNotAllowedError):
            coerce_value(FieldType.BOOL, Method.GT, "true")

    def test_bool_multi_not_allowed(self):
        with pytest.raises(MethodNotAllowedError):
            coerce_value(FieldType.BOOL, Method.EQ, "true,false")

    def test_string_keeps_wildcards(self):
        assert coerce_value(FieldType.STRING, Method.LIKE, "*a*") == "*a*"

    def test_string_multi_like_not_allowed(self):
        with pytest.raises(MethodNotAllowedError):
            coerce_value(FieldType.STRING, Method.LIKE, "a,b")

    def test_time_multi_each_element_parsed(self):
        assert coerce_value(FieldType.TIME, Method.IN, "2024-01-01,2024-01-02") == [
            "2024-01-01T00:00:00Z",
            "2024-01-02T00:00:00Z",
        ]

    def test_time_like_not_allowed(self):
        with pytest.raises(MethodNotAllowedError):
            coerce_value(FieldType.TIME, Method.LIKE, "2024-01-01")

    def test_array_single_is_a_list(self):
        assert coerce_value(FieldType.INT_ARRAY, Method.EQ, "1") == [1]

    def test_array_multi(self):
        assert coerce_value(FieldType.STRING_ARRAY, Method.NE, "a,b") == ["a", "b"]

    def test_array_comparison_not_allowed(self):
        with pytest.raises(MethodNotAllowedError):
            coerce_value(FieldType.FLOAT_ARRAY, Method.GT, "1.5")

    @pytest.mark.parametrize("field_type", list(FieldType))
    def test_null_check_legal_for_every_type(self, field_type):
        assert coerce_value(field_type, Method.IS, "null") == NULL
        assert coerce_value(field_type, Method.NOT, "NULL") == NULL

    def test_null_check_requires_null_literal(self):
        with pytest.raises(MethodNotAllowedError):
            coerce_value(FieldType.INT, Method.IS, "5")

    def test_null_check_rejects_multi(self):
        with pytest.raises(MethodNotAllowedError):
            coerce_value(FieldType.STRING, Method.NOT, "NULL,NULL")

    def test_json_comparison_not_allowed(self):
        with pytest.raises(MethodNotAllowedError):
            coerce_value(FieldType.JSON, Method.EQ, "x")

    def test_custom_delimiter(self):
        assert coerce_value(FieldType.INT, Method.EQ, "1;2", ";") == [1, 2]
        assert coerce_value(FieldType.STRING, Method.EQ, "a,b", ";") == "a,b"
