"""Tests for exceptions module."""

from __future__ import annotations

import pytest

from cqrs_ddd_rest_query.exceptions import (
    BadFormatError,
    EmptyValueError,
    FilterNotAllowedError,
    FilterNotFoundError,
    MethodNotAllowedError,
    NotInScopeError,
    RequiredError,
    RestQueryError,
    UnknownMethodError,
    ValidationNotFoundError,
)

# -- Keying --------------------------------------------------------------------


def test_unkeyed_message():
    assert str(BadFormatError()) == "bad format"


def test_with_key():
    err = EmptyValueError().with_key("id")
    assert str(err) == "id: empty value"
    assert err.key == "id"


def test_first_key_wins():
    err = NotInScopeError("puper").with_key("s[in]").with_key("s")
    assert str(err) == "s[in]: puper: not in scope"


def test_to_dict():
    err = RequiredError(key="limit")
    assert err.to_dict() == {"error": "REQUIRED", "key": "limit", "message": "required"}


@pytest.mark.parametrize(
    ("cls", "message"),
    [
        (BadFormatError, "bad format"),
        (MethodNotAllowedError, "method not allowed"),
        (EmptyValueError, "empty value"),
        (FilterNotAllowedError, "filter not allowed"),
        (ValidationNotFoundError, "validation not found"),
        (RequiredError, "required"),
    ],
)
def test_default_messages(cls, message):
    err = cls()
    assert isinstance(err, RestQueryError)
    assert err.message == message


# -- UnknownMethodError ----------------------------------------------------------


def test_unknown_method_suggestions():
    err = UnknownMethodError("lik", ["LIKE", "ILIKE", "EQ"], key="u[lik]")
    assert str(err) == "u[lik]: unknown method"
    d = err.to_dict()
    assert d["error"] == "UNKNOWN_METHOD"
    assert d["method"] == "lik"
    assert "LIKE" in d["suggestions"]


def test_unknown_method_no_matches():
    assert UnknownMethodError("zzzz", ["EQ", "NE"]).suggestions == []


# -- FilterNotFoundError ---------------------------------------------------------


def test_filter_not_found_suggestions():
    err = FilterNotFoundError("stauts", ["status", "id"], key="stauts")
    assert err.to_dict()["suggestions"] == ["status"]
    assert str(err) == "stauts: filter not found"


# -- NotInScopeError -------------------------------------------------------------


def test_not_in_scope_value():
    err = NotInScopeError(0, key="limit")
    assert str(err) == "limit: 0: not in scope"
    assert err.to_dict()["value"] == 0


def test_not_in_scope_custom_message():
    err = NotInScopeError(7, "too big")
    assert err.message == "too big"
    assert err.value == 7


def test_not_in_scope_without_value():
    err = NotInScopeError()
    assert err.message == "not in scope"
    assert err.value is None
