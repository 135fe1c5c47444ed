"""
Value coercion for filter parameters.

Each :class:`FieldType` owns a static :class:`MethodRules` entry (which
methods are legal for a single value and for a delimiter-split value) and
a parser turning one raw string into a typed Python value.  IS / NOT are
legal for every type, but only against the ``NULL`` literal.
"""

from __future__ import annotations

import datetime
import re
from typing import TYPE_CHECKING, Any, NamedTuple

from dateutil import parser as date_parser

from .exceptions import BadFormatError, MethodNotAllowedError
from .methods import (
    COMPARISON_METHODS,
    NULL,
    NULL_METHODS,
    PATTERN_METHODS,
    SET_METHODS,
    Method,
    is_null,
)
from .registry import FieldType

if TYPE_CHECKING:
    from collections.abc import Callable

# ---------------------------------------------------------------------------
# Method allow-lists
# ---------------------------------------------------------------------------


class MethodRules(NamedTuple):
    single: frozenset[Method]
    multi: frozenset[Method]


_NONE: frozenset[Method] = frozenset()
_EQ_NE: frozenset[Method] = frozenset({Method.EQ, Method.NE})
_MULTI: frozenset[Method] = _EQ_NE | SET_METHODS
_NUMERIC: frozenset[Method] = COMPARISON_METHODS | SET_METHODS

METHOD_RULES: dict[FieldType, MethodRules] = {
    FieldType.INT: MethodRules(_NUMERIC, _MULTI),
    FieldType.FLOAT: MethodRules(_NUMERIC, _MULTI),
    FieldType.BOOL: MethodRules(_EQ_NE, _NONE),
    FieldType.STRING: MethodRules(_NUMERIC | PATTERN_METHODS, _MULTI),
    FieldType.TIME: MethodRules(_NUMERIC, _MULTI),
    FieldType.INT_ARRAY: MethodRules(_EQ_NE, _EQ_NE),
    FieldType.STRING_ARRAY: MethodRules(_EQ_NE, _EQ_NE),
    FieldType.FLOAT_ARRAY: MethodRules(_EQ_NE, _EQ_NE),
    FieldType.OBJECT_ARRAY: MethodRules(_NONE, _NONE),
    FieldType.OBJECT: MethodRules(_NONE, _NONE),
    FieldType.CUSTOM: MethodRules(_NONE, _NONE),
    FieldType.JSON: MethodRules(_NONE, _NONE),
}


def allowed_methods(field_type: FieldType, *, multi: bool = False) -> frozenset[Method]:
    """Methods legal for *field_type* (excluding the ``NULL`` checks)."""
    rules = METHOD_RULES[field_type]
    return rules.multi if multi else rules.single


# ---------------------------------------------------------------------------
# Scalar parsers
# ---------------------------------------------------------------------------

_INT_RE = re.compile(r"[+-]?[0-9]+")
_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def parse_int(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid int: {text!r}")
    return int(text)


def parse_float(text: str) -> float:
    if text != text.strip() or "_" in text:
        raise ValueError(f"invalid float: {text!r}")
    return float(text)


def parse_bool(text: str) -> bool:
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"invalid bool: {text!r}")


def parse_time(text: str) -> str:
    """Parse any common date/time spelling into RFC 3339 UTC text."""
    try:
        parsed = date_parser.parse(text)
    except OverflowError as exc:
        raise ValueError(str(exc)) from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    else:
        parsed = parsed.astimezone(datetime.timezone.utc)
    return parsed.strftime("%Y-%m-%dT%H:%M:%SZ")


def _identity(text: str) -> str:
    return text


_PARSERS: dict[FieldType, Callable[[str], Any]] = {
    FieldType.INT: parse_int,
    FieldType.FLOAT: parse_float,
    FieldType.BOOL: parse_bool,
    FieldType.TIME: parse_time,
    FieldType.STRING: _identity,
    FieldType.INT_ARRAY: parse_int,
    FieldType.FLOAT_ARRAY: parse_float,
    FieldType.STRING_ARRAY: _identity,
}


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------


def split_value(raw: str, delimiter: str) -> list[str]:
    if delimiter and delimiter in raw:
        return raw.split(delimiter)
    return [raw]


def coerce_value(field_type: FieldType, method: Method, raw: str, delimiter: str = ",") -> Any:
    """
    Turn the raw text of one parameter into a typed filter value.

    Returns a scalar for single values, a list for delimiter-split values
    and for array fields, or :data:`NULL` for IS/NOT filters.

    Raises:
        MethodNotAllowedError: *method* is illegal for the type and arity,
            or an IS/NOT check is given something other than ``NULL``.
        BadFormatError: The text does not parse as *field_type*.
    """
    items = split_value(raw, delimiter)
    rules = METHOD_RULES[field_type]
    multi = len(items) > 1

    if method in NULL_METHODS:
        if multi or not is_null(items[0]):
            raise MethodNotAllowedError()
        return NULL

    allowed = rules.multi if multi else rules.single
    if method not in allowed:
        raise MethodNotAllowedError()

    parse = _PARSERS[field_type]
    try:
        values = [parse(item) for item in items]
    except ValueError as exc:
        raise BadFormatError() from exc

    if multi or field_type.is_array:
        return values
    return values[0]
