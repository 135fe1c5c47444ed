"""
Argument binding.

Produces, per filter, the values bound to the ``?`` placeholders the
assembler writes, in the same order.  Array equality and ``NULL`` checks
embed their operand in the SQL text and bind nothing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .methods import NULL_METHODS, PATTERN_METHODS, SET_METHODS, Method

if TYPE_CHECKING:
    from .filters import Filter

WILDCARD = "*"
SQL_WILDCARD = "%"


def translate_wildcards(value: str) -> str:
    """
    Turn a leading and a trailing ``*`` into ``%``.

    Values shorter than two characters are left alone, as is any ``*``
    inside the value.
    """
    if len(value) < 2:
        return value
    if value.startswith(WILDCARD):
        value = SQL_WILDCARD + value[1:]
    if value.endswith(WILDCARD):
        value = value[:-1] + SQL_WILDCARD
    return value


def _quote_element(value: Any) -> str:
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return str(value)


def array_literal(values: list[Any]) -> str:
    """Render *values* as a quoted SQL array literal: ``'{1,2}'``."""
    body = ",".join(_quote_element(v) for v in values)
    return "'{" + body.replace("'", "''") + "}'"


def binds_inline(f: Filter) -> bool:
    """True for array equality, whose operand is embedded as a literal."""
    return f.field_type.is_array and f.method in (Method.EQ, Method.NE)


def as_list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, list) else [value]


def filter_args(f: Filter) -> list[Any]:
    """Arguments bound by one filter, in placeholder order."""
    if f.method is Method.RAW or f.method in NULL_METHODS or binds_inline(f):
        return []
    if f.method in SET_METHODS or f.is_multi:
        return as_list(f.value)
    if f.method in PATTERN_METHODS:
        return [translate_wildcards(str(f.value))]
    return [f.value]


def bind_args(filters: list[Filter]) -> list[Any]:
    """Flatten the arguments of *filters* in order."""
    args: list[Any] = []
    for f in filters:
        args.extend(filter_args(f))
    return args
