from __future__ import annotations

from enum import Enum

NULL = "NULL"
"""Sentinel value carried by IS / NOT filters."""


class Method(str, Enum):
    """Comparison methods selectable with the ``name[method]`` key suffix."""

    # Standard comparison
    EQ = "EQ"
    NE = "NE"
    GT = "GT"
    LT = "LT"
    GTE = "GTE"
    LTE = "LTE"

    # Pattern matching
    LIKE = "LIKE"
    ILIKE = "ILIKE"
    NLIKE = "NLIKE"
    NILIKE = "NILIKE"

    # Null checks
    IS = "IS"
    NOT = "NOT"

    # Set membership
    IN = "IN"
    NIN = "NIN"

    # Pass-through condition, programmatic only
    RAW = "RAW"


SQL_OPERATORS: dict[Method, str] = {
    Method.EQ: "=",
    Method.NE: "!=",
    Method.GT: ">",
    Method.LT: "<",
    Method.GTE: ">=",
    Method.LTE: "<=",
    Method.LIKE: "LIKE",
    Method.ILIKE: "ILIKE",
    Method.NLIKE: "NOT LIKE",
    Method.NILIKE: "NOT ILIKE",
    Method.IS: "IS",
    Method.NOT: "IS NOT",
    Method.IN: "IN",
    Method.NIN: "NOT IN",
}

COMPARISON_METHODS: frozenset[Method] = frozenset(
    {Method.EQ, Method.NE, Method.GT, Method.LT, Method.GTE, Method.LTE}
)
PATTERN_METHODS: frozenset[Method] = frozenset(
    {Method.LIKE, Method.ILIKE, Method.NLIKE, Method.NILIKE}
)
NULL_METHODS: frozenset[Method] = frozenset({Method.IS, Method.NOT})
SET_METHODS: frozenset[Method] = frozenset({Method.IN, Method.NIN})

# Methods a client may name in a key; RAW is only reachable from code.
KEY_METHODS: dict[str, Method] = {m.value: m for m in Method if m is not Method.RAW}


def is_null(value: object) -> bool:
    """True when *value* is the ``NULL`` literal (case-insensitive)."""
    return isinstance(value, str) and value.upper() == NULL
