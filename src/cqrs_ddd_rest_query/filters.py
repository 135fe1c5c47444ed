"""
Filter model.

A :class:`Filter` is one parsed predicate. Its :class:`OrState` says where
it sits inside an OR group so the WHERE fold can bracket the group::

    a=1 & (b=2 | c=3 | d=4)
    NONE   START IN    END
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from .methods import Method
from .registry import FieldType


class OrState(str, Enum):
    """Position of a filter inside an OR group."""

    NONE = "none"
    START = "start"
    IN = "in"
    END = "end"


@dataclass(frozen=True)
class Filter:
    """
    Immutable parsed filter.

    Attributes:
        raw_key: Key as given in the input (``"id[gte]"``); used to key
            errors.
        query_name: Bare query name (``"id"``).
        resolved_expression: Backend expression the predicate applies to.
        method: Comparison method.
        value: Coerced value: scalar, list, ``NULL`` or, for ``RAW``,
            the literal condition text.
        or_state: Position inside an OR group.
        field_type: Declared type the value was coerced under.
        source: Source (table) the field belongs to, if registered with one.
    """

    raw_key: str
    query_name: str
    resolved_expression: str
    method: Method
    value: Any
    or_state: OrState = OrState.NONE
    field_type: FieldType = FieldType.STRING
    source: str | None = None

    @property
    def is_multi(self) -> bool:
        return isinstance(self.value, list)

    def with_or_state(self, or_state: OrState) -> Filter:
        """Return a copy placed at *or_state*."""
        return replace(self, or_state=or_state)

    def renamed(self, query_name: str, resolved_expression: str) -> Filter:
        """Return a copy under a new query name and expression."""
        return replace(self, query_name=query_name, resolved_expression=resolved_expression)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-compatible dictionary."""
        return {
            "key": self.raw_key,
            "name": self.query_name,
            "expression": self.resolved_expression,
            "method": self.method.value,
            "value": self.value,
            "or_state": self.or_state.value,
            "type": self.field_type.value,
            "source": self.source,
        }


def group_states(count: int) -> list[OrState]:
    """OR states for a group of *count* members (a lone member is NONE)."""
    if count <= 1:
        return [OrState.NONE] * count
    return [OrState.START] + [OrState.IN] * (count - 2) + [OrState.END]
