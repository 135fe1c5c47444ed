"""
Filter assembly: the ordered filter list and the WHERE fold.

Conditions are joined with ``AND``; OR-group members are bracketed::

    NONE          ->  " AND " (when something was emitted) + cond
    START         ->  "(" or " AND (" + cond
    IN            ->  " OR " + cond
    END           ->  " OR " + cond + ")"

The argument list is produced from the same filters in the same order, so
the n-th ``?`` always binds the n-th argument.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .binder import array_literal, as_list, bind_args, binds_inline
from .exceptions import RestQueryError, UnknownMethodError
from .filters import Filter, OrState, group_states
from .methods import NULL_METHODS, SET_METHODS, SQL_OPERATORS, Method, is_null

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

logger = logging.getLogger("cqrs_ddd.rest_query")

PLACEHOLDER = "?"

# ---------------------------------------------------------------------------
# Condition rendering
# ---------------------------------------------------------------------------


def _render_set(expr: str, method: Method, values: list[Any]) -> str:
    if not values:
        return "1=0" if method is Method.IN else "1=1"
    placeholders = ", ".join(PLACEHOLDER for _ in values)
    return f"{expr} {SQL_OPERATORS[method]} ({placeholders})"


def render_condition(f: Filter) -> str:
    """
    Render the SQL text of one filter.

    Raises:
        UnknownMethodError: The method has no SQL rendering, or a NULL
            check does not carry the ``NULL`` literal.
    """
    expr = f.resolved_expression
    method = f.method

    if method is Method.RAW:
        return str(f.value)

    if method in NULL_METHODS:
        if not is_null(f.value):
            raise UnknownMethodError(method.value, key=f.raw_key)
        return f"{expr} {SQL_OPERATORS[method]} NULL"

    if binds_inline(f):
        literal = array_literal(as_list(f.value))
        condition = f"{expr} @> {literal} AND {expr} <@ {literal}"
        return f"NOT ({condition})" if method is Method.NE else condition

    if method in SET_METHODS:
        return _render_set(expr, method, as_list(f.value))

    if f.is_multi and method in (Method.EQ, Method.NE):
        return _render_set(expr, Method.IN if method is Method.EQ else Method.NIN, f.value)

    operator = SQL_OPERATORS.get(method)
    if operator is None:
        raise UnknownMethodError(method.value, key=f.raw_key)
    return f"{expr} {operator} {PLACEHOLDER}"


# ---------------------------------------------------------------------------
# OR-group helpers
# ---------------------------------------------------------------------------


def normalize_groups(filters: list[Filter]) -> list[Filter]:
    """
    Re-derive OR states after members were dropped.

    Runs of START/IN/END members are regrouped: two or more survivors keep
    a group, a single survivor becomes NONE.
    """
    result: list[Filter] = []
    group: list[Filter] = []

    def flush() -> None:
        for member, state in zip(group, group_states(len(group))):
            result.append(member.with_or_state(state))
        group.clear()

    for f in filters:
        if f.or_state is OrState.NONE:
            flush()
            result.append(f)
            continue
        if f.or_state is OrState.START:
            flush()
        group.append(f)
        if f.or_state is OrState.END:
            flush()
    flush()
    return result


def fold_where(conditions: Iterable[tuple[OrState, str]]) -> str:
    """Join rendered conditions according to their OR states."""
    out: list[str] = []
    for state, text in conditions:
        if state is OrState.START:
            out.append(" AND (" if out else "(")
        elif state in (OrState.IN, OrState.END):
            out.append(" OR ")
        elif out:
            out.append(" AND ")
        out.append(text)
        if state is OrState.END:
            out.append(")")
    return "".join(out)


# ---------------------------------------------------------------------------
# FilterList
# ---------------------------------------------------------------------------


class FilterList:
    """
    Ordered filters of one parsing session.

    Mutated only through :meth:`append`, :meth:`extend`, :meth:`remove`
    and :meth:`replace_names`; rendering never mutates.
    """

    def __init__(self, filters: Iterable[Filter] | None = None) -> None:
        self._filters: list[Filter] = list(filters or [])

    # -- mutation ------------------------------------------------------------

    def append(self, f: Filter) -> None:
        self._filters.append(f)

    def extend(self, filters: Iterable[Filter]) -> None:
        self._filters.extend(filters)

    def clear(self) -> None:
        self._filters.clear()

    def remove(self, name: str) -> int:
        """
        Remove every filter named *name*, repairing OR neighbours.

        Returns the number of filters removed.
        """
        removed = 0
        i = 0
        while i < len(self._filters):
            if self._filters[i].query_name != name:
                i += 1
                continue
            self._repair_around(i)
            del self._filters[i]
            removed += 1
        return removed

    def _repair_around(self, i: int) -> None:
        items = self._filters
        state = items[i].or_state
        if state is OrState.START and i + 1 < len(items):
            nxt = items[i + 1]
            new = OrState.NONE if nxt.or_state is OrState.END else OrState.START
            items[i + 1] = nxt.with_or_state(new)
        elif state is OrState.END and i > 0:
            prev = items[i - 1]
            new = OrState.NONE if prev.or_state is OrState.START else OrState.END
            items[i - 1] = prev.with_or_state(new)

    def replace_names(self, names: dict[str, str], resolve: Callable[[str, Filter], str]) -> None:
        """Rename filters; *resolve* gives the expression for the new name."""
        for i, f in enumerate(self._filters):
            new_name = names.get(f.query_name)
            if new_name is not None:
                self._filters[i] = f.renamed(new_name, resolve(new_name, f))

    # -- look-up -------------------------------------------------------------

    def get(self, name: str) -> Filter | None:
        return next((f for f in self._filters if f.query_name == name), None)

    def has(self, name: str) -> bool:
        return self.get(name) is not None

    def for_source(self, source: str | None) -> list[Filter]:
        """Filters targeting *source* (``None`` = all filters)."""
        if source is None:
            return list(self._filters)
        return normalize_groups([f for f in self._filters if f.source == source])

    def __iter__(self) -> Iterator[Filter]:
        return iter(self._filters)

    def __len__(self) -> int:
        return len(self._filters)

    def copy(self) -> FilterList:
        return FilterList(self._filters)

    # -- rendering -----------------------------------------------------------

    def renderable(
        self, source: str | None = None, *, skip_invalid: bool = False
    ) -> list[tuple[Filter, str]]:
        """
        Pair each filter with its rendered condition.

        With *skip_invalid* a filter that fails to render is dropped (and
        logged) and the OR states of the survivors are normalised;
        otherwise the first failure propagates.
        """
        filters = self.for_source(source)
        if not skip_invalid:
            return [(f, render_condition(f)) for f in filters]

        rendered: dict[int, str] = {}
        survivors: list[Filter] = []
        for f in filters:
            try:
                text = render_condition(f)
            except RestQueryError as exc:
                logger.warning("Skipping filter %r: %s", f.raw_key, exc.message)
                continue
            rendered[len(survivors)] = text
            survivors.append(f)
        return [(f, rendered[i]) for i, f in enumerate(normalize_groups(survivors))]

    def where(self, source: str | None = None, *, skip_invalid: bool = False) -> str:
        pairs = self.renderable(source, skip_invalid=skip_invalid)
        return fold_where((f.or_state, text) for f, text in pairs)

    def args(self, source: str | None = None, *, skip_invalid: bool = False) -> list[Any]:
        pairs = self.renderable(source, skip_invalid=skip_invalid)
        return bind_args([f for f, _ in pairs])
