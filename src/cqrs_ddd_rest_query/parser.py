"""
QueryParser: REST query parameters to a parameterised SQL filter.

Usage::

    parser = QueryParser(
        FieldRegistry.from_types({"id": "int", "status": "string"}),
        ValidationSet.from_mapping(
            {
                "fields": one_of("id", "status"),
                "sort": one_of("id"),
                "limit:required": between(1, 100),
            }
        ),
    )
    parser.parse({"id[gte]": ["10"], "status": ["new,done"], "limit": ["20"]})
    parser.sql("tasks")
    # SELECT * FROM tasks WHERE id >= ? AND status IN (?, ?) LIMIT 20
    parser.args()
    # [10, "new", "done"]

Parsing is synchronous and a parser instance is private to its caller;
``clone()`` gives an independent copy sharing the immutable settings.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, NamedTuple

from .assembler import FilterList
from .coercion import coerce_value, parse_int
from .config import ParserConfig
from .exceptions import (
    BadFormatError,
    EmptyValueError,
    FilterNotAllowedError,
    FilterNotFoundError,
    NotInScopeError,
    RequiredError,
    RestQueryError,
    ValidationNotFoundError,
)
from .filters import Filter, group_states
from .keys import parse_key, strip_in_suffix
from .methods import NULL_METHODS, Method
from .registry import FieldRegistry, FieldType
from .resolver import NameResolver
from .validators import ValidationSet, run_validator

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from .registry import FieldDescriptor
    from .validators import Validator

logger = logging.getLogger("cqrs_ddd.rest_query")

FIELDS = "fields"
SORT = "sort"
LIMIT = "limit"
OFFSET = "offset"


class Sort(NamedTuple):
    by: str
    desc: bool = False


class QueryParser:
    """
    One parsing session.

    Owns the parsed filters, selected fields, sort keys and pagination of
    the last :meth:`parse` call and renders them as SQL fragments.
    """

    def __init__(
        self,
        registry: FieldRegistry | Mapping[str, FieldDescriptor] | None = None,
        validations: ValidationSet | Mapping[str, Validator | None] | None = None,
        config: ParserConfig | None = None,
    ) -> None:
        self.registry = registry if isinstance(registry, FieldRegistry) else FieldRegistry(registry)
        self.validations = (
            validations
            if isinstance(validations, ValidationSet)
            else ValidationSet.from_mapping(validations)
        )
        self.config = config or ParserConfig()
        self.resolver = NameResolver(self.registry, self.config.dialect)
        self.filters = FilterList()
        self.fields: list[str] = []
        self.sorts: list[Sort] = []
        self.limit: int | None = None
        self.offset: int | None = None

    # -----------------------------------------------------------------------
    # Parsing
    # -----------------------------------------------------------------------

    def parse(self, params: Mapping[str, Sequence[str] | str]) -> QueryParser:
        """
        Parse *params*, replacing any previous state.

        Raises the first :class:`RestQueryError` met, keyed with the
        offending parameter key.  After a failure the parser holds a
        partial result and must not be rendered.
        """
        self._reset()
        seen: set[str] = set()
        for key, raw_values in params.items():
            values = [raw_values] if isinstance(raw_values, str) else list(raw_values)
            try:
                seen.update(self._parse_param(key, values))
            except RestQueryError as exc:
                exc.with_key(key)
                raise

        missing = sorted(self.validations.required - seen)
        if missing:
            raise RequiredError(key=missing[0])
        return self

    def _reset(self) -> None:
        self.filters.clear()
        self.fields = []
        self.sorts = []
        self.limit = None
        self.offset = None

    def _parse_param(self, key: str, values: list[str]) -> set[str]:
        reserved = strip_in_suffix(key).lower()
        if reserved == FIELDS:
            self._parse_fields(values)
            return {FIELDS}
        if reserved == SORT:
            self._parse_sort(values)
            return {SORT}
        if reserved == LIMIT:
            self.limit = self._parse_page(LIMIT, values, minimum=1)
            return {LIMIT}
        if reserved == OFFSET:
            self.offset = self._parse_page(OFFSET, values, minimum=0)
            return {OFFSET}
        return self._parse_filter_values(key, values)

    # -- reserved parameters -------------------------------------------------

    def _reserved_validator(self, name: str) -> Validator:
        validator = self.validations.get(name)
        if validator is None:
            raise ValidationNotFoundError()
        return validator

    def _split_names(self, values: list[str]) -> list[str]:
        names: list[str] = []
        for value in values:
            for item in value.split(self.config.delimiter_in):
                item = item.strip()
                if item:
                    names.append(item)
        return names

    def _parse_fields(self, values: list[str]) -> None:
        validator = self._reserved_validator(FIELDS)
        names = self._split_names(values)
        if not names:
            return
        run_validator(validator, names)
        self.fields.extend(names)

    def _parse_sort(self, values: list[str]) -> None:
        validator = self._reserved_validator(SORT)
        sorts: list[Sort] = []
        for item in self._split_names(values):
            desc = item.startswith("-")
            name = item[1:] if item[0] in "+-" else item
            if not name:
                raise BadFormatError()
            sorts.append(Sort(name, desc))
        if not sorts:
            return
        run_validator(validator, [s.by for s in sorts])
        self.sorts.extend(sorts)

    def _parse_page(self, name: str, values: list[str], *, minimum: int) -> int:
        if len(values) != 1:
            raise BadFormatError()
        raw = values[0]
        if not raw or self.config.delimiter_in in raw:
            raise BadFormatError()
        try:
            number = parse_int(raw)
        except ValueError as exc:
            raise BadFormatError() from exc
        if number < minimum:
            raise NotInScopeError(number)
        validator = self.validations.get(name)
        if validator is not None:
            run_validator(validator, number)
        return number

    # -- filters -------------------------------------------------------------

    def _parse_filter_values(self, key: str, values: list[str]) -> set[str]:
        if not values:
            raise EmptyValueError()
        seen: set[str] = set()
        pending: list[Filter] = []
        for raw in values:
            built: list[Filter] = []
            for member_key, member_value in self._split_or(key, raw):
                try:
                    f = self._build_filter(member_key, member_value)
                except RestQueryError as exc:
                    exc.with_key(member_key)
                    raise
                seen.add(parse_key(member_key).name)
                if f is not None:
                    built.append(f)
            states = group_states(len(built))
            pending.extend(f.with_or_state(s) for f, s in zip(built, states))
        # a failing key adds nothing
        self.filters.extend(pending)
        return seen

    def _split_or(self, key: str, raw: str) -> list[tuple[str, str]]:
        """``a=1|b=2|3`` under key ``a`` -> ``[(a, 1), (b, 2), (a, 3)]``."""
        delimiter = self.config.delimiter_or
        if delimiter not in raw:
            return [(key, raw)]
        first, *rest = raw.split(delimiter)
        members = [(key, first)]
        for part in rest:
            if "=" in part:
                other_key, value = part.split("=", 1)
                members.append((other_key, value))
            else:
                members.append((key, part))
        return members

    def _lookup(self, name: str) -> tuple[FieldType, FieldDescriptor | None] | None:
        descriptor = self.registry.get(name)
        if descriptor is None and not (
            self.validations.has(name) or name in self.config.special_filters
        ):
            return None
        if descriptor is not None and not descriptor.filterable:
            raise FilterNotAllowedError()
        field_type = descriptor.type if descriptor else self.validations.type_of(name)
        return field_type or FieldType.STRING, descriptor

    def _build_filter(self, key: str, raw: str) -> Filter | None:
        name, method = parse_key(key)
        if not raw:
            raise EmptyValueError()

        found = self._lookup(name)
        if found is None:
            if self.config.ignore_unknown_filters:
                logger.debug("Ignoring unknown filter %r", key)
                return None
            known = self.registry.names() + self.validations.names()
            raise FilterNotFoundError(name, known)
        field_type, descriptor = found

        value = coerce_value(field_type, method, raw, self.config.delimiter_in)
        if method not in NULL_METHODS:
            validator = self.validations.get(name)
            if validator is not None:
                run_validator(validator, value)

        f = Filter(
            raw_key=key,
            query_name=name,
            resolved_expression=self.resolver.resolve(name, field_type),
            method=method,
            value=value,
            field_type=field_type,
            source=descriptor.source if descriptor else None,
        )
        logger.debug("Parsed filter %s %s %r", f.resolved_expression, method.value, value)
        return f

    # -----------------------------------------------------------------------
    # Rendering
    # -----------------------------------------------------------------------

    def where(self, source: str | None = None) -> str:
        """WHERE body without the keyword; empty when there are no filters."""
        return self.filters.where(source, skip_invalid=self.config.skip_invalid_filters)

    def args(self, source: str | None = None) -> list[Any]:
        """Arguments for the ``?`` placeholders of :meth:`where`, in order."""
        return self.filters.args(source, skip_invalid=self.config.skip_invalid_filters)

    def where_clause(self, source: str | None = None) -> str:
        where = self.where(source)
        return f"WHERE {where}" if where else ""

    def select(self) -> str:
        if not self.fields:
            return "*"
        return ", ".join(self.resolver.resolve(name) for name in self.fields)

    def select_clause(self) -> str:
        return f"SELECT {self.select()}"

    def order_by(self) -> str:
        return ", ".join(
            self.resolver.resolve(s.by) + (" DESC" if s.desc else "") for s in self.sorts
        )

    def order_clause(self) -> str:
        order = self.order_by()
        return f"ORDER BY {order}" if order else ""

    def limit_clause(self) -> str:
        return f"LIMIT {self.limit}" if self.limit is not None else ""

    def offset_clause(self) -> str:
        return f"OFFSET {self.offset}" if self.offset is not None else ""

    def sql(self, table: str) -> str:
        """Render a complete ``SELECT`` statement over *table*."""
        parts = [
            self.select_clause(),
            f"FROM {table}",
            self.where_clause(),
            self.order_clause(),
            self.limit_clause(),
            self.offset_clause(),
        ]
        return " ".join(p for p in parts if p)

    # -----------------------------------------------------------------------
    # Programmatic editing
    # -----------------------------------------------------------------------

    def _field_type(self, name: str) -> FieldType:
        return self.registry.type_of(name) or self.validations.type_of(name) or FieldType.STRING

    def add_filter(self, name: str, method: Method | str, value: Any) -> QueryParser:
        """
        Append a filter built in code.  The value is taken as already
        typed; no coercion or validation runs.
        """
        method = method if isinstance(method, Method) else Method(method.upper())
        descriptor = self.registry.get(name)
        field_type = self._field_type(name)
        raw_key = name if method is Method.EQ else f"{name}[{method.value.lower()}]"
        self.filters.append(
            Filter(
                raw_key=raw_key,
                query_name=name,
                resolved_expression=self.resolver.resolve(name, field_type),
                method=method,
                value=value,
                field_type=field_type,
                source=descriptor.source if descriptor else None,
            )
        )
        return self

    def add_filter_raw(self, condition: str) -> QueryParser:
        """Append a literal SQL condition (binds no arguments)."""
        self.filters.append(
            Filter(
                raw_key=condition,
                query_name=condition,
                resolved_expression=condition,
                method=Method.RAW,
                value=condition,
            )
        )
        return self

    def add_or_filters(self, build: Callable[[QueryParser], Any]) -> QueryParser:
        """
        Append the filters *build* adds to a scratch parser as one OR group::

            parser.add_or_filters(
                lambda q: q.add_filter("id", "gt", 10).add_filter("id", "lt", 2)
            )
        """
        scratch = self._derive()
        build(scratch)
        members = list(scratch.filters)
        states = group_states(len(members))
        self.filters.extend(f.with_or_state(s) for f, s in zip(members, states))
        return self

    def remove_filter(self, name: str) -> QueryParser:
        """Remove every filter named *name*, keeping OR groups well formed."""
        if not self.filters.remove(name):
            raise FilterNotFoundError(name, [x.query_name for x in self.filters], key=name)
        return self

    def get_filter(self, name: str) -> Filter:
        f = self.filters.get(name)
        if f is None:
            raise FilterNotFoundError(name, [x.query_name for x in self.filters], key=name)
        return f

    def has_filter(self, name: str) -> bool:
        return self.filters.has(name)

    def replace_names(self, names: Mapping[str, str]) -> QueryParser:
        """Rename filters, selected fields and sort keys."""
        mapping = dict(names)
        self.filters.replace_names(mapping, lambda new, f: self.resolver.resolve(new, f.field_type))
        self.fields = [mapping.get(name, name) for name in self.fields]
        self.sorts = [Sort(mapping.get(s.by, s.by), s.desc) for s in self.sorts]
        return self

    def add_field(self, name: str) -> QueryParser:
        self.fields.append(name)
        return self

    def has_field(self, name: str) -> bool:
        return name in self.fields

    def add_sort(self, by: str, desc: bool = False) -> QueryParser:
        self.sorts.append(Sort(by, desc))
        return self

    def has_sort(self, by: str) -> bool:
        return any(s.by == by for s in self.sorts)

    def add_validation(self, declaration: str, validator: Validator | None) -> QueryParser:
        self.validations = self.validations.with_validation(declaration, validator)
        return self

    def remove_validation(self, name: str) -> QueryParser:
        self.validations = self.validations.without_validation(name)
        return self

    # -----------------------------------------------------------------------
    # Copies
    # -----------------------------------------------------------------------

    def _derive(self) -> QueryParser:
        return QueryParser(self.registry, self.validations, self.config)

    def clone(self) -> QueryParser:
        """Independent copy: own filters/fields/sorts, shared settings."""
        copy = self._derive()
        copy.filters = self.filters.copy()
        copy.fields = list(self.fields)
        copy.sorts = list(self.sorts)
        copy.limit = self.limit
        copy.offset = self.offset
        return copy
