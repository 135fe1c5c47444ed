"""
Name resolution: query names to backend column expressions.

Plain registered names map to their (source-qualified) physical column.
Dotted names walk into JSON or composite containers::

    pace.strategy   ->  (jsonb_extract_path(jsonb_strip_nulls(pace), 'strategy') #>> '{}')
    address.city    ->  (address).city

Every piece of backend syntax lives in :class:`PathDialect`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .registry import FieldType

if TYPE_CHECKING:
    from .registry import FieldRegistry

_EXPR = "{expr}"
_PARENT = "{parent}"
_SEGMENT = "{segment}"


def _postgres_casts() -> dict[FieldType, str]:
    text = "({expr} #>> '{}')"
    return {
        FieldType.STRING: text,
        FieldType.BOOL: text + "::boolean",
        FieldType.TIME: text + "::timestamptz",
        FieldType.INT: text + "::numeric",
        FieldType.FLOAT: text + "::numeric",
    }


@dataclass(frozen=True)
class PathDialect:
    """
    Backend syntax for nested access.

    Templates use ``{parent}``, ``{segment}`` and ``{expr}`` placeholders,
    substituted literally (no ``str.format`` brace escaping).

    Attributes:
        name: Dialect label.
        json_access: One JSON path step.
        composite_access: One composite/record field access.
        casts: Wrapper applied to a JSON leaf by its declared type; types
            absent from the table pass through unchanged.
    """

    name: str
    json_access: str
    composite_access: str
    casts: Mapping[FieldType, str] = field(default_factory=dict)

    def json_step(self, parent: str, segment: str) -> str:
        quoted = segment.replace("'", "''")
        return self.json_access.replace(_PARENT, parent).replace(_SEGMENT, quoted)

    def composite_step(self, parent: str, segment: str) -> str:
        return self.composite_access.replace(_PARENT, parent).replace(_SEGMENT, segment)

    def cast(self, expr: str, field_type: FieldType) -> str:
        template = self.casts.get(field_type)
        if template is None:
            return expr
        return template.replace(_EXPR, expr)


POSTGRES_DIALECT = PathDialect(
    name="postgres",
    json_access="jsonb_extract_path(jsonb_strip_nulls({parent}), '{segment}')",
    composite_access="({parent}).{segment}",
    casts=_postgres_casts(),
)


class NameResolver:
    """Resolve query names against a :class:`FieldRegistry`."""

    def __init__(self, registry: FieldRegistry, dialect: PathDialect = POSTGRES_DIALECT) -> None:
        self.registry = registry
        self.dialect = dialect

    def resolve(self, name: str, field_type: FieldType | None = None) -> str:
        """
        Return the backend expression for *name*.

        *field_type* is the leaf type used to pick the JSON cast; it
        defaults to the registered type of *name*, then ``string``.
        Unknown names come back unchanged, which keeps resolution a
        fixed point as long as physical names are not query names too.
        """
        descriptor = self.registry.get(name)
        if descriptor is not None and not descriptor.nested:
            return descriptor.qualified_name

        segments = name.split(".")
        root = self.registry.get(segments[0])
        if root is None or len(segments) < 2:
            return name

        expr = root.qualified_name
        container = root.type
        via_json = False
        for i, segment in enumerate(segments[1:], start=2):
            if container is FieldType.JSON:
                expr = self.dialect.json_step(expr, segment)
                via_json = True
            elif container.is_composite:
                expr = self.dialect.composite_step(expr, segment)
                via_json = False
            else:
                return name
            container = self.registry.type_of(".".join(segments[:i])) or container

        if not via_json:
            return expr
        leaf_type = field_type or (descriptor.type if descriptor else FieldType.STRING)
        return self.dialect.cast(expr, leaf_type)
