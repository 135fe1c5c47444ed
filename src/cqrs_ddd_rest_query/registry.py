"""FieldRegistry: query names to declared types and storage fields."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping


class FieldType(str, Enum):
    """Declared value type of a filterable field."""

    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    TIME = "time"
    INT_ARRAY = "int[]"
    STRING_ARRAY = "string[]"
    FLOAT_ARRAY = "float[]"
    OBJECT_ARRAY = "object[]"
    OBJECT = "object"
    CUSTOM = "custom"
    JSON = "json"

    @classmethod
    def parse(cls, tag: str) -> FieldType:
        """Map a declaration tag to a type; unknown tags are strings."""
        tag = tag.strip().lower()
        if tag in ("str", "text"):
            return cls.STRING
        try:
            return cls(tag)
        except ValueError:
            return cls.STRING

    @property
    def is_array(self) -> bool:
        return self in (FieldType.INT_ARRAY, FieldType.STRING_ARRAY, FieldType.FLOAT_ARRAY)

    @property
    def is_composite(self) -> bool:
        """Opaque row/record types addressed with field access."""
        return self in (FieldType.CUSTOM, FieldType.OBJECT)


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Storage description of a query-facing field.

    Attributes:
        physical_name: Column (or member) name in the backing source.
        source: Owning table/source, used to qualify the name and to
            render filters per source.
        type: Declared value type.
        nested: ``True`` for members living inside a JSON or composite
            container (registered under a dotted query name).
        filterable: ``False`` for fields that may be selected or sorted
            but not filtered.
    """

    physical_name: str
    source: str | None = None
    type: FieldType = FieldType.STRING
    nested: bool = False
    filterable: bool = True

    @property
    def qualified_name(self) -> str:
        if self.source:
            return f"{self.source}.{self.physical_name}"
        return self.physical_name


class FieldRegistry:
    """
    Immutable map from query name to :class:`FieldDescriptor`.

    Usage::

        registry = FieldRegistry(
            {
                "id": FieldDescriptor("id", type=FieldType.INT),
                "pace": FieldDescriptor("pace", type=FieldType.JSON),
                "pace.strategy": FieldDescriptor(
                    "strategy", type=FieldType.STRING, nested=True
                ),
            }
        )
    """

    def __init__(self, fields: Mapping[str, FieldDescriptor] | None = None) -> None:
        self._fields: dict[str, FieldDescriptor] = dict(fields or {})

    @classmethod
    def from_types(cls, types: Mapping[str, FieldType | str]) -> FieldRegistry:
        """Build a registry of plain columns named like their query names."""
        return cls(
            {
                name: FieldDescriptor(
                    name,
                    type=t if isinstance(t, FieldType) else FieldType.parse(t),
                )
                for name, t in types.items()
            }
        )

    # -- look-up -------------------------------------------------------------

    def get(self, name: str) -> FieldDescriptor | None:
        return self._fields.get(name)

    def has(self, name: str) -> bool:
        return name in self._fields

    def type_of(self, name: str) -> FieldType | None:
        descriptor = self._fields.get(name)
        return descriptor.type if descriptor else None

    def names(self) -> list[str]:
        return list(self._fields)

    def sources(self) -> set[str]:
        return {d.source for d in self._fields.values() if d.source}

    # -- derivation ----------------------------------------------------------

    def merged(self, other: FieldRegistry | Iterable[tuple[str, FieldDescriptor]]) -> FieldRegistry:
        """Return a new registry with *other*'s entries layered on top."""
        items = other._fields.items() if isinstance(other, FieldRegistry) else other
        fields = dict(self._fields)
        fields.update(items)
        return FieldRegistry(fields)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)
