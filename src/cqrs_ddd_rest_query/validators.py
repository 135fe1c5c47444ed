"""
Validators for coerced parameter values.

A validator is any callable taking one value and returning ``None``; it
rejects by raising :class:`NotInScopeError` (or any ``RestQueryError``).
A plain ``ValueError`` from a user callable is surfaced as
``NotInScopeError`` carrying its message.

Declarations are written ``name[:type][:required]``::

    validations = ValidationSet.from_mapping(
        {
            "limit:required": between(10, 100),
            "sort": one_of("id", "name"),
            "id:int": None,
            "created_at:time:required": None,
        }
    )
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, NamedTuple

from .exceptions import NotInScopeError, RestQueryError, ValidationNotFoundError
from .registry import FieldType

Validator = Callable[[Any], None]

REQUIRED_TAG = "required"

# ---------------------------------------------------------------------------
# Built-in validators
# ---------------------------------------------------------------------------


def one_of(*values: Any) -> Validator:
    """Accept only the listed values."""
    allowed = tuple(values)

    def validate(value: Any) -> None:
        # bool is an int subclass; keep True from matching 1
        if not any(v == value and type(v) is type(value) for v in allowed):
            raise NotInScopeError(value)

    return validate


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def min_value(minimum: float) -> Validator:
    """Accept numbers greater than or equal to *minimum*."""

    def validate(value: Any) -> None:
        if not _is_number(value) or value < minimum:
            raise NotInScopeError(value)

    return validate


def max_value(maximum: float) -> Validator:
    """Accept numbers lower than or equal to *maximum*."""

    def validate(value: Any) -> None:
        if not _is_number(value) or value > maximum:
            raise NotInScopeError(value)

    return validate


def between(minimum: float, maximum: float) -> Validator:
    """Accept numbers in the closed range ``[minimum, maximum]``."""

    def validate(value: Any) -> None:
        if not _is_number(value) or not minimum <= value <= maximum:
            raise NotInScopeError(value)

    return validate


def not_empty() -> Validator:
    """Accept non-empty strings."""

    def validate(value: Any) -> None:
        if not isinstance(value, str) or not value:
            raise NotInScopeError(value)

    return validate


def chain(*validators: Validator) -> Validator:
    """Run *validators* in order; the first rejection wins."""

    def validate(value: Any) -> None:
        for v in validators:
            v(value)

    return validate


def run_validator(validator: Validator, value: Any) -> None:
    """
    Validate a scalar once, or a list element by element.

    Stops at the first rejected element and surfaces that error.
    """
    items = value if isinstance(value, list) else [value]
    for item in items:
        try:
            validator(item)
        except RestQueryError:
            raise
        except ValueError as exc:
            raise NotInScopeError(item, str(exc)) from exc


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


class Declaration(NamedTuple):
    """Parsed ``name[:type][:required]`` declaration."""

    name: str
    field_type: FieldType | None
    required: bool

    @classmethod
    def parse(cls, text: str) -> Declaration:
        parts = [p.strip() for p in text.split(":")]
        required = False
        field_type: FieldType | None = None
        for tag in parts[1:]:
            if tag.lower() == REQUIRED_TAG:
                required = True
            elif tag:
                field_type = FieldType.parse(tag)
        return cls(parts[0], field_type, required)


@dataclass(frozen=True)
class ValidationSet:
    """
    Immutable set of validators keyed by bare name.

    Attributes:
        validators: Validator per declared name (``None`` = declared,
            no extra validation).
        types: Declared type per name, for names that carry one.
        required: Names that must be present in the input.
    """

    validators: Mapping[str, Validator | None] = field(default_factory=dict)
    types: Mapping[str, FieldType] = field(default_factory=dict)
    required: frozenset[str] = frozenset()

    @classmethod
    def from_mapping(cls, declarations: Mapping[str, Validator | None] | None) -> ValidationSet:
        return cls().with_validations(declarations or {})

    # -- look-up -------------------------------------------------------------

    def has(self, name: str) -> bool:
        return name in self.validators

    def get(self, name: str) -> Validator | None:
        return self.validators.get(name)

    def type_of(self, name: str) -> FieldType | None:
        return self.types.get(name)

    def names(self) -> list[str]:
        return list(self.validators)

    # -- derivation ----------------------------------------------------------

    def with_validation(self, declaration: str, validator: Validator | None) -> ValidationSet:
        return self.with_validations({declaration: validator})

    def with_validations(self, declarations: Mapping[str, Validator | None]) -> ValidationSet:
        validators = dict(self.validators)
        types = dict(self.types)
        required = set(self.required)
        for text, validator in declarations.items():
            decl = Declaration.parse(text)
            validators[decl.name] = validator
            if decl.field_type is not None:
                types[decl.name] = decl.field_type
            if decl.required:
                required.add(decl.name)
        return ValidationSet(validators, types, frozenset(required))

    def without_validation(self, name: str) -> ValidationSet:
        """
        Drop the declaration for *name* (a typed declaration may be given).

        Raises:
            ValidationNotFoundError: *name* is not declared.
        """
        name = Declaration.parse(name).name
        if name not in self.validators:
            raise ValidationNotFoundError(key=name)
        validators = {k: v for k, v in self.validators.items() if k != name}
        types = {k: v for k, v in self.types.items() if k != name}
        return ValidationSet(validators, types, self.required - {name})
