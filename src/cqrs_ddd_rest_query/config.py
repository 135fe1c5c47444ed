"""Parser configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .resolver import POSTGRES_DIALECT, PathDialect


class ParserConfig(BaseModel):
    """
    Immutable settings shared by a :class:`QueryParser` and its clones.

    Attributes:
        delimiter_in: Splits a value into a multi-value list (``id=1,2``).
        delimiter_or: Splits a value into OR-group parts (``a=1|b=2``).
        ignore_unknown_filters: Drop undeclared filter names instead of
            raising ``FilterNotFoundError``.
        special_filters: Names accepted without a declaration, coerced as
            strings.
        skip_invalid_filters: Drop filters that fail to render instead of
            raising (OR brackets are re-derived over the survivors).
        dialect: Backend syntax for nested name resolution.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    delimiter_in: str = Field(default=",", min_length=1)
    delimiter_or: str = Field(default="|", min_length=1)
    ignore_unknown_filters: bool = False
    special_filters: frozenset[str] = Field(default_factory=frozenset)
    skip_invalid_filters: bool = False
    dialect: PathDialect = POSTGRES_DIALECT

    @model_validator(mode="after")
    def _check_delimiters(self) -> ParserConfig:
        if self.delimiter_in == self.delimiter_or:
            raise ValueError("delimiter_in and delimiter_or must differ")
        return self
