from .assembler import FilterList
from .coercion import allowed_methods, coerce_value
from .config import ParserConfig
from .exceptions import (
    BadFormatError,
    EmptyValueError,
    FilterNotAllowedError,
    FilterNotFoundError,
    MethodNotAllowedError,
    NotInScopeError,
    RequiredError,
    RestQueryError,
    UnknownMethodError,
    ValidationNotFoundError,
)
from .filters import Filter, OrState
from .keys import ParsedKey, parse_key
from .methods import NULL, Method
from .parser import QueryParser, Sort
from .registry import FieldDescriptor, FieldRegistry, FieldType
from .resolver import POSTGRES_DIALECT, NameResolver, PathDialect
from .validators import (
    ValidationSet,
    Validator,
    between,
    chain,
    max_value,
    min_value,
    not_empty,
    one_of,
)

__all__ = [
    # Session
    "QueryParser",
    "ParserConfig",
    "Sort",
    # Fields
    "FieldType",
    "FieldDescriptor",
    "FieldRegistry",
    # Filters
    "Method",
    "NULL",
    "Filter",
    "OrState",
    "FilterList",
    "ParsedKey",
    "parse_key",
    "allowed_methods",
    "coerce_value",
    # Name resolution
    "NameResolver",
    "PathDialect",
    "POSTGRES_DIALECT",
    # Validation
    "Validator",
    "ValidationSet",
    "one_of",
    "min_value",
    "max_value",
    "between",
    "not_empty",
    "chain",
    # Exceptions
    "RestQueryError",
    "BadFormatError",
    "UnknownMethodError",
    "MethodNotAllowedError",
    "NotInScopeError",
    "EmptyValueError",
    "FilterNotFoundError",
    "FilterNotAllowedError",
    "ValidationNotFoundError",
    "RequiredError",
]
