"""
REST query exception hierarchy.

All exceptions inherit from ``RestQueryError`` and provide ``to_dict()``
for API-friendly error responses.  Errors raised while a parameter is
being parsed are keyed with the raw parameter key before they reach the
caller, so ``str(err)`` reads like ``"id[in]: bad format"``.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import Any

_MISSING: Any = object()


class RestQueryError(Exception):
    """Base exception for all REST query errors."""

    code = "REST_QUERY_ERROR"
    default_message = "invalid query"

    def __init__(self, message: str | None = None, *, key: str | None = None) -> None:
        self.message = message or self.default_message
        self.key = key
        super().__init__(self._render())

    def _render(self) -> str:
        if self.key:
            return f"{self.key}: {self.message}"
        return self.message

    def with_key(self, key: str) -> RestQueryError:
        """Attach the offending parameter key (first key wins)."""
        if self.key is None:
            self.key = key
            self.args = (self._render(),)
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "key": self.key,
            "message": self.message,
        }


class BadFormatError(RestQueryError):
    """Value does not parse as the declared type, or the key is malformed."""

    code = "BAD_FORMAT"
    default_message = "bad format"


class UnknownMethodError(RestQueryError):
    """
    Bracketed method is not in the method table.

    Provides fuzzy-matched suggestions for likely intended methods.
    """

    code = "UNKNOWN_METHOD"
    default_message = "unknown method"

    def __init__(
        self,
        method: str | None = None,
        valid_methods: list[str] | None = None,
        *,
        key: str | None = None,
    ) -> None:
        self.method = method
        self.valid_methods = sorted(valid_methods or [])
        self.suggestions = (
            get_close_matches(method.upper(), self.valid_methods, n=3, cutoff=0.6)
            if method
            else []
        )
        super().__init__(key=key)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["method"] = self.method
        data["suggestions"] = self.suggestions
        return data


class MethodNotAllowedError(RestQueryError):
    """Method exists but is illegal for the field type or value arity."""

    code = "METHOD_NOT_ALLOWED"
    default_message = "method not allowed"


class NotInScopeError(RestQueryError):
    """A validator rejected the value."""

    code = "NOT_IN_SCOPE"
    default_message = "not in scope"

    def __init__(
        self,
        value: Any = _MISSING,
        message: str | None = None,
        *,
        key: str | None = None,
    ) -> None:
        self.value = None if value is _MISSING else value
        if message is None and value is not _MISSING:
            message = f"{value}: {self.default_message}"
        super().__init__(message, key=key)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["value"] = self.value
        return data


class EmptyValueError(RestQueryError):
    """A filter parameter was given without a value."""

    code = "EMPTY_VALUE"
    default_message = "empty value"


class FilterNotFoundError(RestQueryError):
    """
    Filter name is not declared (or not present in the filter list).

    Carries close-match suggestions drawn from the declared names.
    """

    code = "FILTER_NOT_FOUND"
    default_message = "filter not found"

    def __init__(
        self,
        name: str | None = None,
        known_names: list[str] | None = None,
        *,
        key: str | None = None,
    ) -> None:
        self.name = name
        self.suggestions = (
            get_close_matches(name, known_names, n=3, cutoff=0.6)
            if name and known_names
            else []
        )
        super().__init__(key=key)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["suggestions"] = self.suggestions
        return data


class FilterNotAllowedError(RestQueryError):
    """Field is registered but may not be used as a filter."""

    code = "FILTER_NOT_ALLOWED"
    default_message = "filter not allowed"


class ValidationNotFoundError(RestQueryError):
    """A name that requires a validator was used without one."""

    code = "VALIDATION_NOT_FOUND"
    default_message = "validation not found"


class RequiredError(RestQueryError):
    """A parameter declared as required is absent from the input."""

    code = "REQUIRED"
    default_message = "required"
