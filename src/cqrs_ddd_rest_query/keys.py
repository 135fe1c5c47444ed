"""Key parsing: ``name[method]`` -> (name, method)."""

from __future__ import annotations

from typing import NamedTuple

from .exceptions import BadFormatError, UnknownMethodError
from .methods import KEY_METHODS, Method


class ParsedKey(NamedTuple):
    name: str
    method: Method


def parse_key(key: str) -> ParsedKey:
    """
    Split a filter key into its bare name and comparison method.

    ``id`` -> ``("id", EQ)``, ``id[gte]`` -> ``("id", GTE)``,
    ``id[]`` -> ``("id", EQ)``.

    Raises:
        BadFormatError: Empty name, unclosed bracket or trailing text
            after the closing bracket.
        UnknownMethodError: Method not in the method table.
    """
    start = key.find("[")
    if start == -1:
        if not key:
            raise BadFormatError()
        return ParsedKey(key, Method.EQ)

    name = key[:start]
    end = key.find("]", start)
    if not name or end == -1 or end != len(key) - 1:
        raise BadFormatError()

    method_text = key[start + 1 : end].strip().upper()
    if not method_text:
        return ParsedKey(name, Method.EQ)

    method = KEY_METHODS.get(method_text)
    if method is None:
        raise UnknownMethodError(method_text, list(KEY_METHODS))
    return ParsedKey(name, method)


def strip_in_suffix(key: str) -> str:
    """Drop an optional ``[in]`` suffix (reserved parameters accept it)."""
    if key.lower().endswith("[in]"):
        return key[:-4]
    return key
