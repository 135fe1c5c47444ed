"""Shared fixtures for rest query tests."""

from __future__ import annotations

import pytest

from cqrs_ddd_rest_query import (
    FieldDescriptor,
    FieldRegistry,
    FieldType,
    ParserConfig,
    QueryParser,
    ValidationSet,
)

DEFAULT_TYPES = {
    "id": "int",
    "s": "string",
    "u": "string",
    "status": "string",
    "score": "float",
    "active": "bool",
    "created_at": "time",
    "tags": "string[]",
    "ids": "int[]",
}


@pytest.fixture
def make_parser():
    """Factory: ``make_parser(validations=None, types=None, **config)``."""

    def factory(validations=None, types=None, **config) -> QueryParser:
        return QueryParser(
            FieldRegistry.from_types(DEFAULT_TYPES if types is None else types),
            ValidationSet.from_mapping(validations),
            ParserConfig(**config),
        )

    return factory


@pytest.fixture
def nested_registry() -> FieldRegistry:
    """Registry with qualified, JSON and composite fields."""
    return FieldRegistry(
        {
            "id": FieldDescriptor("id", type=FieldType.INT),
            "owner": FieldDescriptor("owner_id", source="tasks", type=FieldType.INT),
            "pace": FieldDescriptor("pace", type=FieldType.JSON),
            "pace.strategy": FieldDescriptor("strategy", type=FieldType.STRING, nested=True),
            "pace.rate": FieldDescriptor("rate", type=FieldType.FLOAT, nested=True),
            "pace.active": FieldDescriptor("active", type=FieldType.BOOL, nested=True),
            "pace.started": FieldDescriptor("started", type=FieldType.TIME, nested=True),
            "address": FieldDescriptor("address", type=FieldType.CUSTOM),
            "meta": FieldDescriptor("meta", source="runs", type=FieldType.JSON),
        }
    )
