from pytest_archon import archrule


def test_parser_is_the_top_layer() -> None:
    """
    Only the package facade may import the parsing session.
    Every other module is a building block beneath it.
    """
    (
        archrule("parser_is_top_layer")
        .match("cqrs_ddd_rest_query.*")
        .exclude("cqrs_ddd_rest_query.parser")
        .should_not_import("cqrs_ddd_rest_query.parser")
        .check("cqrs_ddd_rest_query")
    )


def test_model_isolation() -> None:
    """
    Method table, field registry, filter model and key parsing are plain
    value modules. They must not reach into rendering or configuration.
    """
    (
        archrule("model_isolation")
        .match("cqrs_ddd_rest_query.methods")
        .match("cqrs_ddd_rest_query.registry")
        .match("cqrs_ddd_rest_query.filters")
        .match("cqrs_ddd_rest_query.keys")
        .should_not_import("cqrs_ddd_rest_query.assembler")
        .should_not_import("cqrs_ddd_rest_query.binder")
        .should_not_import("cqrs_ddd_rest_query.config")
        .should_not_import("pydantic*")
        .should_not_import("dateutil*")
        .check("cqrs_ddd_rest_query")
    )


def test_rendering_layering() -> None:
    """
    Assembly and argument binding work on parsed filters only.
    They must not depend on coercion, validation or configuration.
    """
    (
        archrule("rendering_layering")
        .match("cqrs_ddd_rest_query.assembler")
        .match("cqrs_ddd_rest_query.binder")
        .should_not_import("cqrs_ddd_rest_query.coercion")
        .should_not_import("cqrs_ddd_rest_query.validators")
        .should_not_import("cqrs_ddd_rest_query.config")
        .should_not_import("pydantic*")
        .check("cqrs_ddd_rest_query")
    )


def test_resolver_is_backend_only() -> None:
    """
    Name resolution depends on the field registry alone.
    """
    (
        archrule("resolver_isolation")
        .match("cqrs_ddd_rest_query.resolver")
        .should_not_import("cqrs_ddd_rest_query.filters")
        .should_not_import("cqrs_ddd_rest_query.assembler")
        .should_not_import("cqrs_ddd_rest_query.config")
        .should_not_import("pydantic*")
        .check("cqrs_ddd_rest_query")
    )
