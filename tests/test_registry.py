import pytest
from graphql import GraphQLField, GraphQLInt, GraphQLList, GraphQLNonNull, GraphQLObjectType, GraphQLString

from tablegraph.core import ListOf, NonNull, Reference, SchemaBuildError, TypeRegistry
from tablegraph.core.registry import is_input_expr, unwrap


def object_type(name):
    return GraphQLObjectType(name, {"id": GraphQLField(GraphQLInt)})


def test_ensure_builds_once():
    registry = TypeRegistry()
    built = []

    def build():
        built.append(1)
        return object_type("main__Item")

    first = registry.ensure("main__Item", build)
    second = registry.ensure("main__Item", build)

    assert first is second
    assert len(built) == 1
    assert registry.state("main__Item") == "resolved"


def test_pending_name_returns_reference():
    registry = TypeRegistry()
    seen = []

    def build():
        assert registry.state("main__Node") == "pending"
        seen.append(registry.ensure("main__Node", build))
        return object_type("main__Node")

    registry.ensure("main__Node", build)

    assert seen == [Reference("main__Node")]
    assert registry.names() == ["main__Node"]


def test_failed_build_clears_placeholder():
    registry = TypeRegistry()

    def build():
        raise SchemaBuildError("boom")

    with pytest.raises(SchemaBuildError):
        registry.ensure("main__Item", build)
    assert registry.state("main__Item") == "unseen"


def test_name_mismatch_is_rejected():
    registry = TypeRegistry()
    with pytest.raises(SchemaBuildError):
        registry.ensure("main__Item", lambda: object_type("Item"))
    assert "main__Item" not in registry


def test_get_unknown_or_pending():
    registry = TypeRegistry()
    with pytest.raises(SchemaBuildError):
        registry.get("missing")

    def build():
        with pytest.raises(SchemaBuildError):
            registry.get("main__Item")
        with pytest.raises(SchemaBuildError):
            registry.object_types()
        return object_type("main__Item")

    registry.ensure("main__Item", build)
    assert [t.name for t in registry.object_types()] == ["main__Item"]


def test_realize():
    registry = TypeRegistry()
    tag = registry.ensure("main__Tag", lambda: object_type("main__Tag"))

    realized = registry.realize(NonNull(ListOf(Reference("main__Tag"))))

    assert isinstance(realized, GraphQLNonNull)
    assert isinstance(realized.of_type, GraphQLList)
    assert realized.of_type.of_type is tag
    assert registry.realize(GraphQLString) is GraphQLString


def test_input_expressions():
    assert unwrap(NonNull(ListOf(Reference("x")))) == Reference("x")
    assert is_input_expr(NonNull(GraphQLInt))
    assert not is_input_expr(Reference("main__User"))
    assert not is_input_expr(ListOf(Reference("main__User")))
