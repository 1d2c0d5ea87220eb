"""
Type registry - named object types for one schema build.

Each name is in one of three states:

    unseen    not present
    pending   a Reference placeholder is stored while the body is built
    resolved  the concrete GraphQLObjectType is stored

Field types are kept as small type expressions (scalars, NonNull, ListOf,
Reference) while the graph is under construction and realized into
graphql-core types only after every object type is resolved.

Usage:
    registry = TypeRegistry()
    result = registry.ensure("main__Item", lambda: build_item_type())
    registry.realize(ListOf(Reference("main__Tag")))  # GraphQLList(<main__Tag>)

A registry belongs to exactly one schema build and is never shared.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Literal, Union

from graphql import GraphQLList, GraphQLNonNull, GraphQLObjectType, GraphQLScalarType

from .errors import SchemaBuildError

logger = logging.getLogger(__name__)


# =============================================================================
# Type expressions
# =============================================================================


@dataclass(frozen=True)
class Reference:
    """Placeholder for an object type, looked up by name when realized."""
    name: str


@dataclass(frozen=True)
class NonNull:
    of_type: "TypeExpr"


@dataclass(frozen=True)
class ListOf:
    of_type: "TypeExpr"


TypeExpr = Union[GraphQLScalarType, GraphQLObjectType, Reference, NonNull, ListOf]


def unwrap(expr: TypeExpr) -> Union[GraphQLScalarType, GraphQLObjectType, Reference]:
    """Strip NonNull/ListOf wrappers."""
    while isinstance(expr, (NonNull, ListOf)):
        expr = expr.of_type
    return expr


def is_input_expr(expr: TypeExpr) -> bool:
    """True when the expression realizes to an input-compatible type."""
    return isinstance(unwrap(expr), GraphQLScalarType)


# =============================================================================
# Registry
# =============================================================================


TypeState = Literal["unseen", "pending", "resolved"]


class TypeRegistry:
    """Deduplicates object types by name and breaks reference cycles."""

    def __init__(self):
        self._types: dict[str, Union[GraphQLObjectType, Reference]] = {}

    def state(self, name: str) -> TypeState:
        entry = self._types.get(name)
        if entry is None:
            return "unseen"
        if isinstance(entry, Reference):
            return "pending"
        return "resolved"

    def ensure(
        self,
        name: str,
        build: Callable[[], GraphQLObjectType],
    ) -> Union[GraphQLObjectType, Reference]:
        """
        Return the unique type for `name`, building it at most once.

        Resolved names return the existing object type. Pending names
        return their placeholder instead of recursing, which is what makes
        self- and mutually-referencing tables terminate.
        """
        entry = self._types.get(name)
        if isinstance(entry, GraphQLObjectType):
            return entry
        if isinstance(entry, Reference):
            logger.debug(f"Type '{name}' is under construction, using reference")
            return entry

        placeholder = Reference(name)
        self._types[name] = placeholder
        try:
            object_type = build()
        except Exception:
            del self._types[name]
            raise

        if object_type.name != name:
            del self._types[name]
            raise SchemaBuildError(f"Built type '{object_type.name}' for registry name '{name}'")

        self._types[name] = object_type
        logger.debug(f"Registered type '{name}'")
        return object_type

    def get(self, name: str) -> GraphQLObjectType:
        entry = self._types.get(name)
        if entry is None:
            raise SchemaBuildError(f"Unknown type '{name}'")
        if isinstance(entry, Reference):
            raise SchemaBuildError(f"Type '{name}' was referenced but never resolved")
        return entry

    def names(self) -> list[str]:
        return list(self._types)

    def object_types(self) -> list[GraphQLObjectType]:
        """All resolved object types, in registration order."""
        pending = [name for name, entry in self._types.items() if isinstance(entry, Reference)]
        if pending:
            raise SchemaBuildError(f"Unresolved types: {pending}")
        return list(self._types.values())

    def realize(self, expr: TypeExpr):
        """Convert a type expression into graphql-core types."""
        if isinstance(expr, NonNull):
            return GraphQLNonNull(self.realize(expr.of_type))
        if isinstance(expr, ListOf):
            return GraphQLList(self.realize(expr.of_type))
        if isinstance(expr, Reference):
            return self.get(expr.name)
        return expr

    def __contains__(self, name: str) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._types)
