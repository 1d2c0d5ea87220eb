"""
Schema compiler - assembles a complete GraphQL schema for one table.

Build stages (strictly linear, any failure aborts the build):

    registry populated with well-known types
    -> root query built
    -> schema assembled and validated

Usage:
    from tablegraph.core.compiler import SchemaCompiler

    compiler = SchemaCompiler(provider, scalar_policy="fallback")
    schema = compiler.compile(table)
    compiler.registry.names()  # types created by this build
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from graphql import (
    GraphQLArgument,
    GraphQLError,
    GraphQLField,
    GraphQLObjectType,
    GraphQLSchema,
    assert_valid_schema,
)

from .builder import ObjectTypeBuilder
from .defs import TableDescriptor
from .errors import SchemaBuildError
from .provider import MetadataProvider
from .registry import TypeRegistry, is_input_expr
from .scalars import ScalarMapper, ScalarPolicy
from .utils import graphql_name

logger = logging.getLogger(__name__)


QUERY_TYPE_NAME = "Query"


class RootResolver:
    """Fetches the root row by primary key."""

    def __init__(self, table: TableDescriptor, arguments: dict[str, str]):
        """
        Args:
            table: Root table
            arguments: argument name -> column name
        """
        self.table = table
        self.arguments = arguments

    def filters(self, args: dict[str, Any]) -> dict[str, Any]:
        return {column: args.get(argument) for argument, column in self.arguments.items()}

    def __call__(self, source: Any, info: Any, **args: Any):
        filters = self.filters(args)
        logger.debug(f"Fetching root row {self.table.qualified_name} where {filters}")
        return info.context.fetcher.select_one(self.table, filters)


class RootQueryBuilder:
    """Builds the `Query` root: one field named after the table, keyed by its primary key."""

    def __init__(self, builder: ObjectTypeBuilder):
        self.builder = builder

    def build(self, table: TableDescriptor) -> GraphQLObjectType:
        registry = self.builder.registry
        table_ref = self.builder.ensure_table_type(table)

        if not table.pk_column_names:
            logger.warning(f"{table.qualified_name} has no primary key, root field takes no arguments")

        try:
            pk_columns = table.pk_columns
        except KeyError as e:
            raise SchemaBuildError(str(e)) from e

        arguments = []
        for column in pk_columns:
            expr, _ = self.builder.column_type(column)
            if not is_input_expr(expr):
                raise SchemaBuildError(
                    f"Primary key column '{column.name}' on {table.qualified_name} "
                    "does not resolve to an input scalar"
                )
            arguments.append((graphql_name(column.name), column, expr))

        field_name = graphql_name(table.name)
        resolver = RootResolver(table, {name: column.name for name, column, _ in arguments})

        def fields() -> dict[str, GraphQLField]:
            return {
                field_name: GraphQLField(
                    registry.realize(table_ref),
                    args={
                        name: GraphQLArgument(registry.realize(expr), description=column.description)
                        for name, column, expr in arguments
                    },
                    description=table.description,
                    resolve=resolver,
                ),
            }

        return GraphQLObjectType(name=QUERY_TYPE_NAME, fields=fields)


class SchemaCompiler:
    """
    Compiles a TableDescriptor into a GraphQLSchema.

    Every call to compile() uses a fresh TypeRegistry; the registry of the
    last build stays available as `self.registry` for inspection.
    """

    def __init__(self, provider: MetadataProvider, *, scalar_policy: ScalarPolicy = "fallback"):
        self.provider = provider
        self.scalars = ScalarMapper(scalar_policy)
        self.registry: Optional[TypeRegistry] = None

    def compile(self, table: TableDescriptor) -> GraphQLSchema:
        """
        Build and validate the schema.

        Raises:
            SchemaBuildError: on any structural contract violation
        """
        registry = TypeRegistry()
        self.registry = registry
        builder = ObjectTypeBuilder(registry, self.provider, self.scalars)

        builder.register_user_type()
        query = RootQueryBuilder(builder).build(table)

        try:
            schema = GraphQLSchema(query=query, types=registry.object_types())
            assert_valid_schema(schema)
        except (TypeError, GraphQLError) as e:
            raise SchemaBuildError(f"Invalid schema for {table.qualified_name}: {e}") from e

        logger.debug(f"Compiled schema for {table.qualified_name} with {len(registry)} object types")
        return schema


def compile_schema(
    table: TableDescriptor,
    provider: MetadataProvider,
    *,
    scalar_policy: ScalarPolicy = "fallback",
) -> GraphQLSchema:
    """Convenience function to compile a single table's schema."""
    return SchemaCompiler(provider, scalar_policy=scalar_policy).compile(table)
