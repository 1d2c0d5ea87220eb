"""
Object type builder - converts a table's columns into a GraphQL object type.

For every column:
- start from the scalar mapping (NonNull-wrapped when required)
- row-id style keys keep the scalar
- owning-user keys become a reference to the canonical user type
- other keys become a reference to the lookup table's type, built
  through the registry (which breaks cycles)
- multi-valued keys are wrapped in a list

A key whose target table cannot be located is treated as absent and the
column keeps its scalar type.

Usage:
    registry = TypeRegistry()
    builder = ObjectTypeBuilder(registry, provider)
    builder.register_user_type()
    ref = builder.ensure_table_type(table)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from graphql import GraphQLField, GraphQLObjectType

from .defs import ColumnDescriptor, ForeignKeyDescriptor, ForeignKeyKind, TableDescriptor
from .errors import SchemaBuildError
from .links import LINKS_FIELD_NAME, links_field
from .provider import MetadataProvider
from .registry import ListOf, Reference, TypeExpr, TypeRegistry
from .resolvers import ColumnResolver
from .scalars import ScalarMapper
from .utils import graphql_name, type_name

logger = logging.getLogger(__name__)


@dataclass
class FieldSpec:
    """A column field whose type is still an unrealized expression."""
    name: str
    column: ColumnDescriptor
    type_expr: TypeExpr
    resolver: ColumnResolver


class ObjectTypeBuilder:
    """Builds object types for tables, recursing into lookup tables."""

    def __init__(
        self,
        registry: TypeRegistry,
        provider: MetadataProvider,
        scalars: Optional[ScalarMapper] = None,
    ):
        self.registry = registry
        self.provider = provider
        self.scalars = scalars or ScalarMapper()
        self.user_type_name: Optional[str] = None
        self._user_table: Optional[TableDescriptor] = None
        self._owners: dict[str, TableDescriptor] = {}

    # -------------------------------------------------------------------------
    # Well-known types
    # -------------------------------------------------------------------------

    def register_user_type(self) -> Optional[str]:
        """
        Build the canonical owning-user type before any column is scanned.

        Returns the type name, or None when the provider has no user table
        (owning-user keys then degrade to scalars).
        """
        user_table = self.provider.user_table()
        if user_table is None:
            logger.debug("No user table available, owning-user keys stay scalar")
            return None

        name = type_name(user_table.schema_name, user_table.name)
        # Set before building: the user table usually references itself
        self._user_table = user_table
        self.user_type_name = name
        self.ensure_table_type(user_table)
        return name

    # -------------------------------------------------------------------------
    # Registry entry points
    # -------------------------------------------------------------------------

    def ensure_table_type(self, table: TableDescriptor) -> Reference:
        """Reference to the unique object type for a located table."""
        name = type_name(table.schema_name, table.name)
        self._claim(name, table)
        result = self.registry.ensure(name, lambda: self.build_object_type(table, name))
        return Reference(result.name)

    def _claim(self, name: str, table: TableDescriptor):
        """Bind a type name to one table; sanitized names may collide."""
        owner = self._owners.setdefault(name, table)
        if (owner.schema_name.lower(), owner.name.lower()) != (table.schema_name.lower(), table.name.lower()):
            raise SchemaBuildError(
                f"Tables {owner.qualified_name} and {table.qualified_name} both map to type '{name}'"
            )

    def ensure_object_type(
        self,
        fk: ForeignKeyDescriptor,
    ) -> Optional[tuple[Reference, TableDescriptor]]:
        """
        Reference to the lookup table's type, plus the located table.

        Returns None when the key names no lookup table or the provider
        cannot find it.
        """
        if fk.lookup_schema_name is None or fk.lookup_table_name is None:
            return None

        target = self.provider.lookup_table(fk)
        if target is None:
            logger.warning(
                f"Lookup table {fk.lookup_schema_name}.{fk.lookup_table_name} not found, "
                "keeping scalar column"
            )
            return None

        return self.ensure_table_type(target), target

    # -------------------------------------------------------------------------
    # Type derivation
    # -------------------------------------------------------------------------

    def column_type(self, column: ColumnDescriptor) -> tuple[TypeExpr, Optional[TableDescriptor]]:
        """
        Derive a column's type expression.

        Returns:
            (type expression, lookup table the resolver must fetch from or None)
        """
        expr = self.scalars.field_type(column)
        fk = column.fk
        if fk is None or fk.kind is ForeignKeyKind.SELF:
            return expr, None

        if fk.kind is ForeignKeyKind.USER:
            if self.user_type_name is None:
                return expr, None
            expr, target = Reference(self.user_type_name), self._user_table
        else:
            ensured = self.ensure_object_type(fk)
            if ensured is None:
                return expr, None
            expr, target = ensured

        if fk.multi_valued:
            expr = ListOf(expr)

        return expr, target

    def build_field_specs(self, table: TableDescriptor) -> list[FieldSpec]:
        specs: dict[str, FieldSpec] = {}
        for column in table.columns:
            name = graphql_name(column.name)
            if name == LINKS_FIELD_NAME:
                logger.warning(f"Column '{column.name}' on {table.qualified_name} is shadowed by the links field")
                continue
            if name in specs:
                raise SchemaBuildError(
                    f"Columns '{specs[name].column.name}' and '{column.name}' on "
                    f"{table.qualified_name} both map to field '{name}'"
                )

            expr, target = self.column_type(column)
            specs[name] = FieldSpec(
                name=name,
                column=column,
                type_expr=expr,
                resolver=ColumnResolver(column, target),
            )
        return list(specs.values())

    def build_object_type(
        self,
        table: TableDescriptor,
        name_override: Optional[str] = None,
    ) -> GraphQLObjectType:
        """
        Build the object type for a table.

        Column types are derived immediately (recursing into lookup tables);
        field definitions are realized later, once every referenced type is
        resolved in the registry.
        """
        name = name_override or graphql_name(table.name)
        specs = self.build_field_specs(table)
        links = links_field(table)
        registry = self.registry

        def fields() -> dict[str, GraphQLField]:
            result = {
                spec.name: GraphQLField(
                    registry.realize(spec.type_expr),
                    description=spec.column.description,
                    resolve=spec.resolver,
                )
                for spec in specs
            }
            result[LINKS_FIELD_NAME] = links
            return result

        return GraphQLObjectType(
            name=name,
            fields=fields,
            description=table.description,
        )
