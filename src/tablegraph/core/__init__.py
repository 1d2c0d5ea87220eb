"""
Core module - table descriptors, type graph compiler and resolvers.
"""

from __future__ import annotations

from .builder import FieldSpec, ObjectTypeBuilder
from .compiler import RootQueryBuilder, RootResolver, SchemaCompiler, compile_schema
from .defs import (
    LINK_DISABLED,
    ColumnDescriptor,
    ForeignKeyDescriptor,
    ForeignKeyKind,
    JunctionDescriptor,
    NativeType,
    TableDescriptor,
    UrlTemplate,
)
from .errors import (
    NotFoundError,
    QueryError,
    SchemaBuildError,
    TablegraphError,
    UnsupportedScalarError,
)
from .links import LINK_TYPE, build_links, links_field
from .provider import MetadataProvider, RowFetcher, StaticMetadataProvider
from .registry import ListOf, NonNull, Reference, TypeRegistry
from .resolvers import ColumnResolver
from .rows import Row
from .scalars import GraphQLLong, ScalarMapper, ScalarPolicy
from .utils import graphql_name, parse_qualified_name, type_name

__all__ = [
    # Definitions
    "NativeType",
    "ForeignKeyKind",
    "UrlTemplate",
    "LINK_DISABLED",
    "JunctionDescriptor",
    "ForeignKeyDescriptor",
    "ColumnDescriptor",
    "TableDescriptor",
    "Row",
    # Errors
    "TablegraphError",
    "NotFoundError",
    "SchemaBuildError",
    "UnsupportedScalarError",
    "QueryError",
    # Collaborators
    "MetadataProvider",
    "RowFetcher",
    "StaticMetadataProvider",
    # Type graph
    "ScalarMapper",
    "ScalarPolicy",
    "GraphQLLong",
    "LINK_TYPE",
    "build_links",
    "links_field",
    "TypeRegistry",
    "Reference",
    "NonNull",
    "ListOf",
    "FieldSpec",
    "ObjectTypeBuilder",
    "ColumnResolver",
    "RootResolver",
    "RootQueryBuilder",
    "SchemaCompiler",
    "compile_schema",
    # Utils
    "graphql_name",
    "type_name",
    "parse_qualified_name",
]
