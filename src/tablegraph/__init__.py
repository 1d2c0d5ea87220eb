"""
tablegraph - GraphQL schemas compiled from relational table metadata.

Builds a fresh GraphQL schema for one table per request: columns become
fields, foreign keys become nested object types (cycle-safe), and every
row carries `links` for its details/update views.

Usage:
    from tablegraph import QueryExecutor, SqlAlchemyMetadataProvider, SqlAlchemyRowFetcher

    executor = QueryExecutor(
        SqlAlchemyMetadataProvider(engine),
        SqlAlchemyRowFetcher(engine),
    )
    data = executor.run("main", "Item", "{ Item(id: 1) { name, ownerId { name } } }")
"""

from __future__ import annotations

from .config import MultiValuedConfig, TableConfig, TablegraphConfig, load_config
from .core import (
    LINK_DISABLED,
    ColumnDescriptor,
    ColumnResolver,
    ForeignKeyDescriptor,
    ForeignKeyKind,
    JunctionDescriptor,
    MetadataProvider,
    NativeType,
    NotFoundError,
    ObjectTypeBuilder,
    QueryError,
    RootQueryBuilder,
    Row,
    RowFetcher,
    ScalarMapper,
    SchemaBuildError,
    SchemaCompiler,
    StaticMetadataProvider,
    TableDescriptor,
    TablegraphError,
    TypeRegistry,
    UnsupportedScalarError,
    UrlTemplate,
    build_links,
    compile_schema,
)
from .runtime import ExecutionContext, QueryExecutor, QueryResult
from .service import (
    SqlAlchemyMetadataProvider,
    SqlAlchemyRowFetcher,
    create_app,
    make_engine,
)
from .playground import get_playground_html, mount_playground

__version__ = "0.1.0"

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
    "SqlAlchemyMetadataProvider",
    "SqlAlchemyRowFetcher",
    # Compiler
    "ScalarMapper",
    "TypeRegistry",
    "ObjectTypeBuilder",
    "ColumnResolver",
    "RootQueryBuilder",
    "SchemaCompiler",
    "compile_schema",
    "build_links",
    # Runtime
    "ExecutionContext",
    "QueryExecutor",
    "QueryResult",
    # Config
    "TablegraphConfig",
    "TableConfig",
    "MultiValuedConfig",
    "load_config",
    # Service
    "create_app",
    "make_engine",
    # Playground
    "mount_playground",
    "get_playground_html",
]
