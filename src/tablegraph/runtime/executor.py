"""
Query executor - builds the schema for a table and runs a query document.

Handles:
- Resolving the root table (unknown schema/table -> NotFoundError)
- Compiling a fresh schema for the request
- Executing the document with graphql-core
- Surfacing the first error as a QueryError

Usage:
    executor = QueryExecutor(provider, fetcher)
    data = executor.run("main", "Item", "{ Item(id: 1) { name } }")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from graphql import GraphQLError, GraphQLSchema, graphql_sync

from ..core.compiler import SchemaCompiler
from ..core.defs import TableDescriptor
from ..core.errors import NotFoundError, QueryError
from ..core.provider import MetadataProvider, RowFetcher
from ..core.scalars import ScalarPolicy
from .context import ExecutionContext

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    """Result of executing one query document."""
    data: Optional[dict[str, Any]] = None
    errors: list[GraphQLError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def first_error(self) -> Optional[QueryError]:
        if not self.errors:
            return None
        return QueryError.from_graphql(self.errors[0], data=self.data)

    def formatted(self) -> dict[str, Any]:
        """Standard GraphQL response shape."""
        response: dict[str, Any] = {"data": self.data}
        if self.errors:
            response["errors"] = [error.formatted for error in self.errors]
        return response


class QueryExecutor:
    """
    Executes query documents against per-request schemas.

    One executor serves one request: it owns the provider and fetcher of
    that request and builds a new schema on every call.
    """

    def __init__(
        self,
        provider: MetadataProvider,
        fetcher: RowFetcher,
        *,
        scalar_policy: ScalarPolicy = "fallback",
    ):
        self.provider = provider
        self.fetcher = fetcher
        self.scalar_policy = scalar_policy

    def get_table(self, schema_name: str, table_name: str) -> TableDescriptor:
        """
        Resolve the root table.

        Raises:
            NotFoundError: if the schema or table does not exist
        """
        if not self.provider.has_schema(schema_name):
            raise NotFoundError(f"schema: {schema_name}")

        table = self.provider.get_table(schema_name, table_name)
        if table is None:
            raise NotFoundError(f"query: {table_name}")
        return table

    def build_schema(self, schema_name: str, table_name: str) -> GraphQLSchema:
        table = self.get_table(schema_name, table_name)
        return SchemaCompiler(self.provider, scalar_policy=self.scalar_policy).compile(table)

    def execute(
        self,
        schema_name: str,
        table_name: str,
        document: str,
        variables: Optional[dict[str, Any]] = None,
        operation_name: Optional[str] = None,
    ) -> QueryResult:
        """
        Execute a document and return data plus every reported error.

        Raises:
            NotFoundError: if the root table does not exist
            SchemaBuildError: if the schema cannot be assembled
        """
        schema = self.build_schema(schema_name, table_name)
        context = ExecutionContext(fetcher=self.fetcher)

        result = graphql_sync(
            schema,
            document,
            context_value=context,
            variable_values=variables,
            operation_name=operation_name,
        )

        errors = list(result.errors or [])
        for error in errors:
            if error.original_error is not None:
                logger.warning(
                    f"Field error at {error.path}: {error.message}",
                    exc_info=error.original_error,
                )

        return QueryResult(data=result.data, errors=errors)

    def run(
        self,
        schema_name: str,
        table_name: str,
        document: str,
        variables: Optional[dict[str, Any]] = None,
    ) -> Optional[dict[str, Any]]:
        """
        Execute a document and return its data.

        Raises:
            NotFoundError: if the root table does not exist
            SchemaBuildError: if the schema cannot be assembled
            QueryError: built from the first reported error
        """
        result = self.execute(schema_name, table_name, document, variables)
        error = result.first_error()
        if error is not None:
            raise error
        return result.data
