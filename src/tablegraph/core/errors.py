"""
Custom exceptions for tablegraph.
"""

from __future__ import annotations

from typing import Any, Optional


class TablegraphError(Exception):
    """Base exception for all tablegraph errors."""
    pass


class NotFoundError(TablegraphError):
    """Raised when a requested schema or table does not exist."""
    pass


class SchemaBuildError(TablegraphError):
    """Raised when the type graph violates a structural contract while being assembled."""
    pass


class UnsupportedScalarError(SchemaBuildError):
    """Raised under the strict scalar policy for a column type with no scalar mapping."""

    def __init__(self, native_type: Any, column: Optional[str] = None):
        self.native_type = native_type
        self.column = column
        where = f" on column '{column}'" if column else ""
        super().__init__(f"Type '{native_type}' not supported{where}")


class QueryError(TablegraphError):
    """Raised when a query document fails to validate or execute."""

    def __init__(
        self,
        message: str,
        locations: Optional[list[tuple[int, int]]] = None,
        path: Optional[list[Any]] = None,
        data: Any = None,
    ):
        self.message = message
        self.locations = locations or []
        self.path = path
        self.data = data
        super().__init__(message)

    @classmethod
    def from_graphql(cls, error: Any, data: Any = None) -> "QueryError":
        """Build from a graphql-core GraphQLError."""
        locations = [(loc.line, loc.column) for loc in (error.locations or [])]
        return cls(error.message, locations=locations, path=error.path, data=data)
