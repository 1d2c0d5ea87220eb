"""
Collaborator interfaces consumed by the schema compiler and resolvers.

- MetadataProvider: resolves schema/table names to TableDescriptors
- RowFetcher: reads rows for the root field and foreign-key resolvers

Concrete SQLAlchemy implementations live in tablegraph.service.
StaticMetadataProvider is an in-memory provider over ready-made descriptors.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Protocol, Sequence, runtime_checkable

from .defs import ForeignKeyDescriptor, JunctionDescriptor, TableDescriptor
from .rows import Row
from .utils import parse_qualified_name


@runtime_checkable
class MetadataProvider(Protocol):
    """Resolves table metadata. Returns None as the not-found signal."""

    def has_schema(self, schema_name: str) -> bool:
        ...

    def get_table(self, schema_name: str, table_name: str) -> Optional[TableDescriptor]:
        ...

    def lookup_table(self, fk: ForeignKeyDescriptor) -> Optional[TableDescriptor]:
        ...

    def user_table(self) -> Optional[TableDescriptor]:
        ...


@runtime_checkable
class RowFetcher(Protocol):
    """
    Reads rows for resolvers.

    Every foreign-key resolver goes through exactly one of these calls, so
    batching or caching can be layered on here without touching resolvers.
    """

    def select_one(
        self,
        table: TableDescriptor,
        filters: dict[str, Any],
        columns: Optional[Sequence[str]] = None,
    ) -> Optional[Row]:
        ...

    def select_many(
        self,
        table: TableDescriptor,
        filters: dict[str, Any],
        columns: Optional[Sequence[str]] = None,
    ) -> list[Row]:
        ...

    def select_related(
        self,
        table: TableDescriptor,
        lookup_column: str,
        junction: JunctionDescriptor,
        value: Any,
        columns: Optional[Sequence[str]] = None,
    ) -> list[Row]:
        ...


class StaticMetadataProvider:
    """
    Metadata provider over a fixed set of descriptors.

    Example:
        provider = StaticMetadataProvider([item_table, user_table], user_table="core.Users")
        provider.get_table("main", "item")  # case-insensitive
    """

    def __init__(
        self,
        tables: Iterable[TableDescriptor] = (),
        *,
        user_table: Optional[str] = None,
        default_schema: str = "main",
    ):
        self._tables: dict[tuple[str, str], TableDescriptor] = {}
        self._user_table = user_table
        self.default_schema = default_schema
        for table in tables:
            self.add(table)

    def add(self, table: TableDescriptor):
        """Register (or replace) a table descriptor."""
        self._tables[(table.schema_name.lower(), table.name.lower())] = table

    def has_schema(self, schema_name: str) -> bool:
        lowered = schema_name.lower()
        return any(schema == lowered for schema, _ in self._tables)

    def get_table(self, schema_name: str, table_name: str) -> Optional[TableDescriptor]:
        return self._tables.get((schema_name.lower(), table_name.lower()))

    def lookup_table(self, fk: ForeignKeyDescriptor) -> Optional[TableDescriptor]:
        if fk.lookup_schema_name is None or fk.lookup_table_name is None:
            return None
        return self.get_table(fk.lookup_schema_name, fk.lookup_table_name)

    def user_table(self) -> Optional[TableDescriptor]:
        if not self._user_table:
            return None
        schema_name, table_name = parse_qualified_name(self._user_table, self.default_schema)
        return self.get_table(schema_name, table_name)
