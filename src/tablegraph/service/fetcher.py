"""
Row fetcher backed by SQLAlchemy Core.

Every resolver read goes through one of three methods, each issuing a
single SELECT:

    select_one      WHERE col = :value [AND ...] LIMIT 1
    select_many     WHERE col = :value [AND ...]
    select_related  WHERE target.lookup IN (
                        SELECT junction.target_key FROM junction
                        WHERE junction.child_match = :value)
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from sqlalchemy import MetaData, Table, and_, select
from sqlalchemy.engine import Engine
from sqlalchemy.sql import ColumnElement

from ..core.defs import JunctionDescriptor, TableDescriptor
from ..core.errors import NotFoundError
from ..core.rows import Row

logger = logging.getLogger(__name__)


class SqlAlchemyRowFetcher:
    """
    Reads rows through reflected SQLAlchemy tables.

    Usage:
        fetcher = SqlAlchemyRowFetcher(engine)
        fetcher.select_one(item_table, {"id": 1})
    """

    def __init__(self, engine: Engine, metadata: Optional[MetaData] = None):
        self.engine = engine
        self.metadata = metadata or MetaData()
        self.statement_count = 0

    def _table(self, schema_name: Optional[str], table_name: str) -> Table:
        key = f"{schema_name}.{table_name}" if schema_name else table_name
        table = self.metadata.tables.get(key)
        if table is None:
            table = Table(table_name, self.metadata, schema=schema_name, autoload_with=self.engine)
        return table

    def _column(self, table: Table, name: str) -> ColumnElement:
        column = table.c.get(name)
        if column is not None:
            return column
        lowered = name.lower()
        for candidate in table.c:
            if candidate.name.lower() == lowered:
                return candidate
        raise NotFoundError(f"column: {table.fullname}.{name}")

    def _projection(self, table: Table, columns: Optional[Sequence[str]]) -> list:
        if not columns:
            return [table]
        return [self._column(table, name) for name in columns]

    def _conditions(self, table: Table, filters: dict[str, Any]) -> list:
        return [self._column(table, name) == value for name, value in filters.items()]

    def _execute(self, stmt) -> list[Row]:
        self.statement_count += 1
        with self.engine.connect() as conn:
            return [Row(record) for record in conn.execute(stmt).mappings()]

    def select_one(
        self,
        table: TableDescriptor,
        filters: dict[str, Any],
        columns: Optional[Sequence[str]] = None,
    ) -> Optional[Row]:
        sa_table = self._table(table.schema_name, table.name)
        stmt = select(*self._projection(sa_table, columns))
        conditions = self._conditions(sa_table, filters)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        rows = self._execute(stmt.limit(1))
        return rows[0] if rows else None

    def select_many(
        self,
        table: TableDescriptor,
        filters: dict[str, Any],
        columns: Optional[Sequence[str]] = None,
    ) -> list[Row]:
        sa_table = self._table(table.schema_name, table.name)
        stmt = select(*self._projection(sa_table, columns))
        conditions = self._conditions(sa_table, filters)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        return self._execute(stmt)

    def select_related(
        self,
        table: TableDescriptor,
        lookup_column: str,
        junction: JunctionDescriptor,
        value: Any,
        columns: Optional[Sequence[str]] = None,
    ) -> list[Row]:
        target = self._table(table.schema_name, table.name)
        junction_table = self._table(junction.schema_name, junction.table_name)
        lookup = self._column(target, lookup_column)

        keys = (
            select(self._column(junction_table, junction.target_key_field))
            .where(self._column(junction_table, junction.child_match_field) == value)
        )
        stmt = (
            select(*self._projection(target, columns))
            .where(lookup.in_(keys))
            .order_by(lookup)
        )
        return self._execute(stmt)
