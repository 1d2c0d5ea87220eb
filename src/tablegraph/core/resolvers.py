"""
Field resolvers - per-column data fetching.

A ColumnResolver runs lazily, once per requested field per row:

- passthrough: the column value itself (no foreign key, row-id style key,
  or a key whose target could not be located at build time)
- lookup: one row from the target table where lookup_column = value
- multi-valued: the target rows reached through the junction table

Every resolver that crosses a foreign key issues exactly one call on the
RowFetcher found in the execution context. Nothing is cached or batched.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Mapping, Optional

from .defs import ColumnDescriptor, TableDescriptor
from .errors import SchemaBuildError
from .provider import RowFetcher
from .rows import Row
from .scalars import coerce_output

logger = logging.getLogger(__name__)


ResolveMode = Literal["passthrough", "lookup", "multi_valued"]


def row_value(row: Mapping[str, Any], key: str) -> Any:
    """Case-insensitive value lookup on any mapping."""
    if isinstance(row, Row):
        return row.get(key)
    if key in row:
        return row[key]
    lowered = key.lower()
    for name, value in row.items():
        if str(name).lower() == lowered:
            return value
    return None


class ColumnResolver:
    """
    Resolver for one column of an object type.

    Args:
        column: The column being resolved
        target: Lookup table when the foreign key was expanded into an
            object type, None to pass the stored value through
    """

    def __init__(self, column: ColumnDescriptor, target: Optional[TableDescriptor] = None):
        self.column = column
        self.target = target
        self.lookup_column: Optional[str] = None

        if target is not None:
            if column.fk is None:
                raise SchemaBuildError(f"Column '{column.name}' has a lookup target but no foreign key")
            self.lookup_column = column.fk.lookup_column_name or self._default_lookup_column(target)

    def _default_lookup_column(self, target: TableDescriptor) -> str:
        if len(target.pk_column_names) != 1:
            raise SchemaBuildError(
                f"Column '{self.column.name}' has no lookup column and "
                f"{target.qualified_name} has no single-column primary key"
            )
        return target.pk_column_names[0]

    @property
    def mode(self) -> ResolveMode:
        if self.target is None:
            return "passthrough"
        if self.column.fk is not None and self.column.fk.multi_valued:
            return "multi_valued"
        return "lookup"

    def __call__(self, source: Any, info: Any) -> Any:
        fetcher = info.context.fetcher if info.context is not None else None
        return self.resolve(source, fetcher)

    def resolve(self, row: Optional[Mapping[str, Any]], fetcher: Optional[RowFetcher]) -> Any:
        if row is None:
            return None

        mode = self.mode
        if mode == "passthrough":
            return coerce_output(self.column.native_type, row_value(row, self.column.name))

        value = row_value(row, self.column.value_key)

        if mode == "multi_valued":
            if value is None:
                return []
            logger.debug(
                f"Fetching {self.target.qualified_name} rows related to "
                f"{self.column.name}={value!r}"
            )
            return list(fetcher.select_related(
                self.target,
                self.lookup_column,
                self.column.fk.junction,
                value,
            ))

        if value is None:
            return None
        logger.debug(f"Fetching {self.target.qualified_name} where {self.lookup_column}={value!r}")
        return fetcher.select_one(self.target, {self.lookup_column: value})
