"""
Core dataclass definitions for tablegraph.

These describe a relational table as handed over by a metadata provider:
columns, primary key, foreign keys and link templates. They are read-only
to the schema compiler.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Union
from urllib.parse import quote


class NativeType(str, Enum):
    """Native (JDBC-style) column data types."""
    BOOLEAN = "boolean"
    BIGINT = "bigint"
    DECIMAL = "decimal"
    DOUBLE = "double"
    REAL = "real"
    SMALLINT = "smallint"
    INTEGER = "integer"
    TINYINT = "tinyint"
    DATE = "date"
    TIME = "time"
    TIMESTAMP = "timestamp"
    CHAR = "char"
    VARCHAR = "varchar"
    LONGVARCHAR = "longvarchar"
    GUID = "guid"
    BINARY = "binary"
    VARBINARY = "varbinary"
    LONGVARBINARY = "longvarbinary"
    NULL = "null"
    OTHER = "other"


class ForeignKeyKind(str, Enum):
    """
    What a column's foreign key means for the type graph.

    NONE is never stored on a ForeignKeyDescriptor; it is what
    ColumnDescriptor.fk_kind reports for a column without a key.
    """
    NONE = "none"
    SELF = "self"  # the column identifies its own row (row-id style)
    USER = "user"  # owning user, converges on the canonical user type
    MULTI_VALUED = "multi_valued"  # fans out through a junction table
    LOOKUP = "lookup"  # ordinary single-row lookup


class _LinkDisabled:
    """Sentinel for a link template that is explicitly switched off."""

    def __repr__(self) -> str:
        return "LINK_DISABLED"

    def __bool__(self) -> bool:
        return False


LINK_DISABLED = _LinkDisabled()

_TOKEN_PATTERN = re.compile(r"\$\{([^}]+)\}")


@dataclass(frozen=True)
class UrlTemplate:
    """
    URL template with ${column} substitution.

    Example:
        UrlTemplate("/items/details?id=${RowId}").evaluate({"rowid": 7})
        -> "/items/details?id=7"
    """
    template: str

    @property
    def columns(self) -> list[str]:
        """Column names referenced by the template, in order."""
        return _TOKEN_PATTERN.findall(self.template)

    def evaluate(self, row: Mapping[str, Any]) -> Optional[str]:
        """
        Substitute row values into the template.

        Returns None when a referenced value is null or missing.
        """
        lowered = {str(k).lower(): v for k, v in row.items()}
        values = {}
        for name in self.columns:
            value = lowered.get(name.lower())
            if value is None:
                return None
            values[name] = quote(str(value), safe="")

        return _TOKEN_PATTERN.sub(lambda m: values[m.group(1)], self.template)


LinkSpec = Union[UrlTemplate, _LinkDisabled, None]


@dataclass(frozen=True)
class JunctionDescriptor:
    """
    Junction relationship behind a multi-valued foreign key.

    Example: Item.tags goes through ItemTag, where ItemTag.item_id matches
    Item.id and ItemTag.tag_id points at Tag.id.
    """
    schema_name: str
    table_name: str  # "ItemTag"
    child_match_field: str  # junction field matching the parent key (e.g., "item_id")
    target_key_field: str  # junction field pointing at the target (e.g., "tag_id")
    parent_key: str = "id"  # source row field whose value is matched


@dataclass(frozen=True)
class ForeignKeyDescriptor:
    """Column-level reference to a row in another (or the same) table."""
    kind: ForeignKeyKind
    lookup_schema_name: Optional[str]
    lookup_table_name: Optional[str]
    lookup_column_name: Optional[str] = None
    junction: Optional[JunctionDescriptor] = None

    def __post_init__(self):
        if self.kind is ForeignKeyKind.NONE:
            raise ValueError("ForeignKeyKind.NONE is expressed as a missing foreign key")
        if self.kind is ForeignKeyKind.MULTI_VALUED and self.junction is None:
            raise ValueError("Multi-valued foreign keys require a junction")

    @property
    def multi_valued(self) -> bool:
        return self.kind is ForeignKeyKind.MULTI_VALUED


@dataclass(frozen=True)
class ColumnDescriptor:
    """Definition of a table column."""
    name: str
    native_type: NativeType
    description: Optional[str] = None
    required: bool = False
    fk: Optional[ForeignKeyDescriptor] = None

    @property
    def fk_kind(self) -> ForeignKeyKind:
        return self.fk.kind if self.fk is not None else ForeignKeyKind.NONE

    @property
    def value_key(self) -> str:
        """Row key holding this column's value (virtual multi-valued columns read the parent key)."""
        if self.fk is not None and self.fk.junction is not None:
            return self.fk.junction.parent_key
        return self.name


@dataclass(frozen=True)
class TableDescriptor:
    """Complete description of a table as exposed by a metadata provider."""
    schema_name: str
    name: str
    columns: tuple[ColumnDescriptor, ...]
    pk_column_names: tuple[str, ...] = ()
    description: Optional[str] = None
    details_url: LinkSpec = None
    update_url: LinkSpec = None

    def __post_init__(self):
        # Accept lists from callers while keeping the descriptor hashable
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "pk_column_names", tuple(self.pk_column_names))

    def get_column(self, name: str) -> Optional[ColumnDescriptor]:
        """Case-insensitive column lookup."""
        lowered = name.lower()
        for column in self.columns:
            if column.name.lower() == lowered:
                return column
        return None

    @property
    def pk_columns(self) -> list[ColumnDescriptor]:
        columns = []
        for name in self.pk_column_names:
            column = self.get_column(name)
            if column is None:
                raise KeyError(f"Primary key column '{name}' not in {self.schema_name}.{self.name}")
            columns.append(column)
        return columns

    @property
    def qualified_name(self) -> str:
        return f"{self.schema_name}.{self.name}"
