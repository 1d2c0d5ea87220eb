"""
Metadata provider backed by SQLAlchemy reflection.

Turns reflected tables into TableDescriptors:
- SQLAlchemy column types -> NativeType
- primary-key columns are always required
- foreign keys are classified once: a key onto the same table and column is
  SELF, a key onto the configured user table is USER, anything else is LOOKUP
- multi-valued virtual columns and link templates come from configuration

Usage:
    provider = SqlAlchemyMetadataProvider(engine, config)
    table = provider.get_table("main", "Item")
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import inspect
from sqlalchemy import types as sqltypes
from sqlalchemy.engine import Engine

from ..config import TablegraphConfig
from ..core.defs import (
    ColumnDescriptor,
    ForeignKeyDescriptor,
    ForeignKeyKind,
    JunctionDescriptor,
    NativeType,
    TableDescriptor,
)
from ..core.errors import SchemaBuildError
from ..core.utils import parse_qualified_name

logger = logging.getLogger(__name__)


def native_type_for(sql_type: Any) -> NativeType:
    """Map a SQLAlchemy type instance to a NativeType."""
    # Subclasses before their bases
    if isinstance(sql_type, sqltypes.Boolean):
        return NativeType.BOOLEAN
    if isinstance(sql_type, sqltypes.BigInteger):
        return NativeType.BIGINT
    if isinstance(sql_type, sqltypes.SmallInteger):
        return NativeType.SMALLINT
    if isinstance(sql_type, sqltypes.Integer):
        return NativeType.INTEGER
    if isinstance(sql_type, sqltypes.REAL):
        return NativeType.REAL
    if isinstance(sql_type, sqltypes.Float):
        return NativeType.DOUBLE
    if isinstance(sql_type, sqltypes.Numeric):
        return NativeType.DECIMAL if sql_type.scale == 0 else NativeType.DOUBLE
    if isinstance(sql_type, sqltypes.DateTime):
        return NativeType.TIMESTAMP
    if isinstance(sql_type, sqltypes.Date):
        return NativeType.DATE
    if isinstance(sql_type, sqltypes.Time):
        return NativeType.TIME
    if isinstance(sql_type, sqltypes.Uuid):
        return NativeType.GUID
    if isinstance(sql_type, sqltypes.Text):
        return NativeType.LONGVARCHAR
    if isinstance(sql_type, sqltypes.CHAR):
        return NativeType.CHAR
    if isinstance(sql_type, sqltypes.String):
        return NativeType.VARCHAR
    if isinstance(sql_type, sqltypes.LargeBinary):
        return NativeType.LONGVARBINARY
    if isinstance(sql_type, sqltypes._Binary):
        return NativeType.VARBINARY
    if isinstance(sql_type, sqltypes.NullType):
        return NativeType.NULL
    return NativeType.OTHER


class SqlAlchemyMetadataProvider:
    """
    Reflects table metadata from a database.

    Descriptors are cached for the lifetime of the provider, which is one
    request.
    """

    def __init__(self, engine: Engine, config: Optional[TablegraphConfig] = None):
        self.engine = engine
        self.config = config or TablegraphConfig()
        self._inspector = None
        self._schemas: Optional[dict[str, str]] = None
        self._table_names: dict[str, dict[str, str]] = {}
        self._tables: dict[tuple[str, str], Optional[TableDescriptor]] = {}

    @property
    def inspector(self):
        if self._inspector is None:
            self._inspector = inspect(self.engine)
        return self._inspector

    # -------------------------------------------------------------------------
    # Name resolution (case-insensitive)
    # -------------------------------------------------------------------------

    def _resolve_schema(self, schema_name: str) -> Optional[str]:
        if self._schemas is None:
            self._schemas = {name.lower(): name for name in self.inspector.get_schema_names()}
        return self._schemas.get(schema_name.lower())

    def _resolve_table(self, schema: str, table_name: str) -> Optional[str]:
        names = self._table_names.get(schema)
        if names is None:
            names = {}
            for name in self.inspector.get_view_names(schema=schema):
                names[name.lower()] = name
            for name in self.inspector.get_table_names(schema=schema):
                names[name.lower()] = name
            self._table_names[schema] = names
        return names.get(table_name.lower())

    # -------------------------------------------------------------------------
    # MetadataProvider
    # -------------------------------------------------------------------------

    def has_schema(self, schema_name: str) -> bool:
        return self._resolve_schema(schema_name) is not None

    def get_table(self, schema_name: str, table_name: str) -> Optional[TableDescriptor]:
        key = (schema_name.lower(), table_name.lower())
        if key in self._tables:
            return self._tables[key]

        table = None
        schema = self._resolve_schema(schema_name)
        if schema is not None:
            name = self._resolve_table(schema, table_name)
            if name is not None:
                table = self._reflect(schema, name)

        self._tables[key] = table
        return table

    def lookup_table(self, fk: ForeignKeyDescriptor) -> Optional[TableDescriptor]:
        if fk.lookup_schema_name is None or fk.lookup_table_name is None:
            return None
        return self.get_table(fk.lookup_schema_name, fk.lookup_table_name)

    def user_table(self) -> Optional[TableDescriptor]:
        name = self.config.user_table_name()
        if name is None:
            return None
        return self.get_table(*name)

    # -------------------------------------------------------------------------
    # Reflection
    # -------------------------------------------------------------------------

    def _table_comment(self, schema: str, name: str) -> Optional[str]:
        try:
            return self.inspector.get_table_comment(name, schema=schema).get("text")
        except NotImplementedError:
            return None

    def _fk_kind(
        self,
        schema: str,
        table: str,
        column: str,
        ref_schema: str,
        ref_table: str,
        ref_column: Optional[str],
    ) -> ForeignKeyKind:
        same_table = (schema.lower(), table.lower()) == (ref_schema.lower(), ref_table.lower())
        if same_table and ref_column is not None and column.lower() == ref_column.lower():
            return ForeignKeyKind.SELF

        user = self.config.user_table_name()
        if user is not None and (ref_schema.lower(), ref_table.lower()) == (user[0].lower(), user[1].lower()):
            return ForeignKeyKind.USER

        return ForeignKeyKind.LOOKUP

    def _foreign_keys(self, schema: str, name: str) -> dict[str, ForeignKeyDescriptor]:
        result = {}
        for fk in self.inspector.get_foreign_keys(name, schema=schema):
            constrained = fk.get("constrained_columns") or []
            referred = fk.get("referred_columns") or []
            if len(constrained) != 1:
                logger.debug(f"Skipping composite foreign key {constrained} on {schema}.{name}")
                continue

            column = constrained[0]
            ref_schema = fk.get("referred_schema") or schema
            ref_table = fk["referred_table"]
            ref_column = referred[0] if referred else None
            result[column.lower()] = ForeignKeyDescriptor(
                kind=self._fk_kind(schema, name, column, ref_schema, ref_table, ref_column),
                lookup_schema_name=ref_schema,
                lookup_table_name=ref_table,
                lookup_column_name=ref_column,
            )
        return result

    def _multi_valued_columns(
        self,
        schema: str,
        name: str,
        columns: list[ColumnDescriptor],
    ) -> list[ColumnDescriptor]:
        table_config = self.config.table_config(schema, name)
        by_name = {column.name.lower(): column for column in columns}
        result = []
        for column_name, mv in table_config.multi_valued.items():
            parent = by_name.get(mv.parent_key.lower())
            if parent is None:
                raise SchemaBuildError(
                    f"Multi-valued column '{column_name}' on {schema}.{name} uses unknown "
                    f"parent key '{mv.parent_key}'"
                )

            target_schema, target_table = parse_qualified_name(mv.target, schema)
            junction_schema, junction_table = parse_qualified_name(mv.junction, schema)
            result.append(ColumnDescriptor(
                name=column_name,
                native_type=parent.native_type,
                fk=ForeignKeyDescriptor(
                    kind=ForeignKeyKind.MULTI_VALUED,
                    lookup_schema_name=target_schema,
                    lookup_table_name=target_table,
                    lookup_column_name=mv.lookup_column,
                    junction=JunctionDescriptor(
                        schema_name=junction_schema,
                        table_name=junction_table,
                        child_match_field=mv.child_match_field,
                        target_key_field=mv.target_key_field,
                        parent_key=parent.name,
                    ),
                ),
            ))
        return result

    def _reflect(self, schema: str, name: str) -> TableDescriptor:
        logger.debug(f"Reflecting {schema}.{name}")
        pk = self.inspector.get_pk_constraint(name, schema=schema).get("constrained_columns") or []
        pk_lower = {column.lower() for column in pk}
        fks = self._foreign_keys(schema, name)

        columns = []
        for col in self.inspector.get_columns(name, schema=schema):
            column_name = col["name"]
            columns.append(ColumnDescriptor(
                name=column_name,
                native_type=native_type_for(col["type"]),
                description=col.get("comment"),
                required=not col.get("nullable", True) or column_name.lower() in pk_lower,
                fk=fks.get(column_name.lower()),
            ))

        columns.extend(self._multi_valued_columns(schema, name, columns))
        table_config = self.config.table_config(schema, name)

        return TableDescriptor(
            schema_name=schema,
            name=name,
            columns=columns,
            pk_column_names=pk,
            description=self._table_comment(schema, name),
            details_url=table_config.details_url,
            update_url=table_config.update_url,
        )
