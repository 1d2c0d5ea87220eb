"""
Naming utilities for tablegraph.

Includes:
- GraphQL-safe name sanitizing
- Deterministic type names for lookup tables
"""

from __future__ import annotations

import re
from typing import Optional


# Pre-compiled regex patterns for better performance
_INVALID_NAME_CHARS = re.compile(r"[^_0-9A-Za-z]")
_LEADING_UNDERSCORES = re.compile(r"^_+")


def graphql_name(name: str) -> str:
    """
    Convert an arbitrary table or column name into a valid GraphQL name.

    Examples:
        RowId -> RowId
        Created By -> Created_By
        2ndValue -> _2ndValue
        __hidden -> _hidden
    """
    result = _INVALID_NAME_CHARS.sub("_", name)
    if not result:
        return "_"
    if result[0].isdigit():
        result = "_" + result
    # Names starting with "__" are reserved for introspection
    if result.startswith("__"):
        result = _LEADING_UNDERSCORES.sub("_", result)
    return result


def type_name(schema_name: Optional[str], table_name: str) -> str:
    """
    Deterministic object type name for a table.

    Examples:
        ("exp.data", "CellLine") -> exp_data__CellLine
        ("core", "Users") -> core__Users
    """
    schema_part = (schema_name or "").replace(".", "_")
    return graphql_name(f"{schema_part}__{table_name}")


def parse_qualified_name(name: str, default_schema: str) -> tuple[str, str]:
    """
    Split "schema.table" into its parts.

    The table is the last dotted segment, so nested schemas survive:
        "exp.data.CellLine" -> ("exp.data", "CellLine")
        "Item" -> (default_schema, "Item")
    """
    if "." not in name:
        return default_schema, name
    schema_name, _, table_name = name.rpartition(".")
    return schema_name, table_name
