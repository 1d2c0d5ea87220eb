"""
Scalar mapping - native column types to GraphQL scalars.

    boolean                      -> Boolean
    bigint, decimal              -> Long
    double, real                 -> Float
    smallint, integer, tinyint   -> Int
    date, time, timestamp        -> String (dates are opaque strings)
    char, varchar, longvarchar   -> String
    guid                         -> ID
    binary, null, other          -> String ("fallback") or error ("strict")

Usage:
    mapper = ScalarMapper(policy="strict")
    mapper.scalar_for(NativeType.INTEGER)              # GraphQLInt
    mapper.field_type(column)                          # NonNull-wrapped if required
"""

from __future__ import annotations

import base64
import logging
import uuid
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Literal, Optional, Union

from graphql import (
    GraphQLBoolean,
    GraphQLError,
    GraphQLFloat,
    GraphQLID,
    GraphQLInt,
    GraphQLScalarType,
    GraphQLString,
    IntValueNode,
    ValueNode,
)

from .defs import ColumnDescriptor, NativeType
from .errors import UnsupportedScalarError
from .registry import NonNull, TypeExpr

logger = logging.getLogger(__name__)


ScalarPolicy = Literal["fallback", "strict"]

SCALAR_POLICIES = ("fallback", "strict")


# =============================================================================
# Long scalar (graphql-core only ships 32-bit Int)
# =============================================================================


def _serialize_long(output_value: Any) -> int:
    if isinstance(output_value, bool):
        return int(output_value)
    if isinstance(output_value, int):
        return output_value
    if isinstance(output_value, (float, Decimal)):
        try:
            num = int(output_value)
        except (ValueError, OverflowError, ArithmeticError):
            num = None
        if num is not None and num == output_value:
            return num
    if isinstance(output_value, str) and output_value.strip():
        try:
            return int(output_value)
        except ValueError:
            pass
    raise GraphQLError(f"Long cannot represent non-integer value: {output_value!r}")


def _parse_long_value(input_value: Any) -> int:
    if isinstance(input_value, int) and not isinstance(input_value, bool):
        return input_value
    raise GraphQLError(f"Long cannot represent non-integer value: {input_value!r}")


def _parse_long_literal(value_node: ValueNode, _variables: Any = None) -> int:
    if not isinstance(value_node, IntValueNode):
        raise GraphQLError("Long cannot represent non-integer value", value_node)
    return int(value_node.value)


GraphQLLong = GraphQLScalarType(
    name="Long",
    description="The `Long` scalar type represents 64-bit signed whole numbers.",
    serialize=_serialize_long,
    parse_value=_parse_long_value,
    parse_literal=_parse_long_literal,
)


# =============================================================================
# Native type -> scalar
# =============================================================================


_SCALARS: dict[NativeType, GraphQLScalarType] = {
    NativeType.BOOLEAN: GraphQLBoolean,
    NativeType.BIGINT: GraphQLLong,
    NativeType.DECIMAL: GraphQLLong,
    NativeType.DOUBLE: GraphQLFloat,
    NativeType.REAL: GraphQLFloat,
    NativeType.SMALLINT: GraphQLInt,
    NativeType.INTEGER: GraphQLInt,
    NativeType.TINYINT: GraphQLInt,
    # TODO: expose a Date scalar once clients agree on a wire format
    NativeType.DATE: GraphQLString,
    NativeType.TIME: GraphQLString,
    NativeType.TIMESTAMP: GraphQLString,
    NativeType.CHAR: GraphQLString,
    NativeType.VARCHAR: GraphQLString,
    NativeType.LONGVARCHAR: GraphQLString,
    NativeType.GUID: GraphQLID,
}


class ScalarMapper:
    """Maps native column types to GraphQL scalars under one project-wide policy."""

    def __init__(self, policy: ScalarPolicy = "fallback"):
        if policy not in SCALAR_POLICIES:
            raise ValueError(f"Unknown scalar policy '{policy}', must be one of {SCALAR_POLICIES}")
        self.policy = policy

    def scalar_for(
        self,
        native_type: Union[NativeType, str],
        column: Optional[str] = None,
    ) -> GraphQLScalarType:
        """
        Scalar for a native type.

        Raises:
            UnsupportedScalarError: under the strict policy, for types without a mapping
        """
        try:
            known: Optional[NativeType] = NativeType(native_type)
        except ValueError:
            known = None

        scalar = _SCALARS.get(known) if known is not None else None
        if scalar is not None:
            return scalar

        if self.policy == "strict":
            raise UnsupportedScalarError(native_type, column)

        if known is None:
            logger.warning(f"Unknown native type '{native_type}' on column '{column}', exposing as String")
        return GraphQLString

    def field_type(self, column: ColumnDescriptor) -> TypeExpr:
        """Scalar for a column, NonNull-wrapped when the column is required."""
        scalar = self.scalar_for(column.native_type, column.name)
        if column.required:
            return NonNull(scalar)
        return scalar


# =============================================================================
# Output coercion
# =============================================================================


def coerce_output(native_type: NativeType, value: Any) -> Any:
    """
    Convert a stored value into something the exposed scalar can serialize.

    Dates and times become ISO strings, GUIDs become strings and binary
    values become base64 text. Everything else passes through.
    """
    if value is None:
        return None

    if isinstance(value, (datetime, date, time)):
        return value.isoformat()

    if isinstance(value, uuid.UUID):
        return str(value)

    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")

    if native_type in (NativeType.DATE, NativeType.TIME, NativeType.TIMESTAMP, NativeType.GUID):
        return str(value)

    return value
