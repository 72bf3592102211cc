# Copyright 2024-present Kensho Technologies, LLC.
from enum import Enum, unique
from typing import Dict, Optional

import sqlalchemy
from sqlalchemy.sql.type_api import TypeEngine


# Integers are wide enough to hold any unsigned 64-bit value without loss of precision.
DECIMAL_PRECISION = 38
DECIMAL_SCALE = 0


@unique
class ColumnType(Enum):
    """The primitive column types a query result column may take in the output table."""

    DECIMAL = "decimal"
    FLOAT32 = "float"
    FLOAT64 = "double"
    BOOLEAN = "boolean"
    BINARY = "binary"
    STRING = "string"

    def to_sqlalchemy_type(self) -> TypeEngine:
        """Return a SQLAlchemy type instance describing this column type."""
        if self is ColumnType.DECIMAL:
            return sqlalchemy.Numeric(precision=DECIMAL_PRECISION, scale=DECIMAL_SCALE)
        elif self is ColumnType.FLOAT32:
            return sqlalchemy.REAL()
        elif self is ColumnType.FLOAT64:
            return sqlalchemy.Double()
        elif self is ColumnType.BOOLEAN:
            return sqlalchemy.Boolean()
        elif self is ColumnType.BINARY:
            return sqlalchemy.LargeBinary()
        elif self is ColumnType.STRING:
            return sqlalchemy.String()
        else:
            raise AssertionError(f"Unreachable code reached: unknown column type {self}")


# Keys are lower-case TigerGraph type names. Complex types (DATETIME, LIST, SET, MAP, UDT, VERTEX,
# EDGE, ...) have no tabular counterpart and are carried as strings.
TIGERGRAPH_TYPE_TO_COLUMN_TYPE: Dict[str, ColumnType] = {
    "int": ColumnType.DECIMAL,
    "uint": ColumnType.DECIMAL,
    "float": ColumnType.FLOAT32,
    "double": ColumnType.FLOAT64,
    "bool": ColumnType.BOOLEAN,
    "boolean": ColumnType.BOOLEAN,
    "fixed_binary": ColumnType.BINARY,
}


def map_tigergraph_type(tigergraph_type_name: Optional[str]) -> ColumnType:
    """Return the column type for a TigerGraph type name, defaulting to STRING.

    The lookup is case-insensitive. Missing, empty, unknown and complex type names all map to
    STRING, so this function never fails.
    """
    if not tigergraph_type_name or not isinstance(tigergraph_type_name, str):
        return ColumnType.STRING
    return TIGERGRAPH_TYPE_TO_COLUMN_TYPE.get(tigergraph_type_name.lower(), ColumnType.STRING)
