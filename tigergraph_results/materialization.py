# Copyright 2024-present Kensho Technologies, LLC.
"""Coercion of extracted JSON values into the Python values of their output columns."""
from decimal import Decimal, InvalidOperation
import json
import struct
from typing import Any, Tuple

from .exceptions import ValueCoercionError
from .result_accessor import ResultAccessor
from .type_mapper import DECIMAL_PRECISION, ColumnType


def _to_json_text(value: Any) -> str:
    """Serialize a JSON node compactly, e.g. {"a":123}."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _check_numeric_text(value: Any) -> None:
    # Python's numeric parsers accept "1_000", which is never valid JSON number text.
    if isinstance(value, str) and "_" in value:
        raise ValueError("not a number")


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValueError("booleans are not numbers")
    if isinstance(value, (int, float, str)):
        _check_numeric_text(value)
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError("not a number")
    else:
        raise ValueError("not a number")

    if not result.is_finite() or result != result.to_integral_value():
        raise ValueError("not an integral number")
    # Count integer digits from the exponent too, e.g. 1E+40 has 41 of them.
    if not result.is_zero() and result.adjusted() + 1 > DECIMAL_PRECISION:
        raise ValueError(f"more than {DECIMAL_PRECISION} digits")
    return Decimal(int(result))


def _to_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError("not a number")
    _check_numeric_text(value)
    return float(value)


def _to_float32(value: Any) -> float:
    # Round through single precision, as a 32-bit float column would.
    return struct.unpack("f", struct.pack("f", _to_float(value)))[0]


def _to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        elif lowered == "false":
            return False
    raise ValueError("not a boolean")


def _to_binary(value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode("utf-8")
    raise ValueError("not binary data")


def _to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    return _to_json_text(value)


_COERCIONS = {
    ColumnType.DECIMAL: _to_decimal,
    ColumnType.FLOAT32: _to_float32,
    ColumnType.FLOAT64: _to_float,
    ColumnType.BOOLEAN: _to_boolean,
    ColumnType.BINARY: _to_binary,
    ColumnType.STRING: _to_string,
}


def coerce_value(column_type: ColumnType, value: Any, column_name: str = "") -> Any:
    """Convert one extracted JSON value to the Python value of its column type.

    Args:
        column_type: the type of the column the value belongs to.
        value: the JSON value, as returned by the row accessor.
        column_name: optional column name, only used in error messages.

    Returns:
        None for a null value, and otherwise a Decimal, float, bool, bytes or str according to
        the column type. Non-textual values of STRING columns are serialized as compact JSON.

    Raises:
        ValueCoercionError: if the value cannot be represented in the column type.
    """
    if value is None:
        return None
    try:
        return _COERCIONS[column_type](value)
    except (ValueError, OverflowError) as e:
        raise ValueCoercionError(
            "Cannot read value {!r} of column {} as {}: {}".format(
                value, column_name, column_type.name, e
            )
        ) from e


def materialize_row(accessor: ResultAccessor, row: Any) -> Tuple[Any, ...]:
    """Extract every column of the row and coerce it to its column type, in column order."""
    return tuple(
        coerce_value(column.column_type, value, column.name)
        for column, value in zip(accessor.schema, accessor.extract(row))
    )
