# Copyright 2024-present Kensho Technologies, LLC.
from typing import Any, Tuple

from .field_paths import MISSING, FieldPathEntry, FieldPathTable, find_value, is_container_node


def get_field_value(entry: FieldPathEntry, row: Any) -> Any:
    """Return the JSON node for one column of the row, or None if it cannot be found.

    A scalar row (no children) is returned as-is for every column. Otherwise the entry's path is
    followed; if it does not resolve, recursive entries fall back to a depth-first search of the
    whole row for a member keyed by the column name. No type coercion takes place.
    """
    if not is_container_node(row):
        return row

    value = entry.path.resolve(row)
    if value is not MISSING:
        return value

    if entry.recursive:
        found_value = find_value(row, entry.name)
        if found_value is not MISSING:
            return found_value
    return None


def extract_row_values(field_paths: FieldPathTable, row: Any) -> Tuple[Any, ...]:
    """Return the JSON value of every column of the row, in field path table order."""
    return tuple(get_field_value(entry, row) for entry in field_paths)
