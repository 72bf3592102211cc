# Copyright 2024-present Kensho Technologies, LLC.
from dataclasses import dataclass
from enum import Enum, unique
from typing import Any, Optional, Tuple

from .extraction_directive import ExtractionDirective
from .field_paths import FieldPathTable
from .row_accessor import extract_row_values
from .tabular_schema import TabularSchema


@unique
class ResultShape(Enum):
    """The recognized shapes of query output, one per shape classifier."""

    EXTERNAL = "external"  # The caller supplied the tabular schema.
    VERTEX = "vertex"  # Rows are vertices of one type, described by graph schema metadata.
    EDGE = "edge"  # Rows are edges of one type, described by graph schema metadata.
    VERTEX_SET = "vertex_set"  # A printed vertex expression set.
    MAP_ACCUM = "map_accum"  # A printed MapAccum, read as key/value rows.
    PRINT = "print"  # PRINT output whose objects all share one shape.
    UNKNOWN = "unknown"  # Fallback: the whole row as one JSON string column.


@dataclass(frozen=True)
class ResultAccessor:
    """The output table's schema, together with how to read each column out of a JSON row.

    Built once per query and shared, read-only, by every task reading rows of that query.

    Attributes:
        shape: which shape classifier produced this accessor.
        schema: the ordered columns of the output table.
        field_paths: one entry per column of the schema, in the same order.
        extraction: if set, rows come from results[row_number][object_key] instead of results.
    """

    shape: ResultShape
    schema: TabularSchema
    field_paths: FieldPathTable
    extraction: Optional[ExtractionDirective] = None

    def __post_init__(self) -> None:
        """Validate fields."""
        if self.schema.names != self.field_paths.names:
            raise AssertionError(
                f"Expected the field paths to line up with the schema columns, but got "
                f"{self.field_paths.names} for columns {self.schema.names}"
            )

    def extract(self, row: Any) -> Tuple[Any, ...]:
        """Return the JSON value of every column for the given row, in column order."""
        return extract_row_values(self.field_paths, row)
