# Copyright 2024-present Kensho Technologies, LLC.
"""Commonly-used functions and data types from this package."""
from typing import Any, Iterator, Mapping, Optional, Tuple

from .exceptions import (  # noqa
    InvalidArgumentError,
    InvalidSchemaError,
    TigerGraphResultsError,
    ValueCoercionError,
)
from .extraction_directive import ExtractionDirective, parse_extraction_directive  # noqa
from .field_paths import FieldPath, FieldPathEntry, FieldPathTable  # noqa
from .materialization import coerce_value, materialize_row  # noqa
from .options import QUERY_RESULTS_EXTRACT, ReadOptions  # noqa
from .result_accessor import ResultAccessor, ResultShape  # noqa
from .result_rows import iter_result_rows
from .row_accessor import extract_row_values  # noqa
from .schema_resolver import resolve_external_schema, resolve_query_result_schema  # noqa
from .shape_classifiers import from_edge_metadata, from_vertex_metadata  # noqa
from .tabular_schema import ColumnSpec, TabularSchema  # noqa
from .type_mapper import ColumnType, map_tigergraph_type  # noqa


__package_name__ = "tigergraph-results"
__version__ = "0.3.0"


def read_query_results(
    metadata: Any, results: Any, options: Optional[Mapping[str, str]] = None
) -> Tuple[TabularSchema, Iterator[Tuple[Any, ...]]]:
    """Infer the output table of a query and lazily materialize its rows.

    Args:
        metadata: the query's output metadata, as returned alongside its results.
        results: the "results" list of the query response.
        options: optional string option map of the read, e.g. {"query.results.extract": "1:@@m"}.

    Returns:
        tuple (schema, rows), where schema is the TabularSchema of the output table and rows
        is an iterator of tuples of column values, coerced to their column types

    Raises:
        InvalidArgumentError: if the options are malformed.
    """
    read_options = ReadOptions.from_options(options)
    accessor = resolve_query_result_schema(metadata, read_options.results_extract)
    rows = (materialize_row(accessor, row) for row in iter_result_rows(results, accessor))
    return accessor.schema, rows
